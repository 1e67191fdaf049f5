"""lockledger.claims — signed claims, their verification and the arbiter."""

from lockledger.claims.arbiter import ClaimArbiter as ClaimArbiter
from lockledger.claims.types import Claim as Claim
from lockledger.claims.types import ClaimMessage as ClaimMessage
from lockledger.claims.types import message_hash as message_hash
from lockledger.claims.verifier import EthereumVerifier as EthereumVerifier
from lockledger.claims.verifier import Verifier as Verifier
from lockledger.claims.verifier import sign_digest as sign_digest
