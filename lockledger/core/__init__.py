"""lockledger.core — public API for all core types."""

from lockledger.core.amounts import NonEmptyStr as NonEmptyStr
from lockledger.core.amounts import PositiveAmount as PositiveAmount
from lockledger.core.amounts import is_amount as is_amount
from lockledger.core.errors import AccountingError as AccountingError
from lockledger.core.errors import AmountOverflow as AmountOverflow
from lockledger.core.errors import AuthorizationError as AuthorizationError
from lockledger.core.errors import ClaimExpired as ClaimExpired
from lockledger.core.errors import ClaimProcessingFailed as ClaimProcessingFailed
from lockledger.core.errors import FreshnessError as FreshnessError
from lockledger.core.errors import InfrastructureError as InfrastructureError
from lockledger.core.errors import InputError as InputError
from lockledger.core.errors import InsufficientLockedBalance as InsufficientLockedBalance
from lockledger.core.errors import IntegrityError as IntegrityError
from lockledger.core.errors import InvalidAmount as InvalidAmount
from lockledger.core.errors import InvalidAsset as InvalidAsset
from lockledger.core.errors import InvalidOwner as InvalidOwner
from lockledger.core.errors import InvalidQuote as InvalidQuote
from lockledger.core.errors import InvalidSignature as InvalidSignature
from lockledger.core.errors import LockAlreadyActive as LockAlreadyActive
from lockledger.core.errors import LockLedgerError as LockLedgerError
from lockledger.core.errors import LockNotFound as LockNotFound
from lockledger.core.errors import MalformedRequest as MalformedRequest
from lockledger.core.errors import MismatchedOracleDecimals as MismatchedOracleDecimals
from lockledger.core.errors import PersistenceError as PersistenceError
from lockledger.core.errors import StaleQuote as StaleQuote
from lockledger.core.errors import TransferFailed as TransferFailed
from lockledger.core.result import Err as Err
from lockledger.core.result import Ok as Ok
from lockledger.core.result import Result as Result
from lockledger.core.result import unwrap as unwrap
from lockledger.core.serialization import canonical_bytes as canonical_bytes
from lockledger.core.serialization import content_digest as content_digest
from lockledger.core.serialization import content_hash as content_hash
from lockledger.core.types import UINT256_MAX as UINT256_MAX
from lockledger.core.types import Address as Address
from lockledger.core.types import Clock as Clock
from lockledger.core.types import UtcDatetime as UtcDatetime
