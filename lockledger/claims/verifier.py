"""Pluggable signature verification for claims.

Claim logic only sees the Verifier protocol, so tests can swap in a stub.
EthereumVerifier recovers the signer of an EIP-191 personal message over
the 32-byte claim digest.
"""

from __future__ import annotations

from typing import Protocol, final, runtime_checkable

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys.exceptions import BadSignature
from eth_utils import ValidationError

# r (32B) | s (32B) | v (1B)
SIGNATURE_LENGTH: int = 65
_RECOVERY_IDS: frozenset[int] = frozenset({0, 1, 27, 28})


@runtime_checkable
class Verifier(Protocol):
    def verify(self, message: bytes, signature: bytes, claimed_signer: str) -> bool: ...


@final
class EthereumVerifier:
    """secp256k1 recovery via eth_account. Malformed signatures verify as False."""

    def verify(self, message: bytes, signature: bytes, claimed_signer: str) -> bool:
        if len(signature) != SIGNATURE_LENGTH or signature[-1] not in _RECOVERY_IDS:
            return False
        try:
            recovered = Account.recover_message(
                encode_defunct(primitive=message), signature=signature,
            )
        except (BadSignature, ValidationError, ValueError):
            return False
        return recovered.lower() == claimed_signer.lower()


def sign_digest(private_key: str | bytes, message: bytes) -> bytes:
    """Sign `message` as an EIP-191 personal message; the counterpart of EthereumVerifier."""
    account = Account.from_key(private_key)
    signed = account.sign_message(encode_defunct(primitive=message))
    return bytes(signed.signature)
