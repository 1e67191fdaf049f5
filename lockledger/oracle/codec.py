"""Binary boundary codec for spreaded-amount requests.

Layout (big-endian, no padding):

    single: flags(1) | oracle(20) | spread(32)                               = 53 bytes
    double: flags(1) | oracle1(20) | oracle2(20) | decimalsScale(32, signed)
            | spread(32)                                                     = 105 bytes

Flag bits: 0x80 inverse, 0x40 double-price, 0x3F reserved.
The payload length must match the layout the flag byte selects exactly.
"""

from __future__ import annotations

from lockledger.core.errors import MalformedRequest
from lockledger.core.result import Err, Ok
from lockledger.core.types import Address, UtcDatetime
from lockledger.oracle.request import (
    DOUBLE_PRICE_FLAG,
    INVERSE_FLAG,
    RESERVED_FLAGS_MASK,
    DoubleQuoteRequest,
    SingleQuoteRequest,
    SpreadedAmountRequest,
)

SINGLE_LENGTH: int = 1 + 20 + 32
DOUBLE_LENGTH: int = 1 + 20 + 20 + 32 + 32

_SOURCE_DECODE = "oracle.codec.decode_request"
_SOURCE_ENCODE = "oracle.codec.encode_request"


def _malformed(
    message: str, expected: int, actual: int, source: str = _SOURCE_DECODE,
) -> Err[MalformedRequest]:
    return Err(MalformedRequest(
        message=message, code="MALFORMED_REQUEST",
        timestamp=UtcDatetime.now(), source=source,
        expected_length=expected, actual_length=actual,
    ))


def decode_request(
    blob: bytes, *, strict_reserved_flags: bool = True,
) -> Ok[SpreadedAmountRequest] | Err[MalformedRequest]:
    """Decode the boundary encoding into a request variant.

    Short and overlong payloads are rejected, never truncated or padded.
    """
    if len(blob) == 0:
        return _malformed("Empty request: missing flag byte", SINGLE_LENGTH, 0)

    flags = blob[0]
    is_double = flags & DOUBLE_PRICE_FLAG == DOUBLE_PRICE_FLAG
    expected = DOUBLE_LENGTH if is_double else SINGLE_LENGTH

    if strict_reserved_flags:
        if flags & RESERVED_FLAGS_MASK:
            return _malformed(
                f"Reserved flag bits set: 0x{flags:02x}", expected, len(blob),
            )
        if is_double and flags & INVERSE_FLAG:
            return _malformed(
                f"Inverse flag is meaningless in double-price mode: 0x{flags:02x}",
                expected, len(blob),
            )

    if len(blob) != expected:
        mode = "double" if is_double else "single"
        return _malformed(
            f"{mode}-price request must be {expected} bytes, got {len(blob)}",
            expected, len(blob),
        )

    if is_double:
        oracle1 = Address.from_bytes(blob[1:21]).unwrap()
        oracle2 = Address.from_bytes(blob[21:41]).unwrap()
        decimals_scale = int.from_bytes(blob[41:73], "big", signed=True)
        spread = int.from_bytes(blob[73:105], "big")
        return Ok(DoubleQuoteRequest(
            oracle1=oracle1.value, oracle2=oracle2.value,
            decimals_scale=decimals_scale, spread=spread,
        ))

    oracle = Address.from_bytes(blob[1:21]).unwrap()
    spread = int.from_bytes(blob[21:53], "big")
    return Ok(SingleQuoteRequest(
        oracle=oracle.value, spread=spread,
        inverse=flags & INVERSE_FLAG == INVERSE_FLAG,
    ))


def encode_request(request: SpreadedAmountRequest) -> Ok[bytes] | Err[MalformedRequest]:
    """Inverse of decode_request. Oracle identifiers must be 20-byte addresses."""
    match request:
        case SingleQuoteRequest(oracle=oracle, spread=spread):
            match Address.parse(oracle):
                case Err(e):
                    return _malformed(f"oracle: {e}", SINGLE_LENGTH, 0, _SOURCE_ENCODE)
                case Ok(addr):
                    pass
            return Ok(
                bytes([request.flags])
                + addr.to_bytes()
                + spread.to_bytes(32, "big")
            )
        case DoubleQuoteRequest(
            oracle1=oracle1, oracle2=oracle2, decimals_scale=scale, spread=spread,
        ):
            match Address.parse(oracle1):
                case Err(e):
                    return _malformed(f"oracle1: {e}", DOUBLE_LENGTH, 0, _SOURCE_ENCODE)
                case Ok(addr1):
                    pass
            match Address.parse(oracle2):
                case Err(e):
                    return _malformed(f"oracle2: {e}", DOUBLE_LENGTH, 0, _SOURCE_ENCODE)
                case Ok(addr2):
                    pass
            return Ok(
                bytes([request.flags])
                + addr1.to_bytes()
                + addr2.to_bytes()
                + scale.to_bytes(32, "big", signed=True)
                + spread.to_bytes(32, "big")
            )
