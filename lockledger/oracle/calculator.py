"""Oracle-driven settlement amount calculator.

Converts a base amount into the counter-asset amount of a trade leg.

    single, direct:   amount * spread * price / 10**decimals / D
    single, inverse:  amount * spread * 10**decimals / price / D
    double:           amount * price1 [* or / 10**|scale|] / price2 * spread / D

D = 1e9. Multiplications come before divisions so floor division loses as
little as possible. Every quote must be fresh (<= TTL old) and positive.
Double mode requires both feeds to report the same decimals; a mismatch is
reported before anything else is looked at.

The calculator is pure with respect to ledger state: it only reads quotes,
so the settlement engine may call it speculatively and repeatedly.
"""

from __future__ import annotations

from typing import final

from lockledger.core.amounts import checked_div, checked_mul, is_amount, pow10
from lockledger.core.errors import (
    AmountOverflow,
    InvalidAmount,
    LockLedgerError,
    MismatchedOracleDecimals,
)
from lockledger.core.result import Err, Ok
from lockledger.core.types import Clock, UtcDatetime
from lockledger.infra.config import OracleConfig
from lockledger.oracle.codec import decode_request
from lockledger.oracle.quote import OracleQuote, QuoteSource, check_quote
from lockledger.oracle.request import (
    DoubleQuoteRequest,
    SingleQuoteRequest,
    SpreadedAmountRequest,
)

_SOURCE = "oracle.calculator.OracleAmountCalculator"


def _arith(
    result: Ok[int] | Err[str], operation: str, now: UtcDatetime,
) -> Ok[int] | Err[AmountOverflow]:
    """Lift a checked-arithmetic Err[str] into AmountOverflow."""
    return result.map_err(lambda detail: AmountOverflow(
        message=f"{operation}: {detail}",
        code="AMOUNT_OVERFLOW",
        timestamp=now,
        source=_SOURCE,
        operation=operation,
    ))


@final
class OracleAmountCalculator:
    """Computes spreaded settlement amounts from live quotes.

    Holds no mutable state: quote_source, config and clock are injected and
    every call fetches fresh quotes.
    """

    def __init__(
        self,
        quote_source: QuoteSource,
        config: OracleConfig | None = None,
        clock: Clock = UtcDatetime.now,
    ) -> None:
        self._quotes = quote_source
        self._config = config if config is not None else OracleConfig()
        self._clock = clock

    @property
    def config(self) -> OracleConfig:
        return self._config

    # -- boundary entry points --

    def get_spreaded_amount(
        self, base_amount: int, encoded_request: bytes,
    ) -> Ok[int] | Err[LockLedgerError]:
        """Decode the binary request and compute the amount for one trade leg."""
        match decode_request(
            encoded_request, strict_reserved_flags=self._config.strict_reserved_flags,
        ):
            case Err() as e:
                return e
            case Ok(request):
                return self.compute_amount(request, base_amount)

    def get_making_amount(
        self, taking_amount: int, extra_data: bytes,
    ) -> Ok[int] | Err[LockLedgerError]:
        """Maker-side amount for a given taking amount."""
        return self.get_spreaded_amount(taking_amount, extra_data)

    def get_taking_amount(
        self, making_amount: int, extra_data: bytes,
    ) -> Ok[int] | Err[LockLedgerError]:
        """Taker-side amount for a given making amount."""
        return self.get_spreaded_amount(making_amount, extra_data)

    # -- core computation --

    def compute_amount(
        self, request: SpreadedAmountRequest, base_amount: int,
    ) -> Ok[int] | Err[LockLedgerError]:
        now = self._clock()
        if not is_amount(base_amount):
            return Err(InvalidAmount(
                message=f"base_amount must be a uint256 integer, got {base_amount!r}",
                code="INVALID_AMOUNT",
                timestamp=now,
                source=f"{_SOURCE}.compute_amount",
                field="base_amount",
                actual=repr(base_amount),
            ))
        match request:
            case SingleQuoteRequest():
                return self._single(request, base_amount, now)
            case DoubleQuoteRequest():
                return self._double(request, base_amount, now)

    def _fresh_quote(
        self, oracle: str, now: UtcDatetime,
    ) -> Ok[OracleQuote] | Err[LockLedgerError]:
        match self._quotes.latest_quote(oracle):
            case Err() as e:
                return e
            case Ok(quote):
                return check_quote(quote, now, self._config.quote_ttl)

    def _single(
        self, request: SingleQuoteRequest, amount: int, now: UtcDatetime,
    ) -> Ok[int] | Err[LockLedgerError]:
        match self._fresh_quote(request.oracle, now):
            case Err() as e:
                return e
            case Ok(quote):
                pass
        match _arith(pow10(quote.decimals), "10**decimals", now):
            case Err() as e:
                return e
            case Ok(scale):
                pass
        denominator = self._config.spread_denominator

        match _arith(checked_mul(amount, request.spread), "amount * spread", now):
            case Err() as e:
                return e
            case Ok(spreaded):
                pass

        if request.inverse:
            # amount * spread * 10**decimals / price / D
            return (
                _arith(checked_mul(spreaded, scale), "amount * spread * 10**decimals", now)
                .bind(lambda n: _arith(checked_div(n, quote.price), "/ price", now))
                .bind(lambda n: _arith(checked_div(n, denominator), "/ D", now))
            )
        # amount * spread * price / 10**decimals / D
        return (
            _arith(checked_mul(spreaded, quote.price), "amount * spread * price", now)
            .bind(lambda n: _arith(checked_div(n, scale), "/ 10**decimals", now))
            .bind(lambda n: _arith(checked_div(n, denominator), "/ D", now))
        )

    def _double(
        self, request: DoubleQuoteRequest, amount: int, now: UtcDatetime,
    ) -> Ok[int] | Err[LockLedgerError]:
        match self._quotes.latest_quote(request.oracle1):
            case Err() as e:
                return e
            case Ok(raw1):
                pass
        match self._quotes.latest_quote(request.oracle2):
            case Err() as e:
                return e
            case Ok(raw2):
                pass
        if raw1.decimals != raw2.decimals:
            return Err(MismatchedOracleDecimals(
                message=(
                    f"Cross rate needs equal decimals: {request.oracle1} has "
                    f"{raw1.decimals}, {request.oracle2} has {raw2.decimals}"
                ),
                code="MISMATCHED_ORACLE_DECIMALS",
                timestamp=now,
                source=f"{_SOURCE}._double",
                decimals1=raw1.decimals,
                decimals2=raw2.decimals,
            ))

        ttl = self._config.quote_ttl
        match check_quote(raw1, now, ttl):
            case Err() as e:
                return e
            case Ok(quote1):
                pass
        match _arith(checked_mul(amount, quote1.price), "amount * price1", now):
            case Err() as e:
                return e
            case Ok(result):
                pass

        scale = request.decimals_scale
        if scale != 0:
            match _arith(pow10(abs(scale)), "10**|decimals_scale|", now):
                case Err() as e:
                    return e
                case Ok(factor):
                    pass
            step = (
                checked_mul(result, factor) if scale > 0 else checked_div(result, factor)
            )
            match _arith(step, "decimals_scale adjustment", now):
                case Err() as e:
                    return e
                case Ok(result):
                    pass

        match check_quote(raw2, now, ttl):
            case Err() as e:
                return e
            case Ok(quote2):
                pass
        denominator = self._config.spread_denominator
        return (
            _arith(checked_div(result, quote2.price), "/ price2", now)
            .bind(lambda n: _arith(checked_mul(n, request.spread), "* spread", now))
            .bind(lambda n: _arith(checked_div(n, denominator), "/ D", now))
        )
