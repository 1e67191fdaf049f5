"""Oracle quotes and the freshness/validity gate every quote passes before use.

OracleQuote is a read-only snapshot fetched per calculation. Nothing here
caches quotes or substitutes a default price when a feed misbehaves.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol, final, runtime_checkable

from lockledger.core.errors import InvalidQuote, LockLedgerError, StaleQuote
from lockledger.core.result import Err, Ok
from lockledger.core.types import UtcDatetime


@final
@dataclass(frozen=True, slots=True)
class OracleQuote:
    """Latest round of a price feed.

    price is the raw signed answer in units of 10**-decimals, exactly as the
    feed reports it; non-positive answers are rejected at use, not here.
    """

    oracle: str
    price: int
    decimals: int
    updated_at: UtcDatetime

    def __post_init__(self) -> None:
        if not 0 <= self.decimals <= 77:
            raise TypeError(f"OracleQuote.decimals must be in [0, 77], got {self.decimals}")


@runtime_checkable
class QuoteSource(Protocol):
    """Supplies the latest quote for an oracle identifier."""

    def latest_quote(self, oracle: str) -> Ok[OracleQuote] | Err[LockLedgerError]: ...


_SOURCE = "oracle.quote.check_quote"


def check_quote(
    quote: OracleQuote, now: UtcDatetime, ttl: timedelta,
) -> Ok[OracleQuote] | Err[StaleQuote | InvalidQuote]:
    """Admit a quote only if now - updated_at <= ttl and price > 0."""
    if quote.updated_at.age(now) > ttl:
        return Err(StaleQuote(
            message=(
                f"Quote from {quote.oracle} updated at {quote.updated_at.value.isoformat()} "
                f"is older than {ttl}"
            ),
            code="STALE_QUOTE",
            timestamp=now,
            source=_SOURCE,
            oracle=quote.oracle,
            updated_at=quote.updated_at.value.isoformat(),
            max_age_s=int(ttl.total_seconds()),
        ))
    if quote.price <= 0:
        return Err(InvalidQuote(
            message=f"Oracle {quote.oracle} answered non-positive price {quote.price}",
            code="INVALID_QUOTE",
            timestamp=now,
            source=_SOURCE,
            oracle=quote.oracle,
            price=str(quote.price),
        ))
    return Ok(quote)
