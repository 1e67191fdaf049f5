"""Result[T, E] — errors as values for every fallible lockledger operation.

Ledger, calculator and arbiter functions return Ok[T] | Err[E] and never
raise for domain failures. Callers pattern-match on the two variants.

Supports: .map, .bind, .unwrap, .map_err, .is_ok. Free function: unwrap.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, NoReturn, final


@final
@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Success variant."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def bind[U, E](self, f: Callable[[T], Ok[U] | Err[E]]) -> Ok[U] | Err[E]:
        """Chain a step that may itself fail."""
        return f(self.value)

    def unwrap(self) -> T:
        return self.value

    def map_err(self, f: Callable[[Any], Any]) -> Ok[T]:  # noqa: ARG002
        return self


@final
@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failure variant."""

    error: E

    @property
    def is_ok(self) -> bool:
        return False

    def map(self, f: Callable[[Any], Any]) -> Err[E]:  # noqa: ARG002
        return self

    def bind(self, f: Callable[[Any], Any]) -> Err[E]:  # noqa: ARG002
        """Short-circuits: the next step never runs."""
        return self

    def unwrap(self) -> NoReturn:
        """Raise RuntimeError, there is no value."""
        raise RuntimeError(f"Called unwrap on Err: {self.error}")

    def map_err[F](self, f: Callable[[E], F]) -> Err[F]:
        """Transform the error, e.g. to collapse it into a coarser kind."""
        return Err(f(self.error))


type Result[T, E] = Ok[T] | Err[E]


# --- Free functions ---


def unwrap[T](result: Ok[T] | Err[Any]) -> T:
    """Extract the Ok value or raise RuntimeError. Tests and boundaries only."""
    if isinstance(result, Ok):
        return result.value
    if isinstance(result, Err):
        raise RuntimeError(f"unwrap on Err: {result.error}")
    raise TypeError(f"Expected Ok or Err, got {type(result).__name__}")
