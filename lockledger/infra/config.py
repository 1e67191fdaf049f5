"""Configuration for the calculator, the ledger event topics and the worker.

Pure configuration data. Settings.from_env reads LOCKLEDGER_* variables;
no secrets are ever part of config.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import final

from lockledger.core.errors import InputError
from lockledger.core.result import Err, Ok
from lockledger.core.types import UtcDatetime

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SPREAD_DENOMINATOR: int = 10**9
QUOTE_TTL: timedelta = timedelta(hours=4)

TOPIC_LOCKS: str = "lockledger.locks"
TOPIC_CLAIMS: str = "lockledger.claims"

TASK_QUEUE: str = "lockledger-settlement"


# ---------------------------------------------------------------------------
# Component configs
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class OracleConfig:
    """Calculator settings.

    strict_reserved_flags rejects request flag bytes with bits other than
    inverse (0x80) and double-price (0x40) set. Turning it off ignores them.
    """

    quote_ttl: timedelta = QUOTE_TTL
    spread_denominator: int = SPREAD_DENOMINATOR
    strict_reserved_flags: bool = True

    def __post_init__(self) -> None:
        if self.quote_ttl <= timedelta(0):
            raise TypeError(f"OracleConfig.quote_ttl must be > 0, got {self.quote_ttl}")
        if self.spread_denominator <= 0:
            raise TypeError(
                f"OracleConfig.spread_denominator must be > 0, got {self.spread_denominator}"
            )


@final
@dataclass(frozen=True, slots=True)
class LedgerConfig:
    """Where ledger and claim events go."""

    locks_topic: str = TOPIC_LOCKS
    claims_topic: str = TOPIC_CLAIMS
    emit_events: bool = True


@final
@dataclass(frozen=True, slots=True)
class WorkerConfig:
    """Temporal connection for the settlement worker."""

    target_host: str = "localhost:7233"
    namespace: str = "default"
    task_queue: str = TASK_QUEUE


@final
@dataclass(frozen=True, slots=True)
class Settings:
    oracle: OracleConfig = field(default_factory=OracleConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    worker: WorkerConfig = field(default_factory=WorkerConfig)

    @staticmethod
    def from_env(environ: Mapping[str, str]) -> Ok[Settings] | Err[InputError]:
        """Build settings from LOCKLEDGER_* variables, defaults for the rest."""
        ttl = QUOTE_TTL
        raw_ttl = environ.get("LOCKLEDGER_QUOTE_TTL_S")
        if raw_ttl is not None:
            if not (raw_ttl.isascii() and raw_ttl.isdigit()) or int(raw_ttl) == 0:
                return _config_err(
                    f"LOCKLEDGER_QUOTE_TTL_S must be a positive integer, got {raw_ttl!r}"
                )
            ttl = timedelta(seconds=int(raw_ttl))

        strict = True
        raw_strict = environ.get("LOCKLEDGER_STRICT_FLAGS")
        if raw_strict is not None:
            match raw_strict.strip().lower():
                case "1" | "true" | "yes" | "on":
                    strict = True
                case "0" | "false" | "no" | "off":
                    strict = False
                case _:
                    return _config_err(
                        f"LOCKLEDGER_STRICT_FLAGS must be a boolean, got {raw_strict!r}"
                    )

        default_worker = WorkerConfig()
        worker = WorkerConfig(
            target_host=environ.get("LOCKLEDGER_TEMPORAL_HOST", default_worker.target_host),
            namespace=environ.get("LOCKLEDGER_TEMPORAL_NAMESPACE", default_worker.namespace),
            task_queue=environ.get("LOCKLEDGER_TASK_QUEUE", default_worker.task_queue),
        )
        return Ok(Settings(
            oracle=OracleConfig(quote_ttl=ttl, strict_reserved_flags=strict),
            ledger=LedgerConfig(),
            worker=worker,
        ))


def _config_err(message: str) -> Err[InputError]:
    return Err(InputError(
        message=message, code="INVALID_CONFIG",
        timestamp=UtcDatetime.now(), source="infra.config.Settings.from_env",
    ))
