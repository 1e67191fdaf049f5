"""Tests for lockledger.claims.arbiter — expiry, signature and allocation gating."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest
from eth_account import Account

from lockledger.claims.arbiter import ClaimArbiter
from lockledger.claims.types import Claim, message_hash
from lockledger.claims.verifier import EthereumVerifier, sign_digest
from lockledger.core.errors import ClaimExpired, ClaimProcessingFailed, InvalidSignature
from lockledger.core.result import Err, Ok, unwrap
from lockledger.core.types import UtcDatetime
from lockledger.infra.memory_adapter import InMemoryCustody, InMemoryEventBus, InMemoryLockStore
from lockledger.ledger.engine import ResourceLedger

_NOW = UtcDatetime(value=datetime(2025, 6, 15, 12, 0, tzinfo=UTC))
_KEY = "0x" + "11" * 32
_SPONSOR = Account.from_key(_KEY).address


class _StubVerifier:
    def __init__(self, answer: bool) -> None:
        self.answer = answer
        self.calls = 0

    def verify(self, message: bytes, signature: bytes, claimed_signer: str) -> bool:
        self.calls += 1
        return self.answer


class _Env:
    def __init__(self, total: int = 1000) -> None:
        self.store = InMemoryLockStore()
        self.bus = InMemoryEventBus()
        custody = InMemoryCustody()
        custody.fund("O", "T", total)
        self.ledger = ResourceLedger(self.store, custody, self.bus, clock=lambda: _NOW)
        self.lock_id = unwrap(self.ledger.lock("O", "T", total))
        self.arbiter = ClaimArbiter(self.ledger, EthereumVerifier(), clock=lambda: _NOW)

    def snapshot(self) -> object:
        return unwrap(self.store.get_lock(self.lock_id))


def _signed(
    lock_id: int, amount: int = 400, expires_in: timedelta = timedelta(hours=1), key: str = _KEY,
) -> Claim:
    unsigned = Claim(
        claim_hash="0x" + "c1" * 32, sponsor=_SPONSOR, nonce=1,
        expires_at=_NOW.shift(expires_in), lock_id=lock_id, amount=amount, signature=b"",
    )
    return replace(unsigned, signature=sign_digest(key, message_hash(unsigned)))


class TestProcess:
    def test_valid_claim_allocates(self) -> None:
        env = _Env()
        lock = unwrap(env.arbiter.process(_signed(env.lock_id)))
        assert lock.allocated == 400
        assert env.ledger.available_balance("O", "T") == Ok(600)

    def test_publishes_claim_processed(self) -> None:
        env = _Env()
        claim = _signed(env.lock_id)
        unwrap(env.arbiter.process(claim))
        (key, value), = env.bus.get_messages("lockledger.claims")
        assert key == claim.claim_hash
        payload = json.loads(value)
        assert payload["kind"] == "ClaimProcessed"
        assert payload["claim_hash"] == claim.claim_hash

    def test_expired_claim_leaves_ledger_unchanged(self) -> None:
        env = _Env()
        before = env.snapshot()
        result = env.arbiter.process(_signed(env.lock_id, expires_in=-timedelta(seconds=1)))
        assert isinstance(result, Err)
        assert isinstance(result.error, ClaimExpired)
        assert env.snapshot() == before
        assert env.bus.get_messages("lockledger.claims") == []

    def test_expiry_boundary_is_inclusive(self) -> None:
        env = _Env()
        assert isinstance(env.arbiter.process(_signed(env.lock_id, expires_in=timedelta(0))), Ok)

    def test_expiry_checked_before_signature(self) -> None:
        env = _Env()
        stub = _StubVerifier(answer=False)
        arbiter = ClaimArbiter(env.ledger, stub, clock=lambda: _NOW)
        result = arbiter.process(_signed(env.lock_id, expires_in=-timedelta(hours=1)))
        assert isinstance(result.error, ClaimExpired)
        assert stub.calls == 0

    def test_wrong_signer(self) -> None:
        env = _Env()
        before = env.snapshot()
        result = env.arbiter.process(_signed(env.lock_id, key="0x" + "22" * 32))
        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidSignature)
        assert result.error.sponsor == _SPONSOR
        assert env.snapshot() == before

    def test_tampered_amount(self) -> None:
        env = _Env()
        tampered = replace(_signed(env.lock_id, amount=1), amount=900)
        assert isinstance(env.arbiter.process(tampered).error, InvalidSignature)

    def test_ledger_failure_is_collapsed(self, caplog: pytest.LogCaptureFixture) -> None:
        env = _Env()
        before = env.snapshot()
        with caplog.at_level(logging.WARNING, logger="lockledger.claims.arbiter"):
            result = env.arbiter.process(_signed(env.lock_id, amount=1500))
        assert isinstance(result, Err)
        assert isinstance(result.error, ClaimProcessingFailed)
        assert result.error.lock_id == env.lock_id
        assert "available" not in result.error.message
        assert "only 1000 available" in caplog.text
        assert env.snapshot() == before

    def test_unknown_lock_is_processing_failure(self) -> None:
        env = _Env()
        assert isinstance(env.arbiter.process(_signed(999)).error, ClaimProcessingFailed)

    def test_claims_are_not_deduplicated(self) -> None:
        env = _Env()
        claim = _signed(env.lock_id, amount=300)
        unwrap(env.arbiter.process(claim))
        unwrap(env.arbiter.process(claim))
        assert env.ledger.available_balance("O", "T") == Ok(400)

    def test_process_claim_entry_point(self) -> None:
        env = _Env()
        c = _signed(env.lock_id)
        result = env.arbiter.process_claim(
            c.claim_hash, c.sponsor, c.nonce, c.expires_at, c.lock_id, c.amount, c.signature,
        )
        assert unwrap(result).allocated == 400


class TestVerify:
    def test_valid_claim(self) -> None:
        env = _Env()
        assert env.arbiter.verify(_signed(env.lock_id))

    def test_verify_does_not_mutate(self) -> None:
        env = _Env()
        before = env.snapshot()
        env.arbiter.verify(_signed(env.lock_id))
        assert env.snapshot() == before

    def test_idempotent(self) -> None:
        env = _Env()
        for claim in (
            _signed(env.lock_id),
            _signed(env.lock_id, amount=5000),
            _signed(env.lock_id, expires_in=-timedelta(minutes=1)),
        ):
            assert env.arbiter.verify(claim) == env.arbiter.verify(claim)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"amount": 1001},
            {"amount": 0},
            {"expires_in": -timedelta(seconds=1)},
            {"key": "0x" + "33" * 32},
        ],
    )
    def test_rejections(self, kwargs: dict[str, object]) -> None:
        env = _Env()
        assert not env.arbiter.verify(_signed(env.lock_id, **kwargs))  # type: ignore[arg-type]

    def test_destroyed_lock(self) -> None:
        env = _Env()
        claim = _signed(env.lock_id)
        unwrap(env.ledger.unlock(env.lock_id))
        assert not env.arbiter.verify(claim)

    def test_agrees_with_process(self) -> None:
        env = _Env()
        claim = _signed(env.lock_id, amount=1000)
        assert env.arbiter.verify(claim)
        assert isinstance(env.arbiter.process(claim), Ok)
        assert not env.arbiter.verify(claim)
