"""Tests for the login attempt guard policy."""

import asyncio
from datetime import timedelta

import pytest

from app.auth.attempt_store import LoginAttemptStore
from app.auth.exceptions import StoreUnavailable
from app.auth.login_guard import (
    LOCKOUT_DURATION,
    LOCKOUT_THRESHOLD,
    UNKNOWN_IDENTIFIER,
    GuardDecision,
    LoginAttemptGuard,
    format_remaining,
)
from app.database import build_session_factory

IP = "1.2.3.4"


async def _fail(guard: LoginAttemptGuard, times: int, identifier: str = IP) -> GuardDecision:
    decision = None
    for _ in range(times):
        decision = await guard.record_failure(identifier)
    return decision


class BrokenStore:
    """Attempt store whose every call fails."""

    async def get(self, identifier):
        raise RuntimeError("connection refused")

    async def increment_failure(self, identifier, now, threshold, lockout):
        raise RuntimeError("connection refused")

    async def delete(self, identifier):
        raise RuntimeError("connection refused")

    async def reset(self, identifier):
        raise RuntimeError("connection refused")


class ReadFailingStore(LoginAttemptStore):
    """Attempt store whose reads fail while writes still succeed."""

    async def get(self, identifier):
        raise RuntimeError("read replica unavailable")


class HangingStore:
    """Attempt store that never answers in time."""

    async def get(self, identifier):
        await asyncio.sleep(5)

    async def increment_failure(self, identifier, now, threshold, lockout):
        await asyncio.sleep(5)


class TestLockoutPolicy:
    async def test_no_record_is_allowed_with_full_budget(self, guard):
        decision = await guard.check(IP)
        assert decision.allowed
        assert decision.attempts_remaining == LOCKOUT_THRESHOLD

    async def test_failures_below_threshold_count_down(self, guard):
        remaining = [
            (await guard.record_failure(IP)).attempts_remaining
            for _ in range(LOCKOUT_THRESHOLD - 1)
        ]
        assert remaining == [4, 3, 2, 1]

    async def test_four_failures_still_allowed(self, guard):
        await _fail(guard, 4)

        decision = await guard.check(IP)
        assert decision.allowed
        assert decision.attempts_remaining == 1

    async def test_fifth_failure_locks_for_fifteen_minutes(self, guard, clock):
        await _fail(guard, 4)

        decision = await guard.record_failure(IP)
        assert decision.blocked
        assert decision.retry_after_seconds == 900
        assert decision.blocked_until == clock.now + LOCKOUT_DURATION

        check = await guard.check(IP)
        assert check.blocked
        assert check.retry_after_seconds == 900

    async def test_block_expires_after_lockout_duration(self, guard, store, clock):
        await _fail(guard, 5)
        clock.advance(seconds=900)

        decision = await guard.check(IP)
        assert decision.allowed
        assert decision.attempts_remaining == LOCKOUT_THRESHOLD

        record = await store.get(IP)
        assert record.attempt_count == 0
        assert record.blocked_until is None

    async def test_admin_unblock_clears_active_lockout(self, guard, store):
        await _fail(guard, 5)

        assert await guard.unblock(IP, admin_email="admin@docubuild.io") is True

        decision = await guard.check(IP)
        assert decision.allowed
        record = await store.get(IP)
        assert record.attempt_count == 0
        assert record.blocked_until is None

    async def test_unblock_unknown_identifier_returns_false(self, guard):
        assert await guard.unblock("203.0.113.50") is False

    async def test_success_clears_failures(self, guard, store):
        await _fail(guard, 3)

        await guard.record_success(IP)

        assert await store.get(IP) is None
        decision = await guard.check(IP)
        assert decision.attempts_remaining == LOCKOUT_THRESHOLD

    async def test_success_clears_active_lockout(self, guard, store):
        await _fail(guard, 5)

        await guard.record_success(IP)

        assert await store.get(IP) is None
        assert (await guard.check(IP)).allowed

    async def test_check_does_not_change_state(self, guard, store):
        await _fail(guard, 2)
        before = await store.get(IP)

        for _ in range(3):
            await guard.check(IP)

        assert await store.get(IP) == before

    async def test_failures_while_locked_do_not_extend_block(self, guard, clock):
        locked = await _fail(guard, 5)
        clock.advance(seconds=60)

        decision = await guard.record_failure(IP)
        assert decision.blocked
        assert decision.blocked_until == locked.blocked_until
        assert decision.retry_after_seconds == 840

    async def test_failure_after_expiry_without_check_starts_fresh(self, guard, store, clock):
        await _fail(guard, 5)
        clock.advance(minutes=16)

        decision = await guard.record_failure(IP)
        assert decision.allowed
        assert decision.attempts_remaining == LOCKOUT_THRESHOLD - 1

        record = await store.get(IP)
        assert record.attempt_count == 1
        assert record.blocked_until is None

    async def test_failure_after_expiry_when_check_failed_open(self, guard, engine, clock):
        await _fail(guard, 5)
        clock.advance(minutes=30)
        flaky = LoginAttemptGuard(ReadFailingStore(build_session_factory(engine)), clock=clock)

        assert (await flaky.check(IP)).allowed
        decision = await flaky.record_failure(IP)

        assert decision.allowed
        assert decision.attempts_remaining == LOCKOUT_THRESHOLD - 1

    async def test_full_budget_after_expiry_before_relocking(self, guard, clock):
        await _fail(guard, 5)
        clock.advance(minutes=16)

        remaining = [(await guard.record_failure(IP)).attempts_remaining for _ in range(4)]
        assert remaining == [4, 3, 2, 1]

        decision = await guard.record_failure(IP)
        assert decision.blocked
        assert decision.blocked_until == clock.now + LOCKOUT_DURATION

    async def test_concurrent_failures_are_all_counted(self, guard, store):
        await asyncio.gather(*(guard.record_failure(IP) for _ in range(10)))

        record = await store.get(IP)
        assert record.attempt_count == 10
        assert len(await store.list_recent()) == 1
        assert (await guard.check(IP)).blocked

    async def test_remaining_time_rounds_up(self, guard, clock):
        await _fail(guard, 5)
        clock.advance(milliseconds=500)

        decision = await guard.check(IP)
        assert decision.retry_after_seconds == 900

    async def test_identifiers_are_independent(self, guard):
        await _fail(guard, 5)

        assert (await guard.check("5.6.7.8")).allowed

    async def test_empty_identifier_uses_sentinel(self, guard, store):
        await guard.record_failure("   ")

        record = await store.get(UNKNOWN_IDENTIFIER)
        assert record.attempt_count == 1

    async def test_list_locked_only_returns_active_blocks(self, guard, clock):
        await _fail(guard, 5, "198.51.100.1")
        clock.advance(seconds=30)
        await _fail(guard, 5, "198.51.100.2")
        await _fail(guard, 2, "198.51.100.3")

        locked = await guard.list_locked()

        assert [item.identifier for item in locked] == ["198.51.100.2", "198.51.100.1"]
        assert locked[0].retry_after_seconds == 900
        assert locked[1].retry_after_seconds == 870
        assert locked[1].time_remaining == "14m 30s"
        assert locked[0].attempt_count == 5


class TestDecisionMessages:
    def test_format_remaining(self):
        assert format_remaining(900) == "15m 0s"
        assert format_remaining(61) == "1m 1s"
        assert format_remaining(0) == "0m 0s"

    async def test_blocked_message_includes_remaining_time(self, guard):
        decision = await _fail(guard, 5)
        assert decision.message == "Too many login attempts. Try again in 15m 0s."

    def test_allowed_message_includes_attempts_remaining(self):
        assert GuardDecision.allow(attempts_remaining=2).message == "2 attempt(s) remaining."


class TestFailOpen:
    async def test_store_error_during_check_allows(self, clock):
        guard = LoginAttemptGuard(BrokenStore(), clock=clock)
        decision = await guard.check(IP)
        assert decision.allowed
        assert decision.attempts_remaining is None

    async def test_store_timeout_during_check_allows(self, clock):
        guard = LoginAttemptGuard(HangingStore(), timeout_seconds=0.01, clock=clock)
        decision = await guard.check(IP)
        assert decision.allowed

    async def test_store_timeout_during_failure_allows(self, clock):
        guard = LoginAttemptGuard(HangingStore(), timeout_seconds=0.01, clock=clock)
        decision = await guard.record_failure(IP)
        assert decision.allowed

    async def test_store_error_during_failure_and_success_is_absorbed(self, clock):
        guard = LoginAttemptGuard(BrokenStore(), clock=clock)
        assert (await guard.record_failure(IP)).allowed
        await guard.record_success(IP)

    async def test_unblock_surfaces_store_errors(self, clock):
        guard = LoginAttemptGuard(BrokenStore(), clock=clock)
        with pytest.raises(StoreUnavailable):
            await guard.unblock(IP)


def test_lockout_policy_constants():
    assert LOCKOUT_THRESHOLD == 5
    assert LOCKOUT_DURATION == timedelta(minutes=15)
