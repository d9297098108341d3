"""
Login Attempt Guard
Counts failed sign-ins per client identifier and enforces a temporary lockout.

States per identifier:
    Clear  - fewer than LOCKOUT_THRESHOLD failures, no active block
    Locked - blocked_until is in the future

Storage errors and timeouts on the sign-in path fail open: the request is
allowed and the event is logged, so an attempt-store outage cannot lock
everybody out.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional, TypeVar

from app.auth.attempt_store import LoginAttemptRecord, LoginAttemptStore
from app.auth.audit import log_account_locked, log_guard_fail_open, log_identifier_unblocked
from app.auth.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOCKOUT_THRESHOLD = 5
LOCKOUT_DURATION = timedelta(minutes=15)
UNKNOWN_IDENTIFIER = "unknown"
MAX_IDENTIFIER_LENGTH = 255


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_identifier(identifier: Optional[str]) -> str:
    """Map empty identifiers to the shared sentinel."""
    if identifier is None:
        return UNKNOWN_IDENTIFIER
    identifier = identifier.strip()
    if not identifier:
        return UNKNOWN_IDENTIFIER
    return identifier[:MAX_IDENTIFIER_LENGTH]


def remaining_seconds(blocked_until: datetime, now: datetime) -> int:
    """Seconds until ``blocked_until``, rounded up."""
    return max(0, math.ceil((blocked_until - now).total_seconds()))


def format_remaining(seconds: int) -> str:
    """Render a duration as "14m 59s"."""
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes}m {secs}s"


@dataclass(frozen=True)
class GuardDecision:
    """
    Outcome of a guard call.

    Either allowed (optionally with the number of failures left before a
    lockout) or blocked (with the time remaining and the block end).
    """

    allowed: bool
    retry_after_seconds: int = 0
    blocked_until: Optional[datetime] = None
    attempts_remaining: Optional[int] = None

    @classmethod
    def allow(cls, attempts_remaining: Optional[int] = None) -> "GuardDecision":
        return cls(allowed=True, attempts_remaining=attempts_remaining)

    @classmethod
    def block(cls, blocked_until: datetime, now: datetime) -> "GuardDecision":
        return cls(
            allowed=False,
            retry_after_seconds=remaining_seconds(blocked_until, now),
            blocked_until=blocked_until,
            attempts_remaining=0,
        )

    @property
    def blocked(self) -> bool:
        return not self.allowed

    @property
    def message(self) -> str:
        """Human-readable status for the login form."""
        if self.blocked:
            return (
                "Too many login attempts. "
                f"Try again in {format_remaining(self.retry_after_seconds)}."
            )
        if self.attempts_remaining is not None:
            return f"{self.attempts_remaining} attempt(s) remaining."
        return "Login allowed."


@dataclass(frozen=True)
class LockedIdentifier:
    """Active lockout as shown on the administrator security dashboard."""

    identifier: str
    attempt_count: int
    blocked_until: datetime
    last_attempt_at: datetime
    retry_after_seconds: int

    @property
    def time_remaining(self) -> str:
        return format_remaining(self.retry_after_seconds)


class LoginAttemptGuard:
    """
    Lockout policy over a LoginAttemptStore.

    Only the trusted sign-in boundary should call record_failure and
    record_success; check is safe to expose as a read-only hint.
    """

    def __init__(
        self,
        store: LoginAttemptStore,
        timeout_seconds: float = 2.0,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.timeout_seconds = timeout_seconds
        self.clock = clock

    async def check(self, identifier: Optional[str]) -> GuardDecision:
        """
        Decide whether a sign-in attempt may proceed.

        An expired block is treated as Clear and the record is reset so the
        client starts over with the full attempt budget.

        Args:
            identifier: Client identifier

        Returns:
            Blocked with the remaining time, or Allowed with attempts left
        """
        identifier = normalize_identifier(identifier)
        try:
            record = await self._call("check", identifier, self.store.get(identifier))
            if record is None:
                return GuardDecision.allow(attempts_remaining=LOCKOUT_THRESHOLD)

            now = self.clock()
            if record.is_blocked(now):
                return GuardDecision.block(record.blocked_until, now)

            if record.blocked_until is not None:
                cleared = await self._call(
                    "expire",
                    identifier,
                    self.store.clear_expired_block(identifier, now),
                )
                if cleared:
                    logger.info("Expired lockout reset for %s", identifier)
                return GuardDecision.allow(attempts_remaining=LOCKOUT_THRESHOLD)

            return GuardDecision.allow(
                attempts_remaining=max(LOCKOUT_THRESHOLD - record.attempt_count, 0)
            )
        except StoreUnavailable as e:
            log_guard_fail_open("check", identifier, e.message)
            return GuardDecision.allow()

    async def record_failure(self, identifier: Optional[str]) -> GuardDecision:
        """
        Count a failed sign-in and impose a lockout at the threshold.

        Must only be called after the credential verifier rejected the
        attempt. An already active block is neither extended nor shortened.

        Args:
            identifier: Client identifier

        Returns:
            Blocked if the identifier is now locked, otherwise Allowed with
            the number of attempts left
        """
        identifier = normalize_identifier(identifier)
        now = self.clock()
        try:
            record = await self._call(
                "record_failure",
                identifier,
                self.store.increment_failure(
                    identifier,
                    now,
                    threshold=LOCKOUT_THRESHOLD,
                    lockout=LOCKOUT_DURATION,
                ),
            )
        except StoreUnavailable as e:
            log_guard_fail_open("record_failure", identifier, e.message)
            return GuardDecision.allow()

        if record.is_blocked(now):
            if record.blocked_until == now + LOCKOUT_DURATION:
                log_account_locked(identifier, record.attempt_count, record.blocked_until)
            return GuardDecision.block(record.blocked_until, now)

        return GuardDecision.allow(
            attempts_remaining=max(LOCKOUT_THRESHOLD - record.attempt_count, 0)
        )

    async def record_success(self, identifier: Optional[str]) -> None:
        """Clear all failure state after a successful sign-in."""
        identifier = normalize_identifier(identifier)
        try:
            await self._call("record_success", identifier, self.store.delete(identifier))
        except StoreUnavailable as e:
            log_guard_fail_open("record_success", identifier, e.message)

    async def unblock(self, identifier: str, admin_email: Optional[str] = None) -> bool:
        """
        Lift a lockout and zero the counter (administrator action).

        Raises:
            StoreUnavailable: If the store cannot be reached

        Returns:
            True if a record existed for the identifier
        """
        identifier = normalize_identifier(identifier)
        found = await self._call("unblock", identifier, self.store.reset(identifier))
        if found:
            log_identifier_unblocked(identifier, admin_email)
        return found

    async def list_locked(self) -> list[LockedIdentifier]:
        """
        List identifiers with an active lockout.

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        now = self.clock()
        records = await self._call("list_locked", "*", self.store.list_blocked(now))
        return [
            LockedIdentifier(
                identifier=record.identifier,
                attempt_count=record.attempt_count,
                blocked_until=record.blocked_until,
                last_attempt_at=record.last_attempt_at,
                retry_after_seconds=remaining_seconds(record.blocked_until, now),
            )
            for record in records
        ]

    async def list_recent(self, limit: int = 100) -> list[LoginAttemptRecord]:
        """
        List tracked identifiers by most recent failure.

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        return await self._call("list_recent", "*", self.store.list_recent(limit))

    def is_blocked(self, record: LoginAttemptRecord) -> bool:
        return record.is_blocked(self.clock())

    async def _call(self, operation: str, identifier: str, awaitable: Awaitable[T]) -> T:
        """Run a store call under the timeout, normalizing failures."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise StoreUnavailable(
                f"{operation} timed out after {self.timeout_seconds}s", identifier
            ) from e
        except Exception as e:
            logger.error("Attempt store %s failed for %s: %s", operation, identifier, e)
            raise StoreUnavailable(f"{operation} failed: {e}", identifier) from e
