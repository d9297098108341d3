"""
Login Attempt Store
Keyed persistence for failed sign-in counters.

Every mutation is a single statement scoped to one identifier, so
concurrent requests from the same client cannot undercount failures.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import and_, case, delete, null, or_, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.auth.exceptions import StoreConfigurationError
from app.models.login_attempt import LoginAttempt

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE ... RETURNING
_UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class LoginAttemptRecord:
    """Detached snapshot of a login_attempts row."""

    identifier: str
    attempt_count: int
    last_attempt_at: datetime
    blocked_until: Optional[datetime]
    created_at: datetime

    @classmethod
    def from_model(cls, row: LoginAttempt) -> "LoginAttemptRecord":
        return cls(
            identifier=row.identifier,
            attempt_count=row.attempt_count,
            last_attempt_at=as_utc(row.last_attempt_at),
            blocked_until=as_utc(row.blocked_until),
            created_at=as_utc(row.created_at),
        )

    def is_blocked(self, now: datetime) -> bool:
        """Check if a lockout is active at ``now``."""
        return self.blocked_until is not None and self.blocked_until > now


class LoginAttemptStore:
    """
    Attempt counters stored in the ``login_attempts`` table.

    Each call opens its own short transaction from the session factory so
    a guard failure never poisons the caller's request session.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, identifier: str) -> Optional[LoginAttemptRecord]:
        """
        Read the record for an identifier.

        Returns:
            Snapshot of the record, or None if no failures are tracked
        """
        async with self.session_factory() as session:
            query = select(LoginAttempt).where(LoginAttempt.identifier == identifier)
            result = await session.execute(query)
            row = result.scalar_one_or_none()
            return LoginAttemptRecord.from_model(row) if row else None

    async def increment_failure(
        self,
        identifier: str,
        now: datetime,
        threshold: int,
        lockout: timedelta,
    ) -> LoginAttemptRecord:
        """
        Atomically count one failed attempt.

        Creates the record with a count of 1 or increments the existing
        one, in a single upsert. A block starting at ``now + lockout`` is
        set when the new count reaches ``threshold`` and no block is
        currently active; an active block is left untouched. If the stored
        block has already expired the count restarts at 1.

        Args:
            identifier: Client identifier
            now: Time of the failed attempt
            threshold: Count at which the lockout is imposed
            lockout: Lockout duration

        Returns:
            Snapshot of the record after the increment
        """
        block_until = now + lockout

        async with self.session_factory() as session:
            insert = self._upsert_insert(session)
            stmt = insert(LoginAttempt).values(
                [
                    {
                        "id": uuid.uuid4(),
                        "identifier": identifier,
                        "attempt_count": 1,
                        "last_attempt_at": now,
                        "blocked_until": block_until if threshold <= 1 else None,
                        "created_at": now,
                    }
                ]
            )

            # An expired block restarts the count.
            block_expired = LoginAttempt.blocked_until <= now
            new_count = case(
                (block_expired, 1),
                else_=LoginAttempt.attempt_count + 1,
            )
            no_active_block = or_(
                LoginAttempt.blocked_until.is_(None),
                block_expired,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["identifier"],
                set_={
                    "attempt_count": new_count,
                    "last_attempt_at": now,
                    "blocked_until": case(
                        (and_(new_count >= threshold, no_active_block), block_until),
                        (block_expired, null()),
                        else_=LoginAttempt.blocked_until,
                    ),
                },
            )

            result = await session.scalars(
                stmt.returning(LoginAttempt),
                execution_options={"populate_existing": True},
            )
            record = LoginAttemptRecord.from_model(result.one())
            await session.commit()
            return record

    async def delete(self, identifier: str) -> bool:
        """
        Delete the record for an identifier.

        Returns:
            True if a record existed
        """
        async with self.session_factory() as session:
            result = await session.execute(
                delete(LoginAttempt)
                .where(LoginAttempt.identifier == identifier)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount > 0

    async def reset(self, identifier: str) -> bool:
        """
        Zero the counter and lift any block, keeping the row.

        Returns:
            True if a record existed
        """
        async with self.session_factory() as session:
            result = await session.execute(
                update(LoginAttempt)
                .where(LoginAttempt.identifier == identifier)
                .values(attempt_count=0, blocked_until=None)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount > 0

    async def clear_expired_block(self, identifier: str, now: datetime) -> bool:
        """
        Reset the record only if its block has already expired.

        The expiry condition is part of the UPDATE so a block imposed by a
        concurrent failure is never cleared by mistake.

        Returns:
            True if an expired block was cleared
        """
        async with self.session_factory() as session:
            result = await session.execute(
                update(LoginAttempt)
                .where(
                    LoginAttempt.identifier == identifier,
                    LoginAttempt.blocked_until.is_not(None),
                    LoginAttempt.blocked_until <= now,
                )
                .values(attempt_count=0, blocked_until=None)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount > 0

    async def list_blocked(self, now: datetime) -> list[LoginAttemptRecord]:
        """List records whose block is still active, longest remaining first."""
        async with self.session_factory() as session:
            query = (
                select(LoginAttempt)
                .where(LoginAttempt.blocked_until > now)
                .order_by(LoginAttempt.blocked_until.desc())
            )
            result = await session.execute(query)
            return [LoginAttemptRecord.from_model(row) for row in result.scalars().all()]

    async def list_recent(self, limit: int = 100) -> list[LoginAttemptRecord]:
        """List records by most recent failed attempt."""
        async with self.session_factory() as session:
            query = (
                select(LoginAttempt)
                .order_by(LoginAttempt.last_attempt_at.desc())
                .limit(limit)
            )
            result = await session.execute(query)
            return [LoginAttemptRecord.from_model(row) for row in result.scalars().all()]

    @staticmethod
    def _upsert_insert(session: AsyncSession):
        dialect = session.get_bind().dialect.name
        try:
            return _UPSERT_INSERTS[dialect]
        except KeyError:
            raise StoreConfigurationError(
                f"Atomic attempt counting is not supported on '{dialect}' databases"
            ) from None
