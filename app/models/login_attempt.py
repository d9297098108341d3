"""
Login Attempt Model
Per-client failed sign-in counter backing the login lockout.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database.base import Base, UUIDMixin


class LoginAttempt(Base, UUIDMixin):
    """
    Failed login counter for one client identifier.

    Exactly one row exists per identifier; failures upsert into it rather
    than appending. A successful sign-in deletes the row and an
    administrator unblock zeroes it. Expired blocks are left in place and
    simply stop being enforced.

    Attributes:
        id: Unique identifier (UUID)
        identifier: Client IP address, or the "unknown" sentinel
        attempt_count: Failed attempts since the last reset
        last_attempt_at: Time of the most recent failed attempt
        blocked_until: End of the active lockout, if any
        created_at: When the first failure for this identifier was seen
    """

    identifier: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Client IP address or sentinel identifier",
    )

    attempt_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Failed attempts since last reset",
    )

    last_attempt_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When the last failed attempt was made",
    )

    blocked_until: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Lockout end; null or past means not blocked",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("attempt_count >= 0", name="ck_login_attempts_count_non_negative"),
        Index("ix_login_attempts_last_attempt_at", "last_attempt_at"),
        Index("ix_login_attempts_blocked_until", "blocked_until"),
    )

    def __repr__(self) -> str:
        return (
            f"<LoginAttempt("
            f"identifier={self.identifier}, "
            f"attempt_count={self.attempt_count}, "
            f"blocked_until={self.blocked_until.isoformat() if self.blocked_until else 'N/A'})>"
        )
