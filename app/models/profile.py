"""
Profile Model
Application profile for a Supabase Auth user.
"""

import enum

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database.base import Base, TimestampMixin, UUIDMixin


class UserRole(str, enum.Enum):
    """Roles assigned to dashboard users."""

    ADMIN = "admin"
    APPROVER = "approver"
    ENGINEER = "engineer"
    STAFF = "staff"
    VIEWER = "viewer"


class Profile(Base, UUIDMixin, TimestampMixin):
    """
    Profile row keyed by the Supabase Auth user id.

    Attributes:
        id: Same UUID as the auth.users row
        email: User's email address
        full_name: Display name
        role: Dashboard role; only ADMIN may manage login lockouts
    """

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
    )

    role: Mapped[UserRole] = mapped_column(
        Enum(
            UserRole,
            name="user_role",
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
        default=UserRole.VIEWER,
    )

    @property
    def is_admin(self) -> bool:
        """Check whether this profile holds the administrator capability."""
        return self.role == UserRole.ADMIN
