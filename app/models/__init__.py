"""
Models Package
SQLAlchemy ORM models for the application.
"""

from app.models.login_attempt import LoginAttempt
from app.models.profile import Profile, UserRole

__all__ = [
    "LoginAttempt",
    "Profile",
    "UserRole",
]
