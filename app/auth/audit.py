"""
Security Audit Logging
Logs authentication and lockout events for security monitoring.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

logger = logging.getLogger("auth.audit")


def log_auth_event(
    event_type: str,
    identifier: Optional[str] = None,
    user_id: Optional[UUID] = None,
    email: Optional[str] = None,
    success: bool = True,
    details: Optional[str] = None,
) -> None:
    """
    Log an authentication event for security auditing.

    Args:
        event_type: Type of event (e.g., "login", "account_locked", "unblock")
        identifier: Client identifier the lockout is scoped to
        user_id: User ID if available
        email: Email address if available
        success: Whether the event was successful
        details: Additional details about the event
    """
    log_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type,
        "identifier": identifier,
        "user_id": str(user_id) if user_id else None,
        "email": email,
        "success": success,
        "details": details,
    }

    if success:
        logger.info(f"Auth event: {event_type}", extra=log_data)
    else:
        logger.warning(f"Auth event failed: {event_type}", extra=log_data)


def log_login_attempt(
    email: str,
    identifier: str,
    success: bool,
    user_id: Optional[UUID] = None,
    reason: Optional[str] = None,
) -> None:
    """Log a login attempt."""
    log_auth_event(
        event_type="login",
        identifier=identifier,
        user_id=user_id,
        email=email,
        success=success,
        details=reason,
    )


def log_account_locked(identifier: str, attempt_count: int, blocked_until: datetime) -> None:
    """Log a lockout imposed after too many failures."""
    log_auth_event(
        event_type="account_locked",
        identifier=identifier,
        success=False,
        details=(
            f"Locked after {attempt_count} failed login attempts "
            f"until {blocked_until.isoformat()}"
        ),
    )


def log_identifier_unblocked(identifier: str, admin_email: Optional[str] = None) -> None:
    """Log an administrator lifting a lockout."""
    log_auth_event(
        event_type="unblock",
        identifier=identifier,
        email=admin_email,
        success=True,
        details="Lockout cleared by administrator",
    )


def log_guard_fail_open(operation: str, identifier: str, reason: str) -> None:
    """Log an attempt-store failure that let a request through."""
    log_auth_event(
        event_type="guard_fail_open",
        identifier=identifier,
        success=False,
        details=f"{operation}: {reason}",
    )
