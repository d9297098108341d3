"""
Admin Router
Security dashboard endpoints for managing login lockouts.
"""

import logging

from fastapi import APIRouter, Query

from app.admin.schemas import (
    LockedIdentifierListResponse,
    LockedIdentifierSummary,
    LoginAttemptSummary,
    SecurityDashboardResponse,
    SecurityDashboardStats,
    UnblockResponse,
)
from app.auth.attempt_store import LoginAttemptRecord
from app.auth.dependencies import AdminUser, LoginGuard
from app.auth.login_guard import LockedIdentifier, LoginAttemptGuard
from app.core.errors import ErrorCode, create_error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/security", tags=["Admin"])


def _build_locked_summary(locked: LockedIdentifier) -> LockedIdentifierSummary:
    return LockedIdentifierSummary(
        identifier=locked.identifier,
        attempt_count=locked.attempt_count,
        blocked_until=locked.blocked_until.isoformat(),
        retry_after_seconds=locked.retry_after_seconds,
        time_remaining=locked.time_remaining,
        last_attempt_at=locked.last_attempt_at.isoformat(),
    )


def _build_attempt_summary(record: LoginAttemptRecord, guard: LoginAttemptGuard) -> LoginAttemptSummary:
    return LoginAttemptSummary(
        identifier=record.identifier,
        attempt_count=record.attempt_count,
        is_blocked=guard.is_blocked(record),
        blocked_until=record.blocked_until.isoformat() if record.blocked_until else None,
        last_attempt_at=record.last_attempt_at.isoformat(),
        created_at=record.created_at.isoformat(),
    )


@router.get(
    "/dashboard",
    response_model=SecurityDashboardResponse,
    summary="Get security dashboard",
    description="Lockout statistics with active lockouts and recent attempts.",
)
async def get_security_dashboard(
    admin_user: AdminUser,
    guard: LoginGuard,
    limit: int = Query(100, ge=1, le=500, description="Recent attempts to include"),
) -> SecurityDashboardResponse:
    """
    Get complete security dashboard data.

    Includes:
    - Counts of tracked, blocked and active identifiers
    - Active lockouts with remaining time
    - Recently seen identifiers that are not locked out
    """
    locked = await guard.list_locked()
    recent = await guard.list_recent(limit)

    recent_summaries = [_build_attempt_summary(record, guard) for record in recent]
    active = [summary for summary in recent_summaries if not summary.is_blocked]

    stats = SecurityDashboardStats(
        total_tracked=len(recent_summaries),
        blocked=len(locked),
        active=len(active),
    )

    return SecurityDashboardResponse(
        stats=stats,
        locked=[_build_locked_summary(item) for item in locked],
        recent=active,
    )


@router.get(
    "/locked",
    response_model=LockedIdentifierListResponse,
    summary="List locked identifiers",
)
async def list_locked_identifiers(
    admin_user: AdminUser,
    guard: LoginGuard,
) -> LockedIdentifierListResponse:
    """Get all identifiers with an active lockout."""
    locked = await guard.list_locked()
    return LockedIdentifierListResponse(
        total=len(locked),
        locked=[_build_locked_summary(item) for item in locked],
    )


@router.post(
    "/unblock/{identifier}",
    response_model=UnblockResponse,
    summary="Unblock identifier",
)
async def unblock_identifier(
    identifier: str,
    admin_user: AdminUser,
    guard: LoginGuard,
) -> UnblockResponse:
    """Clear the lockout and failure count for an identifier."""
    found = await guard.unblock(identifier, admin_email=admin_user.email)
    if not found:
        raise create_error_response(ErrorCode.LOCKOUT_NOT_FOUND)

    logger.info(f"Admin {admin_user.email} unblocked {identifier}")
    return UnblockResponse(
        success=True,
        identifier=identifier,
        message=f"{identifier} has been unblocked",
    )
