"""
Admin Schemas
Pydantic models for the security dashboard API.
"""

from typing import Optional
from pydantic import BaseModel, Field


class LockedIdentifierSummary(BaseModel):
    """Active lockout for admin view."""

    identifier: str = Field(..., description="Client IP address or sentinel")
    attempt_count: int = Field(..., description="Failed attempts since last reset")
    blocked_until: str = Field(..., description="ISO timestamp when the lockout ends")
    retry_after_seconds: int = Field(..., description="Seconds remaining in the lockout")
    time_remaining: str = Field(..., description="Remaining time, e.g. '14m 59s'")
    last_attempt_at: str = Field(..., description="ISO timestamp of the last failure")


class LoginAttemptSummary(BaseModel):
    """Tracked client for the recent attempts table."""

    identifier: str = Field(..., description="Client IP address or sentinel")
    attempt_count: int = Field(..., description="Failed attempts since last reset")
    is_blocked: bool = Field(..., description="Whether a lockout is active")
    blocked_until: Optional[str] = Field(None, description="ISO timestamp when the lockout ends")
    last_attempt_at: str = Field(..., description="ISO timestamp of the last failure")
    created_at: str = Field(..., description="ISO timestamp when the client was first seen")


class LockedIdentifierListResponse(BaseModel):
    """Response for listing active lockouts."""

    total: int = Field(..., description="Number of locked identifiers")
    locked: list[LockedIdentifierSummary] = Field(..., description="Active lockouts")


class SecurityDashboardStats(BaseModel):
    """Counts shown at the top of the security dashboard."""

    total_tracked: int = Field(..., description="Identifiers with recorded failures")
    blocked: int = Field(..., description="Identifiers currently locked out")
    active: int = Field(..., description="Tracked identifiers that are not locked out")


class SecurityDashboardResponse(BaseModel):
    """Complete security dashboard data."""

    stats: SecurityDashboardStats = Field(..., description="Lockout statistics")
    locked: list[LockedIdentifierSummary] = Field(..., description="Active lockouts")
    recent: list[LoginAttemptSummary] = Field(..., description="Recently active clients without a lockout")


class UnblockResponse(BaseModel):
    """Result of an unblock action."""

    success: bool = Field(..., description="Whether the lockout was cleared")
    identifier: str = Field(..., description="Identifier that was unblocked")
    message: str = Field(..., description="Human-readable result")
