"""
Authentication Schemas
Request and response models for auth endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


# =============================================================================
# Request Schemas
# =============================================================================

class LoginRequest(BaseModel):
    """Request body for user login."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


# =============================================================================
# Response Schemas
# =============================================================================

class TokenResponse(BaseModel):
    """Response containing the Supabase session tokens."""

    access_token: str = Field(..., description="Supabase access token")
    refresh_token: str = Field(..., description="Supabase refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    user_id: str = Field(..., description="Authenticated user id")


class LoginStatusResponse(BaseModel):
    """Read-only lockout status for the login form countdown."""

    blocked: bool = Field(..., description="Whether sign-in is currently locked")
    retry_after_seconds: int = Field(0, description="Seconds until the lockout ends")
    blocked_until: datetime | None = Field(None, description="When the lockout ends")
    attempts_remaining: int | None = Field(None, description="Failures left before a lockout")
    message: str = Field(..., description="Human-readable status")
