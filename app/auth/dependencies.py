"""
Authentication Dependencies
FastAPI dependencies for the login guard and route protection.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from supabase import AuthError

from app.auth.attempt_store import LoginAttemptStore
from app.auth.credentials import SupabaseCredentialVerifier
from app.auth.login_guard import LoginAttemptGuard
from app.auth.supabase_client import get_supabase
from app.config import settings
from app.database import async_session_factory, get_async_session
from app.models import Profile

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI
security = HTTPBearer(auto_error=False)


@lru_cache()
def get_login_guard() -> LoginAttemptGuard:
    """Shared guard over the application database."""
    return LoginAttemptGuard(
        LoginAttemptStore(async_session_factory),
        timeout_seconds=settings.login_guard_timeout_seconds,
    )


@lru_cache()
def get_credential_verifier() -> SupabaseCredentialVerifier:
    return SupabaseCredentialVerifier()


async def get_current_profile(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> Profile:
    """
    Dependency that validates a Supabase access token and returns the profile.

    Usage:
        @app.get("/protected")
        async def protected_route(profile: Profile = Depends(get_current_profile)):
            return {"role": profile.role}

    Args:
        credentials: Bearer token from Authorization header
        session: Database session

    Returns:
        Profile of the authenticated user

    Raises:
        HTTPException: If token is invalid or profile not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        response = await asyncio.to_thread(get_supabase().auth.get_user, credentials.credentials)
    except AuthError as e:
        logger.info(f"Token validation failed: {e}")
        raise credentials_exception

    if response is None or response.user is None:
        raise credentials_exception

    try:
        user_id = UUID(str(response.user.id))
    except ValueError:
        raise credentials_exception

    profile = await session.get(Profile, user_id)
    if profile is None:
        raise credentials_exception

    return profile


CurrentProfile = Annotated[Profile, Depends(get_current_profile)]


async def require_admin(profile: CurrentProfile) -> Profile:
    """Dependency that only lets administrators through."""
    if not profile.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return profile


# Type aliases for cleaner route signatures
AdminUser = Annotated[Profile, Depends(require_admin)]
LoginGuard = Annotated[LoginAttemptGuard, Depends(get_login_guard)]
CredentialVerifier = Annotated[SupabaseCredentialVerifier, Depends(get_credential_verifier)]
