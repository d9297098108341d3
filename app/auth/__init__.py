"""
Authentication Package
Handles sign-in, the login lockout guard, and authorization.
"""

from app.auth.attempt_store import LoginAttemptRecord, LoginAttemptStore
from app.auth.client_identity import resolve_client_identifier
from app.auth.credentials import SupabaseCredentialVerifier, VerifiedCredentials
from app.auth.dependencies import (
    AdminUser,
    CurrentProfile,
    get_credential_verifier,
    get_current_profile,
    get_login_guard,
    require_admin,
)
from app.auth.exceptions import (
    CredentialServiceError,
    LoginGuardError,
    StoreConfigurationError,
    StoreUnavailable,
)
from app.auth.login_guard import (
    LOCKOUT_DURATION,
    LOCKOUT_THRESHOLD,
    GuardDecision,
    LockedIdentifier,
    LoginAttemptGuard,
)
from app.auth.schemas import LoginRequest, LoginStatusResponse, TokenResponse

__all__ = [
    # Dependencies
    "AdminUser",
    "CurrentProfile",
    "get_credential_verifier",
    "get_current_profile",
    "get_login_guard",
    "require_admin",
    # Schemas
    "LoginRequest",
    "LoginStatusResponse",
    "TokenResponse",
    # Guard
    "LOCKOUT_DURATION",
    "LOCKOUT_THRESHOLD",
    "GuardDecision",
    "LockedIdentifier",
    "LoginAttemptGuard",
    "LoginAttemptRecord",
    "LoginAttemptStore",
    "resolve_client_identifier",
    # Credentials
    "SupabaseCredentialVerifier",
    "VerifiedCredentials",
    # Exceptions
    "CredentialServiceError",
    "LoginGuardError",
    "StoreConfigurationError",
    "StoreUnavailable",
]
