"""
Authentication Router
Sign-in endpoint guarded by the login lockout.

This router is the only place that records failed and successful
attempts; the login-status endpoint is a read-only hint for the form.
"""

import logging

from fastapi import APIRouter, Request, status

from app.auth.audit import log_login_attempt
from app.auth.client_identity import resolve_client_identifier
from app.auth.dependencies import CredentialVerifier, LoginGuard
from app.auth.login_guard import GuardDecision
from app.auth.rate_limit import limiter
from app.auth.schemas import LoginRequest, LoginStatusResponse, TokenResponse
from app.config import settings
from app.core.errors import ERROR_MESSAGES, ErrorCode, create_error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _lockout_response(decision: GuardDecision):
    return create_error_response(
        ErrorCode.TOO_MANY_ATTEMPTS,
        message=decision.message,
        extra={
            "blocked_until": decision.blocked_until.isoformat() if decision.blocked_until else None,
            "retry_after_seconds": decision.retry_after_seconds,
        },
        headers={"Retry-After": str(decision.retry_after_seconds)},
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="User login",
    description="Authenticate with Supabase and return session tokens.",
    responses={
        401: {"description": "Invalid credentials, with attempts remaining"},
        429: {"description": "Client locked out after too many failures"},
    },
)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,
    login_data: LoginRequest,
    guard: LoginGuard,
    verifier: CredentialVerifier,
) -> TokenResponse:
    """
    Authenticate user and return tokens.

    Rejects locked-out clients before the credentials are checked. After
    a failed check the failure is counted; the fifth consecutive failure
    locks the client out for 15 minutes. A successful sign-in clears the
    client's failure history.
    """
    identifier = resolve_client_identifier(request)

    decision = await guard.check(identifier)
    if decision.blocked:
        log_login_attempt(login_data.email, identifier, False, reason="locked out")
        raise _lockout_response(decision)

    verified = await verifier.verify(login_data.email, login_data.password)

    if verified is None:
        log_login_attempt(login_data.email, identifier, False, reason="invalid credentials")
        decision = await guard.record_failure(identifier)
        if decision.blocked:
            raise _lockout_response(decision)

        message = ERROR_MESSAGES[ErrorCode.INVALID_CREDENTIALS]
        if decision.attempts_remaining is not None:
            message = f"{message} {decision.attempts_remaining} attempt(s) remaining."
        raise create_error_response(
            ErrorCode.INVALID_CREDENTIALS,
            message=message,
            extra={"attempts_remaining": decision.attempts_remaining},
            headers={"WWW-Authenticate": "Bearer"},
        )

    await guard.record_success(identifier)
    log_login_attempt(verified.email, identifier, True)

    return TokenResponse(
        access_token=verified.access_token,
        refresh_token=verified.refresh_token,
        user_id=verified.user_id,
    )


@router.get(
    "/login-status",
    response_model=LoginStatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Login lockout status",
    description="Read-only lockout status for the calling client.",
)
async def login_status(request: Request, guard: LoginGuard) -> LoginStatusResponse:
    """
    Report whether the calling client is locked out.

    Used by the login form to show a countdown. Never records attempts;
    enforcement happens only in the login endpoint.
    """
    decision = await guard.check(resolve_client_identifier(request))
    return LoginStatusResponse(
        blocked=decision.blocked,
        retry_after_seconds=decision.retry_after_seconds,
        blocked_until=decision.blocked_until,
        attempts_remaining=decision.attempts_remaining,
        message=decision.message,
    )
