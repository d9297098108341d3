"""
Credential Verification
Checks email/password pairs against Supabase Auth.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

import httpx
from supabase import AuthApiError, AuthError, Client

from app.auth.exceptions import CredentialServiceError
from app.auth.supabase_client import get_supabase
from app.auth.utils import normalize_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifiedCredentials:
    """Session issued by Supabase Auth for a correct credential."""

    user_id: str
    email: str
    access_token: str
    refresh_token: str


class SupabaseCredentialVerifier:
    """
    Password verifier backed by Supabase Auth.

    Wrong credentials return None. Provider outages raise
    CredentialServiceError so they are never counted as failed attempts.
    """

    def __init__(self, client_factory: Callable[[], Client] = get_supabase):
        self.client_factory = client_factory

    async def verify(self, email: str, password: str) -> Optional[VerifiedCredentials]:
        """
        Verify an email/password pair.

        Args:
            email: User email (normalized before sending)
            password: Plain text password

        Returns:
            VerifiedCredentials on success, None if the credentials are wrong

        Raises:
            CredentialServiceError: If Supabase Auth is unreachable or errors
        """
        normalized_email = normalize_email(email)
        client = self.client_factory()

        try:
            # supabase-py's client is synchronous; keep it off the event loop
            response = await asyncio.to_thread(
                client.auth.sign_in_with_password,
                {"email": normalized_email, "password": password},
            )
        except AuthApiError as e:
            if e.status and e.status >= 500:
                raise CredentialServiceError(e.message, status_code=e.status) from e
            logger.debug(f"Supabase rejected credentials for {normalized_email}: {e.message}")
            return None
        except (AuthError, httpx.HTTPError) as e:
            raise CredentialServiceError(str(e)) from e

        if response.session is None or response.user is None:
            return None

        return VerifiedCredentials(
            user_id=str(response.user.id),
            email=response.user.email or normalized_email,
            access_token=response.session.access_token,
            refresh_token=response.session.refresh_token,
        )
