"""
Authentication Exceptions
Custom exceptions for the login guard and credential verification.
"""

from typing import Optional


class LoginGuardError(Exception):
    """Base exception for login guard failures."""

    def __init__(self, message: str, identifier: Optional[str] = None):
        self.message = message
        self.identifier = identifier
        super().__init__(self.message)


class StoreUnavailable(LoginGuardError):
    """The attempt store failed or did not answer in time."""


class StoreConfigurationError(LoginGuardError):
    """The configured database cannot back the attempt store."""


class CredentialServiceError(Exception):
    """The credential verifier could not reach the auth provider."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)
