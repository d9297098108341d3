"""
Rate Limiting Utilities
Coarse request limiter for authentication endpoints.

Keyed by the same client identifier as the login lockout so both
mechanisms count the same client.
"""

from slowapi import Limiter

from app.auth.client_identity import resolve_client_identifier

# Initialize rate limiter
limiter = Limiter(key_func=resolve_client_identifier)
