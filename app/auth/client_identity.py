"""
Client Identity
The one rule for deriving the lockout identifier from a request.

Every caller that reads or writes login attempt state (the sign-in
endpoint, the login-status hint and the request limiter) must go through
resolve_client_identifier so they all agree on the key.
"""

from ipaddress import ip_address

from fastapi import Request

from app.auth.login_guard import UNKNOWN_IDENTIFIER
from app.config import settings


def _is_valid_ip(value: str) -> bool:
    try:
        ip_address(value)
    except ValueError:
        return False
    return True


def _is_trusted_proxy_host(host: str) -> bool:
    if not host or not _is_valid_ip(host):
        return False
    addr = ip_address(host)
    return any(addr in net for net in settings.trusted_proxy_networks)


def _extract_forwarded_client_ip(x_forwarded_for: str) -> str | None:
    # Proxies append to the right, so the left-most entries are whatever the
    # client sent. Take the nearest address that is not one of our proxies.
    candidates = [part.strip() for part in x_forwarded_for.split(",") if part.strip()]
    valid = [candidate for candidate in reversed(candidates) if _is_valid_ip(candidate)]
    for candidate in valid:
        if not _is_trusted_proxy_host(candidate):
            return str(ip_address(candidate))
    if valid:
        return str(ip_address(valid[0]))
    return None


def resolve_client_identifier(request: Request) -> str:
    """
    Resolve the lockout identifier for a request.

    Forwarding headers are only honoured when the direct peer is a trusted
    proxy (``settings.trusted_proxies``). In that case the precedence is
    X-Forwarded-For, then X-Real-IP, then the peer address. Any other peer
    is identified by its own address. Malformed values are skipped rather
    than rejected, and an unresolvable client maps to the "unknown" sentinel.
    """
    remote_host = (request.client.host if request.client else "") or ""
    remote_host = remote_host.strip()

    if _is_trusted_proxy_host(remote_host):
        forwarded = _extract_forwarded_client_ip(request.headers.get("x-forwarded-for", ""))
        if forwarded:
            return forwarded

        real_ip = request.headers.get("x-real-ip", "").strip()
        if real_ip and _is_valid_ip(real_ip):
            return str(ip_address(real_ip))

    if remote_host:
        return str(ip_address(remote_host)) if _is_valid_ip(remote_host) else remote_host

    return UNKNOWN_IDENTIFIER
