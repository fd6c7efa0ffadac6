"""
Authentication utilities for Connelly Books API

Provides functions to extract the caller's bearer token and network address
from API Gateway events, and to check the admin token on write routes.
"""

from __future__ import annotations

import hmac

from connelly_backend.utils.response import error_response


def get_header(event: dict, name: str) -> str | None:
    """
    Case-insensitive header lookup.

    Args:
        event: API Gateway event
        name: Header name

    Returns:
        str: Header value, or None if absent
    """
    headers = event.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def get_bearer_token(event: dict) -> str | None:
    """
    Extract the token from an "Authorization: Bearer <token>" header.

    Returns:
        str: The token, or None when the header is missing or not a bearer token
    """
    auth_header = get_header(event, "Authorization") or ""
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[len("Bearer "):]


def check_admin(event: dict, admin_token: str) -> dict | None:
    """
    Check the admin bearer token.

    Args:
        event: API Gateway event
        admin_token: Expected token from configuration

    Returns:
        dict: 401 when the token is missing, 403 when it is wrong, None if valid
    """
    token = get_bearer_token(event)
    if token is None:
        return error_response(401, "missing or invalid token")
    if not admin_token or not hmac.compare_digest(token, admin_token):
        return error_response(403, "unauthorized")
    return None


def get_client_address(event: dict) -> str:
    """
    Best-effort client address used as the rate limiting key.

    Prefers the source IP API Gateway saw, then the first X-Forwarded-For hop.
    """
    identity = event.get("requestContext", {}).get("identity") or {}
    source_ip = identity.get("sourceIp")
    if source_ip:
        return source_ip

    forwarded_for = get_header(event, "X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    return "unknown"
