"""
Identity-provider JWT verification.

Session tokens are issued by Clerk and signed with RS256; the service only
holds the public key. HS* algorithms with a shared secret are accepted for
local development and tests, where `create_access_token` mints tokens.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import jwt

from reimaji.config import get_settings

_private_key: str | None = None
_public_key: str | None = None


def _uses_shared_secret() -> bool:
    return get_settings().jwt_algorithm.upper().startswith("HS")


def _verification_key() -> str:
    """Load the verification key (cached after first call)."""
    global _public_key  # noqa: PLW0603
    settings = get_settings()
    if _uses_shared_secret():
        return settings.jwt_secret
    if _public_key is None:
        _public_key = Path(settings.jwt_public_key_path).read_text()
    return _public_key


def _signing_key() -> str:
    """Load the signing key (cached after first call)."""
    global _private_key  # noqa: PLW0603
    settings = get_settings()
    if _uses_shared_secret():
        return settings.jwt_secret
    if _private_key is None:
        _private_key = Path(settings.jwt_private_key_path).read_text()
    return _private_key


def reset_keys() -> None:
    """Reset cached keys (useful for testing)."""
    global _private_key, _public_key  # noqa: PLW0603
    _private_key = None
    _public_key = None


def create_access_token(clerk_user_id: str, email: str | None = None) -> str:
    """
    Mint a session token shaped like the identity provider's.

    Args:
        clerk_user_id: The identity-provider subject.
        email: Optional primary email claim.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": clerk_user_id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_token_expire_minutes),
    }
    if email is not None:
        payload["email"] = email
    if settings.jwt_issuer:
        payload["iss"] = settings.jwt_issuer
    if settings.jwt_audience:
        payload["aud"] = settings.jwt_audience
    return jwt.encode(payload, _signing_key(), algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode a session token.

    Returns:
        Decoded payload dictionary.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired or has no subject.
    """
    settings = get_settings()
    options: dict[str, Any] = {"require": ["exp", "sub"]}
    kwargs: dict[str, Any] = {}
    if settings.jwt_issuer:
        kwargs["issuer"] = settings.jwt_issuer
    if settings.jwt_audience:
        kwargs["audience"] = settings.jwt_audience
    else:
        options["verify_aud"] = False

    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            _verification_key(),
            algorithms=[settings.jwt_algorithm],
            options=options,
            **kwargs,
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    if not payload.get("sub"):
        msg = "Token has no subject"
        raise jwt.InvalidTokenError(msg)

    return payload
