"""Helpers for handling the caller's forwarded session token."""

from __future__ import annotations

import logging
from typing import Any

import jwt

from ..errors import AuthenticationError

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: str | None) -> str:
    """Return the raw token carried by an ``Authorization`` header.

    Parameters
    ----------
    authorization:
        Header value as received, e.g. ``"Bearer eyJ..."``.

    Raises
    ------
    AuthenticationError
        When the header is absent or carries an empty token.
    """

    if not authorization:
        raise AuthenticationError("Authorization header required")
    token = authorization.replace(_BEARER_PREFIX, "", 1).strip()
    if not token:
        raise AuthenticationError("Bearer token required")
    return token


def peek_claims(token: str) -> dict[str, Any]:
    """Decode a JWT payload without verifying its signature.

    The result is only used to attribute log lines to a caller. Access
    decisions always go through the backend's ``is_admin`` procedure because a
    profile's role can change after the token was issued.
    """

    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as exc:
        logger.debug("unable to read token claims: %s", exc)
        return {}


def token_subject(token: str) -> str | None:
    """Return the ``sub`` claim of ``token`` for audit attribution, if any."""
    subject = peek_claims(token).get("sub")
    return str(subject) if subject else None
