"""Error taxonomy shared by the gateway, service and HTTP layers."""

from __future__ import annotations


class UserAdminError(Exception):
    """Base class for failures that map onto a JSON ``{"error": ...}`` response."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(UserAdminError):
    """Request body or query parameters are missing or malformed."""

    status_code = 400


class AuthenticationError(UserAdminError):
    """Bearer token missing, empty, expired or forged."""

    status_code = 401


class AuthorizationError(UserAdminError):
    """Caller is authenticated but the admin predicate did not hold."""

    status_code = 403


class NotFoundError(UserAdminError):
    status_code = 404


class UpstreamError(UserAdminError):
    """The auth provider or data store rejected a call; its message is passed through."""

    status_code = 400


class ConfigurationError(UserAdminError):
    """A required credential or endpoint is not configured."""

    status_code = 500
