"""User administration workflows behind the admin predicate."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Protocol

from .contracts import CreateUserInput, DeleteUserInput, ProfileFilter, ProfileUpdateInput
from .. import metrics
from ..errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    UpstreamError,
    UserAdminError,
    ValidationError,
)
from ..schemas.account import AuthUser
from ..schemas.profile import ProfileRow
from ..security.tokens import extract_bearer_token, token_subject

logger = logging.getLogger(__name__)

ADMIN_REQUIRED = "Unauthorized: Admin access required"


class OrphanedAccountError(UpstreamError):
    """Account was created but its profile could not be written."""


class BackendGateway(Protocol):
    def ensure_configured(self) -> None: ...

    def resolve_user(self, token: str) -> AuthUser: ...

    def is_admin(self, token: str) -> bool: ...

    def create_account(
        self, *, email: str, password: str, user_metadata: dict[str, Any]
    ) -> AuthUser: ...

    def delete_account(self, user_id: str) -> None: ...

    def upsert_profile(self, row: dict[str, Any]) -> None: ...

    def deactivate_profile(self, user_id: str) -> None: ...

    def list_profiles(self, token: str, filters: ProfileFilter) -> list[ProfileRow]: ...

    def update_profile(self, token: str, update: ProfileUpdateInput) -> ProfileRow | None: ...


_OUTCOMES: tuple[tuple[type[UserAdminError], str], ...] = (
    (OrphanedAccountError, "orphaned"),
    (AuthenticationError, "unauthenticated"),
    (AuthorizationError, "forbidden"),
    (ValidationError, "invalid"),
    (NotFoundError, "not_found"),
    (UpstreamError, "upstream_error"),
)


@contextmanager
def _tracked(operation: str) -> Iterator[None]:
    """Count the outcome of ``operation`` and let failures propagate."""
    try:
        yield
    except UserAdminError as exc:
        outcome = next((name for cls, name in _OUTCOMES if isinstance(exc, cls)), "error")
        metrics.record(operation, outcome)
        raise
    except Exception:
        metrics.record(operation, "error")
        raise
    metrics.record(operation, "success")


class UserAdminService:
    """Privileged account workflows orchestrating the gateway's collaborators.

    Every operation authenticates the caller and runs the remote admin
    predicate before touching any data; the first failure short-circuits.
    """

    def __init__(self, gateway: BackendGateway) -> None:
        """Store the gateway used for auth, policy and profile calls."""
        self._gateway = gateway

    def create_user(self, authorization: str | None, payload: Any) -> AuthUser:
        """Create an account and its authoritative profile.

        The two writes are not atomic. When the profile upsert fails the
        account is left behind without a profile and the request fails with
        :class:`OrphanedAccountError` so an operator can reconcile it.
        """
        with _tracked("create_user"):
            self._gateway.ensure_configured()
            token = extract_bearer_token(authorization)
            actor = token_subject(token)
            self._require_admin(token, actor)
            request = CreateUserInput.from_payload(payload)

            account = self._gateway.create_account(
                email=request.email,
                password=request.password,
                user_metadata=request.user_metadata(),
            )
            try:
                self._gateway.upsert_profile(request.profile_row(account.id))
            except UpstreamError as exc:
                logger.error(
                    "account %s created without profile (actor=%s): %s",
                    account.id,
                    actor,
                    exc.message,
                )
                raise OrphanedAccountError(exc.message) from exc

            logger.info(
                "audit op=create_user actor=%s target=%s role=%s status=%s",
                actor,
                account.id,
                request.role.value,
                request.status.value,
            )
            return account

    def delete_user(self, authorization: str | None, payload: Any) -> str:
        """Deactivate the target's profile (best effort) and delete its account.

        Returns the deleted account id. The profile row is kept for history.
        """
        with _tracked("delete_user"):
            self._gateway.ensure_configured()
            token = extract_bearer_token(authorization)
            request = DeleteUserInput.from_payload(payload)
            caller = self._gateway.resolve_user(token)
            self._require_admin(token, caller.id)

            try:
                self._gateway.deactivate_profile(request.user_id)
            except UpstreamError as exc:
                metrics.record("delete_user", "profile_sync_skipped")
                logger.warning(
                    "profile %s left active while deleting its account: %s",
                    request.user_id,
                    exc.message,
                )

            self._gateway.delete_account(request.user_id)
            logger.info(
                "audit op=delete_user actor=%s target=%s", caller.id, request.user_id
            )
            return request.user_id

    def list_profiles(
        self,
        authorization: str | None,
        *,
        search: str | None = None,
        role: str | None = None,
        status: str | None = None,
    ) -> list[ProfileRow]:
        """Return profiles matching the staff-screen filters, newest first."""
        with _tracked("list_profiles"):
            self._gateway.ensure_configured()
            token = extract_bearer_token(authorization)
            self._require_admin(token, token_subject(token))
            filters = ProfileFilter.from_query(search=search, role=role, status=status)
            return self._gateway.list_profiles(token, filters)

    def update_profile(
        self, authorization: str | None, profile_id: str, payload: Any
    ) -> ProfileRow:
        with _tracked("update_profile"):
            self._gateway.ensure_configured()
            token = extract_bearer_token(authorization)
            actor = token_subject(token)
            self._require_admin(token, actor)
            update = ProfileUpdateInput.from_payload(profile_id, payload)

            profile = self._gateway.update_profile(token, update)
            if profile is None:
                raise NotFoundError("Profile not found")
            logger.info(
                "audit op=update_profile actor=%s target=%s fields=%s",
                actor,
                profile_id,
                ",".join(sorted(update.changes)),
            )
            return profile

    def _require_admin(self, token: str, actor: str | None) -> None:
        """Run the remote admin predicate; errors and ``False`` both deny."""
        try:
            allowed = self._gateway.is_admin(token)
        except UpstreamError as exc:
            logger.warning("admin check errored for actor=%s: %s", actor, exc.message)
            raise AuthorizationError(ADMIN_REQUIRED) from exc
        if not allowed:
            logger.info("admin access denied for actor=%s", actor)
            raise AuthorizationError(ADMIN_REQUIRED)
