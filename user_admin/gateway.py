"""Backend gateway for auth, profile and policy calls against the hosted backend."""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Any, Callable, Iterator

import httpx
from supabase import AuthError, Client, ClientOptions, PostgrestAPIError, create_client

from .config import Settings
from .domain.contracts import ProfileFilter, ProfileUpdateInput
from .errors import AuthenticationError, UpstreamError, UserAdminError
from .schemas.account import AuthUser
from .schemas.profile import ProfileRow, ProfileStatus

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Client]

_LIKE_SPECIAL = re.compile(r"([\\%_])")


@contextmanager
def _upstream(action: str) -> Iterator[None]:
    """Translate client-library failures into ``UpstreamError``."""
    try:
        yield
    except (AuthError, PostgrestAPIError, httpx.HTTPError) as exc:
        message = getattr(exc, "message", None) or str(exc) or f"{action} failed"
        logger.info("%s failed: %s", action, message)
        raise UpstreamError(message) from exc


def _ilike_pattern(term: str) -> str | None:
    """Quote ``term`` as a PostgREST ``or`` value matching it as a literal substring.

    LIKE metacharacters are escaped first, then the value is double-quoted so
    commas and parentheses survive the ``or=(...)`` grammar. ``*`` is
    PostgREST's wildcard alias and is dropped from the term.
    """
    literal = _LIKE_SPECIAL.sub(r"\\\1", term.replace("*", "").strip())
    if not literal:
        return None
    quoted = literal.replace("\\", "\\\\").replace('"', '\\"')
    return f'"*{quoted}*"'


def _auth_user(user: Any) -> AuthUser:
    return AuthUser.model_validate(user, from_attributes=True)


class SupabaseGateway:
    """Hosted-backend access split between caller-scoped and elevated clients.

    A fresh client is built for every call so nothing about one caller's
    session can leak into another request.
    """

    def __init__(self, settings: Settings, client_factory: ClientFactory = create_client) -> None:
        """Store settings and the factory used to build backend clients."""
        self._settings = settings
        self._client_factory = client_factory

    def ensure_configured(self) -> None:
        """Fail fast with ``ConfigurationError`` when a credential is missing."""
        self._settings.require("supabase_url")
        self._settings.require("supabase_anon_key")
        self._settings.require("supabase_service_role_key")

    def _caller_client(self, token: str) -> Client:
        """Client authenticated as the requesting user via the forwarded token."""
        return self._client_factory(
            self._settings.require("supabase_url"),
            self._settings.require("supabase_anon_key"),
            options=ClientOptions(
                headers={"Authorization": f"Bearer {token}"},
                auto_refresh_token=False,
                persist_session=False,
            ),
        )

    def _service_client(self) -> Client:
        """Client authenticated with the service-role key; bypasses row-level security."""
        return self._client_factory(
            self._settings.require("supabase_url"),
            self._settings.require("supabase_service_role_key"),
            options=ClientOptions(auto_refresh_token=False, persist_session=False),
        )

    def resolve_user(self, token: str) -> AuthUser:
        """Ask the auth provider who ``token`` belongs to."""
        client = self._caller_client(token)
        try:
            response = client.auth.get_user(token)
        except (AuthError, httpx.HTTPError) as exc:
            logger.info("token resolution failed: %s", exc)
            raise AuthenticationError("Unauthorized") from exc
        if response is None or response.user is None:
            raise AuthenticationError("Unauthorized")
        return _auth_user(response.user)

    def is_admin(self, token: str) -> bool:
        """Evaluate the admin predicate as the caller, under the backend's policies."""
        client = self._caller_client(token)
        with _upstream("admin check"):
            response = client.rpc(self._settings.admin_rpc, {}).execute()
        return bool(response.data)

    def create_account(
        self, *, email: str, password: str, user_metadata: dict[str, Any]
    ) -> AuthUser:
        """Create a pre-confirmed auth account."""
        client = self._service_client()
        with _upstream("account creation"):
            response = client.auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": user_metadata,
                }
            )
        user = getattr(response, "user", None)
        if user is None or not getattr(user, "id", None):
            raise UserAdminError("User created but missing user id")
        return _auth_user(user)

    def delete_account(self, user_id: str) -> None:
        client = self._service_client()
        with _upstream("account deletion"):
            client.auth.admin.delete_user(user_id)

    def upsert_profile(self, row: dict[str, Any]) -> None:
        """Insert or replace the profile row keyed by ``row["id"]``."""
        client = self._service_client()
        with _upstream("profile upsert"):
            client.table(self._settings.profiles_table).upsert(row, on_conflict="id").execute()

    def deactivate_profile(self, user_id: str) -> None:
        client = self._service_client()
        with _upstream("profile deactivation"):
            (
                client.table(self._settings.profiles_table)
                .update({"status": ProfileStatus.inactive.value})
                .eq("id", user_id)
                .execute()
            )

    def list_profiles(self, token: str, filters: ProfileFilter) -> list[ProfileRow]:
        """Return profiles visible to the caller, newest first."""
        client = self._caller_client(token)
        query = client.table(self._settings.profiles_table).select("*")
        if filters.role is not None:
            query = query.eq("role", filters.role.value)
        if filters.status is not None:
            query = query.eq("status", filters.status.value)
        if filters.search:
            pattern = _ilike_pattern(filters.search)
            if pattern:
                query = query.or_(f"full_name.ilike.{pattern},phone.ilike.{pattern}")
        with _upstream("profile listing"):
            response = query.order("created_at", desc=True).execute()
        return [ProfileRow.model_validate(row) for row in response.data or []]

    def update_profile(self, token: str, update: ProfileUpdateInput) -> ProfileRow | None:
        """Apply ``update`` as the caller; ``None`` when no row matched."""
        client = self._caller_client(token)
        with _upstream("profile update"):
            response = (
                client.table(self._settings.profiles_table)
                .update(update.changes)
                .eq("id", update.profile_id)
                .execute()
            )
        rows = response.data or []
        if not rows:
            return None
        return ProfileRow.model_validate(rows[0])
