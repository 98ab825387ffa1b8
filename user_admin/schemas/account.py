"""Auth-provider account DTOs."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """Non-secret fields of the auth provider's user object.

    Role and status are deliberately absent: they are read from
    :class:`~user_admin.schemas.profile.ProfileRow` only.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    email: str | None = None
    phone: str | None = None
    email_confirmed_at: datetime | None = None
    phone_confirmed_at: datetime | None = None
    last_sign_in_at: datetime | None = None
    app_metadata: dict[str, Any] = Field(default_factory=dict)
    user_metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
