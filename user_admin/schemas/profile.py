"""Profile records mirrored from the ``profiles`` table."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    admin = "admin"
    staff = "staff"
    client = "client"


class ProfileStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class ProfileRow(BaseModel):
    """Authoritative role/status record keyed by the auth account id."""

    model_config = ConfigDict(extra="ignore")

    id: str
    role: Role
    status: ProfileStatus = ProfileStatus.active
    full_name: str
    phone: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
