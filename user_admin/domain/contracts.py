"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..schemas.profile import ProfileStatus, Role

E = TypeVar("E", bound=Enum)

_email_adapter = TypeAdapter(EmailStr)


def _require_object(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValidationError("JSON body required")
    return payload


def _text(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {key}: expected a string")
    return value


def _choice(value: Any, enum_cls: type[E], default: E | None, label: str) -> E | None:
    """Coerce ``value`` into ``enum_cls``; ``None`` falls back to ``default``."""
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {label}: {value}") from None


@dataclass(slots=True)
class CreateUserInput:
    """Validated inputs required to create an account and its profile."""

    email: str
    password: str
    full_name: str
    phone: str | None = None
    role: Role = Role.staff
    status: ProfileStatus = ProfileStatus.active

    @classmethod
    def from_payload(cls, payload: Any) -> "CreateUserInput":
        body = _require_object(payload)
        email = _text(body, "email")
        password = _text(body, "password")
        full_name = _text(body, "full_name")
        if not email or not password or not full_name:
            raise ValidationError("Email, password, and full_name are required")
        try:
            _email_adapter.validate_python(email)
        except PydanticValidationError:
            raise ValidationError(f"Invalid email: {email}") from None

        return cls(
            email=email,
            password=password,
            full_name=full_name,
            phone=_text(body, "phone") or None,
            role=_choice(body.get("role"), Role, Role.staff, "role"),
            status=_choice(body.get("status"), ProfileStatus, ProfileStatus.active, "status"),
        )

    def user_metadata(self) -> dict[str, Any]:
        # role/status never go into account metadata
        return {"full_name": self.full_name, "phone": self.phone}

    def profile_row(self, user_id: str) -> dict[str, Any]:
        return {
            "id": user_id,
            "full_name": self.full_name,
            "phone": self.phone,
            "role": self.role.value,
            "status": self.status.value,
        }


@dataclass(slots=True)
class DeleteUserInput:
    """Target of a deletion; accepts both ``userId`` and ``user_id`` keys."""

    user_id: str

    @classmethod
    def from_payload(cls, payload: Any) -> "DeleteUserInput":
        body = _require_object(payload)
        user_id = _text(body, "userId") or _text(body, "user_id")
        if not user_id:
            raise ValidationError("userId or user_id is required")
        return cls(user_id=user_id)


@dataclass(slots=True)
class ProfileFilter:
    """Listing filters used by the staff management screen."""

    search: str | None = None
    role: Role | None = None
    status: ProfileStatus | None = None

    @classmethod
    def from_query(
        cls,
        search: str | None = None,
        role: str | None = None,
        status: str | None = None,
    ) -> "ProfileFilter":
        role = None if role in (None, "", "all") else role
        status = None if status in (None, "", "all") else status
        return cls(
            search=(search or "").strip() or None,
            role=_choice(role, Role, None, "role"),
            status=_choice(status, ProfileStatus, None, "status"),
        )


@dataclass(slots=True)
class ProfileUpdateInput:
    """Partial profile edit; ``changes`` only holds the fields the caller sent."""

    profile_id: str
    changes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, profile_id: str, payload: Any) -> "ProfileUpdateInput":
        body = _require_object(payload)
        changes: dict[str, Any] = {}

        if "full_name" in body:
            full_name = _text(body, "full_name")
            if not full_name:
                raise ValidationError("full_name cannot be empty")
            changes["full_name"] = full_name
        if "phone" in body:
            changes["phone"] = _text(body, "phone") or None
        for key, enum_cls in (("role", Role), ("status", ProfileStatus)):
            if key not in body:
                continue
            value = _choice(body[key], enum_cls, None, key)
            if value is None:
                raise ValidationError(f"Invalid {key}: null")
            changes[key] = value.value

        if not changes:
            raise ValidationError("At least one of full_name, phone, role, status is required")
        return cls(profile_id=profile_id, changes=changes)
