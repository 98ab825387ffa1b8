"""HTTP route definitions for the user administration service."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from ..domain.service import UserAdminService
from ..schemas.account import AuthUser
from ..schemas.profile import ProfileRow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")


class AccountResponse(BaseModel):
    """Serialised representation of an auth account; never carries credentials.

    Field names follow the auth provider's user object.
    """

    id: str
    email: str | None
    phone: str | None
    email_confirmed_at: str | None
    phone_confirmed_at: str | None
    last_sign_in_at: str | None
    app_metadata: dict[str, Any]
    user_metadata: dict[str, Any]
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, account: AuthUser) -> "AccountResponse":
        """Build a response model from the auth record."""
        return cls(
            id=account.id,
            email=account.email,
            phone=account.phone,
            email_confirmed_at=_isoformat(account.email_confirmed_at),
            phone_confirmed_at=_isoformat(account.phone_confirmed_at),
            last_sign_in_at=_isoformat(account.last_sign_in_at),
            app_metadata=account.app_metadata,
            user_metadata=account.user_metadata,
            created_at=_isoformat(account.created_at),
            updated_at=_isoformat(account.updated_at),
        )


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class CreateUserResponse(BaseModel):
    success: bool = True
    user: AccountResponse
    message: str = "User created successfully"


class DeleteUserResponse(BaseModel):
    success: bool = True
    message: str = "User deleted successfully"


class ProfileListResponse(BaseModel):
    """Envelope for profile listings."""

    items: list[ProfileRow]


class ProfileUpdateResponse(BaseModel):
    success: bool = True
    profile: ProfileRow


def get_service(request: Request) -> UserAdminService:
    """Resolve the `UserAdminService` stored on the FastAPI application state."""
    service: UserAdminService = request.app.state.user_admin_service
    return service


async def _json_body(request: Request) -> Any:
    """Return the decoded JSON body, or ``None`` when it is empty or malformed."""
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.debug("discarding malformed JSON body on %s", request.url.path)
        return None


@router.post("/create-user", response_model=CreateUserResponse)
async def create_user(
    request: Request,
    authorization: str | None = Header(default=None),
    service: UserAdminService = Depends(get_service),
) -> CreateUserResponse:
    """Create a confirmed account plus its profile on behalf of an admin."""
    payload = await _json_body(request)
    account = await run_in_threadpool(service.create_user, authorization, payload)
    return CreateUserResponse(user=AccountResponse.from_domain(account))


@router.post("/delete-user", response_model=DeleteUserResponse)
async def delete_user(
    request: Request,
    authorization: str | None = Header(default=None),
    service: UserAdminService = Depends(get_service),
) -> DeleteUserResponse:
    """Deactivate a profile and delete the matching account."""
    payload = await _json_body(request)
    await run_in_threadpool(service.delete_user, authorization, payload)
    return DeleteUserResponse()


@router.get("/profiles", response_model=ProfileListResponse)
def list_profiles(
    search: str | None = Query(default=None),
    role: str | None = Query(default=None),
    status: str | None = Query(default=None),
    authorization: str | None = Header(default=None),
    service: UserAdminService = Depends(get_service),
) -> ProfileListResponse:
    """Return profiles for the staff management screen."""
    items = service.list_profiles(authorization, search=search, role=role, status=status)
    return ProfileListResponse(items=items)


@router.patch("/profiles/{profile_id}", response_model=ProfileUpdateResponse)
async def update_profile(
    profile_id: str,
    request: Request,
    authorization: str | None = Header(default=None),
    service: UserAdminService = Depends(get_service),
) -> ProfileUpdateResponse:
    """Edit name, phone, role or status of an existing profile."""
    payload = await _json_body(request)
    profile = await run_in_threadpool(service.update_profile, authorization, profile_id, payload)
    return ProfileUpdateResponse(profile=profile)
