"""Shared schema exports."""

from .account import AuthUser
from .profile import ProfileRow, ProfileStatus, Role

__all__ = [
    "AuthUser",
    "ProfileRow",
    "ProfileStatus",
    "Role",
]
