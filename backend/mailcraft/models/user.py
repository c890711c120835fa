"""
Pydantic models for users and auth requests.
"""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, StrictStr

from mailcraft.models.message import CamelModel


class RegisterRequest(BaseModel):
    email: StrictStr = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: StrictStr = Field(min_length=6)
    name: Optional[StrictStr] = None


class LoginRequest(BaseModel):
    email: StrictStr = Field(min_length=1)
    password: StrictStr = Field(min_length=1)


class UserPublic(CamelModel):
    """User as returned to clients. ``name`` comes from Supabase user metadata."""

    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    created_at: Optional[Union[datetime, str]] = None

    @classmethod
    def from_supabase(cls, user: Any) -> "UserPublic":
        metadata = getattr(user, "user_metadata", None) or {}
        return cls(
            id=str(user.id),
            email=getattr(user, "email", None),
            name=metadata.get("name"),
            created_at=getattr(user, "created_at", None),
        )


class AuthResponse(CamelModel):
    message: str
    user: UserPublic
    # None when Supabase requires email confirmation before issuing a session
    token: Optional[str] = None
