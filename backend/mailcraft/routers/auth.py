"""
Registration, login and current-user endpoints backed by Supabase Auth.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from mailcraft.auth import get_current_user
from mailcraft.db import supabase, supabase_admin
from mailcraft.models.user import AuthResponse, LoginRequest, RegisterRequest, UserPublic

router = APIRouter()

logger = logging.getLogger(__name__)


def _session_token(response) -> str | None:
    session = getattr(response, "session", None)
    return session.access_token if session else None


@router.post("/register", status_code=201)
async def register(body: RegisterRequest):
    """
    Create a user account.

    Returns 400 if Supabase rejects the sign-up (e.g. the email is already
    registered or the password is too weak).
    """
    try:
        response = supabase.auth.sign_up({
            "email": body.email,
            "password": body.password,
            "options": {"data": {"name": body.name}},
        })
    except Exception as e:
        logger.info(f"Registration rejected for {body.email!r}: {e}")
        raise HTTPException(status_code=400, detail=f"Registration failed: {str(e)}")

    if not response.user:
        raise HTTPException(status_code=400, detail="Registration failed")

    return AuthResponse(
        message="User registered successfully",
        user=UserPublic.from_supabase(response.user),
        token=_session_token(response),
    ).model_dump(mode="json", by_alias=True)


@router.post("/login")
async def login(body: LoginRequest):
    """Exchange email + password for an access token."""
    try:
        response = supabase.auth.sign_in_with_password({
            "email": body.email,
            "password": body.password,
        })
    except Exception as e:
        logger.info(f"Login failed for {body.email!r}: {e}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not response.user or not response.session:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return AuthResponse(
        message="Login successful",
        user=UserPublic.from_supabase(response.user),
        token=_session_token(response),
    ).model_dump(mode="json", by_alias=True)


@router.get("/me")
async def me(user_id: str = Depends(get_current_user)):
    """Return the authenticated user's profile."""
    if supabase_admin is None:
        raise HTTPException(
            status_code=503,
            detail="User lookup unavailable: SUPABASE_SERVICE_KEY is not configured",
        )

    try:
        response = supabase_admin.auth.admin.get_user_by_id(user_id)
    except Exception as exc:
        logger.error(f"User lookup failed for {user_id}: {exc}")
        raise HTTPException(status_code=500, detail="Failed to load user")

    if not response or not response.user:
        raise HTTPException(status_code=404, detail="User not found")

    user = UserPublic.from_supabase(response.user)
    return {"user": user.model_dump(mode="json", by_alias=True)}
