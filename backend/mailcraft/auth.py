"""
Authentication dependency for Supabase-issued JWTs.

A request without a usable ``Authorization: Bearer <token>`` header gets 401.
A request whose token is present but rejected gets 403.

get_current_user verifies JWTs locally with python-jose when SUPABASE_JWT_SECRET
is set, avoiding a network round-trip to the Supabase Auth API.
"""

from typing import Optional

from fastapi import HTTPException, Header
from jose import jwt, JWTError, ExpiredSignatureError

from mailcraft import config
from mailcraft.db import supabase


def _extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Not authenticated")

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise HTTPException(status_code=401, detail="Not authenticated")

    return parts[1]


async def get_current_user(authorization: Optional[str] = Header(None)) -> str:
    """
    Extract and verify the JWT from the Authorization header.

    Args:
        authorization: Authorization header with format "Bearer <token>"

    Returns:
        user_id: Authenticated user's ID (the JWT ``sub`` claim)

    Raises:
        HTTPException: 401 if the token is missing, 403 if invalid or expired
    """
    token = _extract_bearer_token(authorization)

    if config.SUPABASE_JWT_SECRET:
        return _verify_jwt_locally(token)

    return await _verify_jwt_remotely(token)


def _verify_jwt_locally(token: str) -> str:
    """
    Verify a Supabase JWT locally (HS256) and return the user ID.

    Raises:
        HTTPException 403 on any verification failure.
    """
    try:
        payload = jwt.decode(
            token,
            config.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            options={"verify_aud": False},  # Supabase JWTs use 'authenticated' role, not a fixed audience
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=403, detail="Token expired")
    except JWTError:
        raise HTTPException(status_code=403, detail="Invalid token")

    user_id: Optional[str] = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=403, detail="Invalid token")

    return user_id


async def _verify_jwt_remotely(token: str) -> str:
    """
    Verify a JWT via the Supabase Auth API (fallback when no JWT secret is set).

    Raises:
        HTTPException 403 on any verification failure.
    """
    try:
        response = supabase.auth.get_user(token)
    except Exception as e:
        if "expired" in str(e).lower():
            raise HTTPException(status_code=403, detail="Token expired")
        raise HTTPException(status_code=403, detail="Invalid token")

    if not response or not response.user:
        raise HTTPException(status_code=403, detail="Invalid token")

    return response.user.id
