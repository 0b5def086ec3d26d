"""
AEDCheck Backend — Session Token & Current-User Service
========================================================

What:  Issues and verifies HS256 session tokens and loads the caller's
       UserProfile for every authenticated request.
Why:   Every scoped endpoint starts from "who is calling". The session
       provider itself is external; this service only signs, verifies and
       resolves tokens to active profiles.
How:   PyJWT encodes {sub, iat, exp} with settings.session_secret.
       `get_current_profile` is a FastAPI dependency reading the
       `Authorization: Bearer <token>` header.
Who:   Routers depend on get_current_profile; login / SSO glue calls
       issue_session_token.

Failure mapping (all → 401 AuthenticationError):
    no header / wrong scheme      "Authentication is required"
    bad signature / malformed     "Invalid session token"
    expired                       "Session has expired"
    unknown or inactive profile   "Account is not active"
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aedcheck.access.roles import parse_role
from aedcheck.config import settings
from aedcheck.database import get_db_session
from aedcheck.exceptions import AuthenticationError
from aedcheck.models.user_profile import UserProfile
from aedcheck.regions import get_region_table

logger = logging.getLogger(__name__)

SESSION_ALGORITHM = "HS256"

# auto_error=False: a missing header raises our AuthenticationError (401),
# not FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)


def issue_session_token(user_id, ttl_hours: Optional[int] = None) -> str:
    """Sign a session token for `user_id`."""
    now = datetime.now(timezone.utc)
    hours = ttl_hours if ttl_hours is not None else settings.session_ttl_hours
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(hours=hours),
    }
    return jwt.encode(payload, settings.session_secret, algorithm=SESSION_ALGORITHM)


def decode_session_token(token: str) -> uuid.UUID:
    """
    Verify a session token and return the user id it carries.

    Raises:
        AuthenticationError: expired, tampered or malformed token
    """
    try:
        payload = jwt.decode(
            token,
            settings.session_secret,
            algorithms=[SESSION_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(message="Session has expired")
    except jwt.InvalidTokenError as e:
        logger.info("Rejected session token: %s", type(e).__name__)
        raise AuthenticationError(message="Invalid session token")

    try:
        return uuid.UUID(str(payload["sub"]))
    except ValueError:
        raise AuthenticationError(message="Invalid session token")


async def load_profile(db: AsyncSession, user_id: uuid.UUID) -> UserProfile:
    """
    Load an active profile for an authenticated user id.

    Region codes stored as labels ("대구광역시") are normalized to codes
    on the loaded object so the scope resolver only ever sees codes. The
    change is not flushed; the stored row is left as is.
    """
    result = await db.execute(select(UserProfile).where(UserProfile.id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None or not profile.is_active:
        logger.warning("Session for missing or inactive profile %s", user_id)
        raise AuthenticationError(message="Account is not active")

    if parse_role(profile.role) is None:
        # Resolves to the deny-all scope; flag it for data cleanup
        logger.warning(
            "Data integrity: profile %s has unknown role '%s'", profile.id, profile.role
        )

    if profile.region_code:
        code = get_region_table().normalize_region_code(profile.region_code)
        if code is None:
            logger.warning(
                "Data integrity: profile %s has unknown region '%s'",
                profile.id,
                profile.region_code,
            )
        elif code != profile.region_code:
            db.expunge(profile)
            profile.region_code = code
    return profile


async def get_current_profile(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfile:
    """FastAPI dependency: the authenticated caller's profile."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError()
    user_id = decode_session_token(credentials.credentials)
    return await load_profile(db, user_id)
