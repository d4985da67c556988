from typing import Optional

import httpx
from fastapi import Depends, HTTPException, Header, status
from sqlalchemy.orm import Session

from database import get_db
from errors import AuthorizationError
from identity import AuthIdentity, Caller, ROLES, auth_logger, get_identity_resolver
from repository import ProfileRepository


async def get_auth_identity(
    authorization: Optional[str] = Header(None),
    resolver=Depends(get_identity_resolver),
) -> AuthIdentity:
    """
    Validates the Supabase access token from the Authorization header and
    returns the identity it belongs to. Anything else is a 401.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication header (Authorization: Bearer <token>)"
        )

    token = authorization.split(" ", 1)[1].strip()
    try:
        identity = await resolver.resolve(token)
    except httpx.HTTPError as e:
        auth_logger.error("Identity resolution failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication provider unavailable"
        )

    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session"
        )
    return identity


def get_current_caller(
    identity: AuthIdentity = Depends(get_auth_identity),
    db: Session = Depends(get_db),
) -> Caller:
    profile = ProfileRepository(db).get(identity.id)
    if not profile:
        raise AuthorizationError("Profile not found please register first")
    if profile.role not in ROLES:
        auth_logger.error("Profile %s has illegal role %r", profile.id, profile.role)
        raise AuthorizationError("Profile has no valid role")

    return Caller(id=profile.id, email=profile.email, role=profile.role)
