"""
Bearer-token authentication.

Sessions are owned by an external identity provider; this API only verifies
the JWTs it issues, using the shared secret from settings.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from file_manager_api.config.settings import Settings

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401 like any other bad token
security = HTTPBearer(auto_error=False)


class AuthenticatedUser(BaseModel):
    """The caller, as described by the token claims."""
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None


class InvalidTokenError(Exception):
    pass


def create_access_token(
    settings: Settings,
    subject: str,
    email: Optional[str] = None,
    name: Optional[str] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Mint a token the API accepts. Used by the CLI for local development."""
    if not settings.auth_secret_key:
        raise InvalidTokenError("AUTH_SECRET_KEY is not configured")

    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.auth_token_expire_minutes
    )
    payload = {"sub": subject, "exp": expire, "iat": datetime.now(timezone.utc)}
    if email:
        payload["email"] = email
    if name:
        payload["name"] = name
    if settings.auth_audience:
        payload["aud"] = settings.auth_audience
    if settings.auth_issuer:
        payload["iss"] = settings.auth_issuer
    return jwt.encode(payload, settings.auth_secret_key, algorithm=settings.auth_algorithm)


def decode_access_token(settings: Settings, token: str) -> AuthenticatedUser:
    """Verify signature, expiry and (when configured) audience and issuer.

    :raises InvalidTokenError: for any token that must not be trusted.
    """
    if not settings.auth_secret_key:
        raise InvalidTokenError("AUTH_SECRET_KEY is not configured")

    try:
        payload = jwt.decode(
            token,
            settings.auth_secret_key,
            algorithms=[settings.auth_algorithm],
            audience=settings.auth_audience,
            issuer=settings.auth_issuer,
            options={"require": ["exp", "sub"]},
        )
    except jwt.PyJWTError as e:
        raise InvalidTokenError(str(e)) from e

    return AuthenticatedUser(
        user_id=str(payload["sub"]),
        email=payload.get("email"),
        name=payload.get("name"),
    )


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthenticatedUser:
    """FastAPI dependency that rejects requests without a valid bearer token."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    settings: Settings = request.app.state.settings
    try:
        user = decode_access_token(settings, credentials.credentials)
    except InvalidTokenError as e:
        logger.info(f"Rejected token on {request.method} {request.url.path}: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    request.state.user = user
    return user
