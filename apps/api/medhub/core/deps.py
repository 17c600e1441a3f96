"""FastAPI dependencies for authentication, authorization, and database access."""

from typing import Generator

import jwt
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from medhub.core import guards
from medhub.core.errors import UnauthenticatedError
from medhub.core.identity import CallerIdentity, Credential
from medhub.core.security import decode_session_token
from medhub.db.session import SessionLocal


# Cookie name for browser sessions; API clients send a bearer token instead
COOKIE_NAME = "medhub_session"
BEARER_PREFIX = "bearer "


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _extract_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX):].strip() or None
    return request.cookies.get(COOKIE_NAME)


def get_credential(request: Request) -> Credential | None:
    """
    Decode the session token into a credential.

    Returns None when no token was sent; the guards turn that into 401.

    Raises:
        UnauthenticatedError: Token present but invalid or expired
    """
    token = _extract_token(request)
    if not token:
        return None
    try:
        claims = decode_session_token(token)
    except jwt.InvalidTokenError:
        raise UnauthenticatedError(
            "Phiên đăng nhập không hợp lệ hoặc đã hết hạn",
            "Invalid or expired session",
        )
    credential = Credential.from_claims(claims)
    if credential is None:
        raise UnauthenticatedError()
    return credential


def get_caller(
    credential: Credential | None = Depends(get_credential),
    db: Session = Depends(get_db),
) -> CallerIdentity:
    """
    PRIMARY auth dependency: caller scoped to an organization.

    Raises:
        UnauthenticatedError (401) / NoActiveOrganizationError (403)
    """
    return guards.require_org_auth(db, credential)


def get_platform_admin(
    credential: Credential | None = Depends(get_credential),
    db: Session = Depends(get_db),
) -> CallerIdentity:
    """Caller holding the platform admin role (organization optional)."""
    return guards.require_platform_admin(db, credential)
