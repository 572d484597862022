"""
Bearer token helpers

Accounts live in an external identity provider; this service only needs the
opaque user id carried in the ``sub`` claim.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from vidsearch.core.config import settings
from vidsearch.core.exceptions import JWTDecodeError


def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """
    Issue an access token for ``user_id``.

    Used by tooling and tests; production tokens come from the identity provider
    sharing ``secret_key``.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {"sub": user_id, "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_user_id(token: str) -> str:
    """
    Validate ``token`` and return its subject.

    Raises:
        JWTDecodeError: if the token is invalid, expired or has no subject
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise JWTDecodeError("Invalid or expired access token") from exc

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject.strip():
        raise JWTDecodeError("Token has no subject")
    return subject
