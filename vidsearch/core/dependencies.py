"""
Common FastAPI dependencies
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vidsearch.core.config import Settings
from vidsearch.core.exceptions import AuthenticationError, JWTDecodeError
from vidsearch.core.db import SessionFactory
from vidsearch.core.jwt import decode_user_id
from vidsearch.embeddings.protocol import EmbeddingClientProtocol
from vidsearch.llm.protocol import LLMClientProtocol


bearer_scheme = HTTPBearer(auto_error=False)


async def get_optional_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """
    Caller's user id, or None for anonymous callers.

    A token that is present but invalid is still rejected.
    """

    if credentials is None:
        return None

    try:
        return decode_user_id(credentials.credentials)
    except (JWTDecodeError, AuthenticationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user_id(
    user_id: str | None = Depends(get_optional_user_id),
) -> str:
    """Caller's user id; anonymous callers get 401."""

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


def get_embedding_client(request: Request) -> EmbeddingClientProtocol:
    """Embedding client built by the lifespan handler."""

    return request.app.state.embedding_client


def get_llm_client(request: Request) -> LLMClientProtocol | None:
    return getattr(request.app.state, "llm_client", None)


def get_session_factory(request: Request) -> SessionFactory:
    """Factory for sessions that live outside the request transaction."""

    return request.app.state.session_factory


def get_settings(request: Request) -> Settings:
    """Settings the app was created with."""

    return request.app.state.settings
