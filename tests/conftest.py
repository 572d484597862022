"""
Shared fixtures: SQLite databases, fake providers and video factories
"""

from __future__ import annotations

import asyncio
import json
from itertools import count
from typing import Any, Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from vidsearch.core.exceptions import EmbeddingFailedError
from vidsearch.llm.protocol import LLMResponse
from vidsearch.models import Base
from vidsearch.models.video import Video


class FakeEmbeddingClient:
    """Returns canned vectors; unknown text maps to ``default``."""

    def __init__(
        self,
        vectors: dict[str, list[float]] | None = None,
        *,
        default: list[float] | None = None,
        error: BaseException | None = None,
        delay: float = 0.0,
    ) -> None:
        self.model = "fake-embedding"
        self.vectors = vectors or {}
        self.default = default if default is not None else [1.0, 0.0, 0.0]
        self.error = error
        self.delay = delay
        self.calls: list[str] = []
        self.closed = False

    async def embed_query(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.vectors.get(text, self.default))

    async def aclose(self) -> None:
        self.closed = True


class FakeLLMClient:
    """Replies with fixed content, a callable of the prompt, or an error."""

    def __init__(
        self,
        content: str | Callable[[str], str] = "[]",
        *,
        error: BaseException | None = None,
        delay: float = 0.0,
    ) -> None:
        self.model = "fake-llm"
        self.content = content
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        text = self.content(prompt) if callable(self.content) else self.content
        return LLMResponse(content=text, usage={"total_tokens": 42}, model=self.model)

    async def aclose(self) -> None:
        return None


def annotations_json(count_: int, **overrides: Any) -> str:
    """Well-formed explanation array for ``count_`` candidates."""

    items = [
        {
            "index": i,
            "rationale": f"Rationale {i}",
            "excerpt": f"Excerpt {i}",
            **overrides,
        }
        for i in range(1, count_ + 1)
    ]
    return "Sure! Here you go:\n" + json.dumps(items)


@pytest.fixture
def fake_embedding_client() -> type[FakeEmbeddingClient]:
    return FakeEmbeddingClient


@pytest.fixture
def fake_llm_client() -> type[FakeLLMClient]:
    return FakeLLMClient


@pytest.fixture
def explanation_payload() -> Callable[..., str]:
    return annotations_json


@pytest.fixture
def make_video() -> Callable[..., Video]:
    """Video factory with unique ids; pass ``embedding=`` for the raw vector."""

    seq = count(1)

    def _make(**fields: Any) -> Video:
        n = next(seq)
        defaults: dict[str, Any] = {
            "video_id": f"vid-{n:03d}",
            "title": f"Video {n}",
            "script_text": f"Transcript of video {n}. It covers topic {n} in depth.",
            "video_url": f"https://videos.example.com/vid-{n:03d}",
            "duration": 60 * n,
        }
        defaults.update(fields)
        return Video(**defaults)

    return _make


# Database setup for tests
@pytest.fixture
async def async_db_session():
    """
    Create in-memory SQLite database for testing
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_local = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )

    async with async_session_local() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def file_session_factory(tmp_path):
    """
    File-backed SQLite for tests that need several independent sessions
    (request session plus the detached history writer).
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'vidsearch.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )
    yield factory

    await engine.dispose()


@pytest.fixture
def broken_embedding_client() -> FakeEmbeddingClient:
    return FakeEmbeddingClient(error=EmbeddingFailedError("provider down"))
