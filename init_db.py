#!/usr/bin/env python
"""
Create tables from the SQLAlchemy models, optionally with demo videos.

    python init_db.py            # tables only
    python init_db.py --seed     # tables + a few videos embedded with the mock provider
"""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env before settings are read (override any existing env vars)
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path, override=True)

from vidsearch.core.config import settings  # noqa: E402
from vidsearch.core.db import async_session_maker, close_db, init_db  # noqa: E402
from vidsearch.core.logging import configure_logging, get_logger  # noqa: E402
from vidsearch.embeddings.mock import MockEmbeddingClient  # noqa: E402
from vidsearch.models.video import Video  # noqa: E402
from vidsearch.repositories.video_repository import VideoRepository  # noqa: E402

configure_logging()
logger = get_logger(__name__)

DEMO_VIDEOS = [
    (
        "pmf-101",
        "Finding Product-Market Fit",
        "Product-market fit means customers keep coming back without being pushed. "
        "We look at retention curves and the questions to ask early users.",
    ),
    (
        "pricing-201",
        "Pricing Your First Product",
        "Price on value, not on cost. Start higher than feels comfortable and test discounts later.",
    ),
    (
        "hiring-110",
        "Hiring Your First Engineers",
        "Early hires shape the culture. Hire for ownership and speed of learning.",
    ),
    (
        "fundraise-301",
        "Raising a Seed Round",
        "Investors fund momentum. Show traction, a clear market and why your team wins.",
    ),
]


async def seed_videos() -> int:
    embedder = MockEmbeddingClient(dimension=settings.embedding_dimension)
    created = 0
    async with async_session_maker() as session:
        repo = VideoRepository(session)
        for video_id, title, script in DEMO_VIDEOS:
            if await repo.get_by_video_id(video_id) is not None:
                continue
            await repo.create(
                Video(
                    video_id=video_id,
                    title=title,
                    script_text=script,
                    embedding=embedder.embed_text(f"{title} {script}"),
                )
            )
            created += 1
        await session.commit()
    return created


async def main(seed: bool) -> None:
    try:
        await init_db()
        logger.info("database_tables_created")
        if seed:
            created = await seed_videos()
            logger.info("demo_videos_seeded", created=created)
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main(seed="--seed" in sys.argv[1:]))
