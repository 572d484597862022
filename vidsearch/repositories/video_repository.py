"""
Video Repository

Read-only access to search candidates.
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidsearch.models.video import Video
from vidsearch.repositories.base import BaseRepository


class VideoRepository(BaseRepository[Video]):
    """Candidate listing for semantic search."""

    def __init__(self, session: AsyncSession):
        super().__init__(Video, session)

    async def list_searchable(self) -> Sequence[Video]:
        """
        Every video carrying a non-NULL raw embedding.

        Non-NULL does not mean well-formed; callers must parse defensively.
        Rows come back in a stable order (creation time, then id) so tie
        ordering in ranking is reproducible.
        """
        stmt = (
            select(Video)
            .where(Video.embedding.is_not(None))
            .order_by(Video.created_at, Video.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_by_video_id(self, video_id: str) -> Video | None:
        """Lookup by external video id."""

        stmt = select(Video).where(Video.video_id == video_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
