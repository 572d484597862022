"""
Base Repository Classes
Generic CRUD operations for RDB
"""

from typing import Generic, TypeVar, Type, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from vidsearch.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository for CRUD operations

    The service layer owns transactions; repositories only flush/refresh.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def create(self, obj: ModelType) -> ModelType:
        """
        Create new record

        Args:
            obj: Model instance to create

        Returns:
            Created model instance
        """
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

    async def create_many(self, objs: Sequence[ModelType]) -> list[ModelType]:
        """Bulk insert; used by seeding scripts and tests."""

        self.session.add_all(list(objs))
        await self.session.flush()
        return list(objs)
