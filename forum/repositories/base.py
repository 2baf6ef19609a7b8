"""Generic async repository for SQLAlchemy models."""

from __future__ import annotations

from typing import Any, Generic, Mapping, Optional, Sequence, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from forum.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Reusable CRUD helper bound to one model and one session.

    All methods return ORM instances, never schemas.
    """

    model: Type[ModelType]

    def __init__(self, db: AsyncSession):
        self.db = db

    # ----- Read -----
    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        return await self.db.get(self.model, id)

    async def get_all(self) -> Sequence[ModelType]:
        result = await self.db.execute(select(self.model))
        return result.scalars().all()

    # ----- Create -----
    async def add(self, entity: ModelType) -> ModelType:
        self.db.add(entity)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    # ----- Update -----
    async def update(self, entity: ModelType, data: Mapping[str, Any]) -> ModelType:
        """Copy *data* onto *entity*; unknown keys are ignored."""
        for field, value in data.items():
            if hasattr(entity, field):
                setattr(entity, field, value)
        await self.db.flush()
        return entity

    # ----- Delete -----
    async def delete(self, entity: ModelType) -> None:
        await self.db.delete(entity)
        await self.db.flush()
