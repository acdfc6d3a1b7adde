"""Base repository implementation supporting asynchronous SQLModel sessions."""

from __future__ import annotations

from typing import Generic, TypeVar

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Shared persistence helpers; subclasses bind ``model_type``."""

    def __init__(self, session: AsyncSession, model_type: type[ModelType]) -> None:
        self._session = session
        self._model_type = model_type

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def get(self, entity_id: int) -> ModelType | None:
        return await self._session.get(self._model_type, entity_id)

    async def list(self) -> list[ModelType]:
        result = await self._session.execute(select(self._model_type))
        return list(result.scalars().all())

    async def add(self, instance: ModelType) -> ModelType:
        """Stage ``instance`` and flush so generated keys are populated."""
        self._session.add(instance)
        await self._session.flush()
        return instance

    async def add_all(self, instances: list[ModelType]) -> list[ModelType]:
        if not instances:
            return instances
        self._session.add_all(instances)
        await self._session.flush()
        return instances

    async def delete(self, instance: ModelType) -> None:
        await self._session.delete(instance)
        await self._session.flush()

    async def refresh(self, instance: ModelType) -> ModelType:
        await self._session.refresh(instance)
        return instance
