"""
Base Repository for the UniGuide prediction backend

Generic async repository with the read/write operations the pipeline needs.
Repositories never commit; the caller owns the transaction boundary.
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Iterable, List, Optional, Type
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel


# Type variable for generic repository
ModelType = TypeVar("ModelType", bound=SQLModel)


class IReadRepository(ABC, Generic[ModelType]):
    """Interface for read operations."""

    @abstractmethod
    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """Get a single record by ID."""
        pass


class BaseRepository(IReadRepository[ModelType], Generic[ModelType]):
    """
    Generic async repository.

    Args:
        model: The SQLModel class to operate on
        session: Async database session
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self._model = model
        self._session = session

    @property
    def session(self) -> AsyncSession:
        """Get the current session."""
        return self._session

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """
        Get a single record by its primary key.

        Args:
            id: UUID primary key

        Returns:
            Model instance or None if not found
        """
        return await self._session.get(self._model, id)

    async def get_by_ids(self, ids: Iterable[UUID]) -> List[ModelType]:
        """Get every record whose primary key is in `ids`."""
        id_list = list(ids)
        if not id_list:
            return []
        stmt = select(self._model).where(self._model.id.in_(id_list))
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def add(self, db_obj: ModelType) -> ModelType:
        """
        Stage a new or modified record and flush it.

        Args:
            db_obj: Model instance

        Returns:
            The refreshed model instance
        """
        self._session.add(db_obj)
        await self._session.flush()
        await self._session.refresh(db_obj)
        return db_obj
