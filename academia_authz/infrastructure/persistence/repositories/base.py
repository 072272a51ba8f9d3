from abc import ABC
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import object_session

from academia_authz.infrastructure.exceptions import StorageUnavailableError
from academia_authz.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


@asynccontextmanager
async def storage_errors(operation: str) -> AsyncIterator[None]:
    """
    Translate driver failures into StorageUnavailableError.

    IntegrityError passes through untouched so repositories can map
    constraint violations to domain errors.
    """
    try:
        yield
    except IntegrityError:
        raise
    except (SQLAlchemyError, OSError) as e:
        raise StorageUnavailableError(operation, str(e)) from e


class BaseRepository(ABC, Generic[ModelType]):
    """
    Base repository implementing common CRUD operations (LSP).

    Provides lifecycle hooks for subclasses to override.
    Subclasses should call super() methods to ensure proper lifecycle.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]):
        self.db = db
        self.model = model

    async def _execute(self, statement: Any, operation: str = "query") -> Any:
        async with storage_errors(f"{self.model.__name__}.{operation}"):
            return await self.db.execute(statement)

    async def _flush(self, operation: str = "flush") -> None:
        async with storage_errors(f"{self.model.__name__}.{operation}"):
            await self.db.flush()

    async def get_by_id(self, id: str) -> ModelType | None:
        """Get a single record by ID"""
        # Cast to Any for SQLAlchemy dynamic attribute access (id comes from CuidMixin)
        model: Any = self.model
        result = await self._execute(select(self.model).where(model.id == id), "get_by_id")
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Create a new record and trigger the after-create hook"""
        self.db.add(obj)
        await self._flush("create")
        await self.db.refresh(obj)
        await self._on_after_create(obj)
        return obj

    async def update(self, obj: ModelType) -> ModelType:
        """
        Update an existing record and trigger the after-update hook.

        Handles potentially detached objects by merging back to session.
        """
        # Merge object back to session if detached
        if object_session(obj) is None:
            obj = await self.db.merge(obj)
        await self._flush("update")
        await self.db.refresh(obj)
        await self._on_after_update(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        """Delete a record and trigger the before-delete hook"""
        await self._on_before_delete(obj)
        await self.db.delete(obj)
        await self._flush("delete")

    # Lifecycle hooks - override in subclasses
    async def _on_after_create(self, obj: ModelType) -> None:
        """Hook called after creating a record."""
        pass

    async def _on_after_update(self, obj: ModelType) -> None:
        """Hook called after updating a record."""
        pass

    async def _on_before_delete(self, obj: ModelType) -> None:
        """Hook called before deleting a record."""
        pass
