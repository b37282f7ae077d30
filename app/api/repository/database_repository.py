"""
Base repository class for database operations.
Provides the common CRUD operations shared by all repositories.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import Base

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common database operations.

    Repositories only flush; committing or rolling back is left to the
    session owner (request dependency or import service).
    """

    def __init__(self, model: type[ModelType], session: AsyncSession):
        """
        Initialize repository with the model class and session.

        Args:
            model: SQLAlchemy model class
            session: AsyncSession for database operations
        """
        self.model = model
        self.session = session

    async def get_by_id(self, id_value: Any) -> ModelType | None:
        """
        Get a single record by ID.

        Args:
            id_value: The ID value to search for

        Returns:
            Model instance or None if not found
        """
        query = select(self.model).where(self.model.id == id_value)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def create(self, **kwargs) -> ModelType:
        """
        Create a new record.

        Args:
            **kwargs: Field values for the new record

        Returns:
            Created model instance
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()  # Send to DB but don't commit
        await self.session.refresh(instance)
        return instance

    async def update(self, id_value: Any, **kwargs) -> ModelType | None:
        """
        Update a record by ID.

        Args:
            id_value: The ID value to update
            **kwargs: Field values to update

        Returns:
            Updated model instance or None if not found
        """
        instance = await self.get_by_id(id_value)

        if instance:
            for key, value in kwargs.items():
                if hasattr(instance, key):
                    setattr(instance, key, value)

            await self.session.flush()
            await self.session.refresh(instance)

        return instance

    async def delete(self, id_value: Any) -> bool:
        """
        Delete a record by ID.

        Args:
            id_value: The ID value to delete

        Returns:
            True if record was deleted, False if not found
        """
        instance = await self.get_by_id(id_value)

        if instance:
            await self.session.delete(instance)
            await self.session.flush()
            return True

        return False
