"""Generic Async Repository Pattern.

This module provides a generic repository base class that handles
common CRUD operations with full async support using SQLAlchemy 2.0.
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from keeper.infra.database import Base

# Type variables for generic repository
ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)


class GenericRepository(Generic[ModelType, CreateSchemaType]):
    """Generic async repository providing standard CRUD operations.

    Type Parameters:
        ModelType: The SQLAlchemy model class
        CreateSchemaType: Pydantic schema for creation

    Example:
        class UserRepository(GenericRepository[User, LocalUserCreate]):
            def __init__(self, session: AsyncSession):
                super().__init__(User, session)

            async def find_by_email(self, email: str) -> User | None:
                return await self.find_one(User.email == email)
    """

    def __init__(self, model: type[ModelType], session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            model: The SQLAlchemy model class
            session: Async database session
        """
        self._model = model
        self._session = session

    # ==================== CREATE Operations ====================

    async def create(self, data: CreateSchemaType | dict[str, Any]) -> ModelType:
        """Create a new record.

        Args:
            data: Pydantic schema or dict with creation data

        Returns:
            The created model instance
        """
        if isinstance(data, BaseModel):
            obj_data = data.model_dump(exclude_unset=True)
        else:
            obj_data = data

        db_obj = self._model(**obj_data)
        self._session.add(db_obj)
        await self._session.flush()
        await self._session.refresh(db_obj)
        return db_obj

    # ==================== READ Operations ====================

    async def get_by_id(self, id: UUID) -> ModelType | None:
        """Get a record by its ID.

        Args:
            id: The UUID of the record

        Returns:
            The model instance or None if not found
        """
        return await self.find_one(self._model.id == id)

    async def find_one(self, *conditions: Any) -> ModelType | None:
        """Find a single record matching the conditions.

        Args:
            *conditions: SQLAlchemy filter conditions

        Returns:
            The model instance or None
        """
        stmt = select(self._model).where(*conditions)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    # ==================== UPDATE Operations ====================

    async def update(self, id: UUID, data: dict[str, Any]) -> ModelType | None:
        """Update a record by ID.

        Args:
            id: The UUID of the record to update
            data: Dict with update data

        Returns:
            The updated model instance or None if not found
        """
        db_obj = await self.get_by_id(id)
        if db_obj is None:
            return None

        for field, value in data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await self._session.flush()
        await self._session.refresh(db_obj)
        return db_obj

    # ==================== Transaction Helpers ====================

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._session.commit()

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        await self._session.rollback()
