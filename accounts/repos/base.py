import uuid
from typing import Generic, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from accounts.models import Base

Model = TypeVar("Model", bound=Base)
CreateSchema = TypeVar("CreateSchema", bound=BaseModel)


class BaseRepository(Generic[Model, CreateSchema]):
    def __init__(
        self,
        session: AsyncSession,
        model: Type[Model],
    ):
        """
        Initialize the repository with a session and model.

        Args:
            session (AsyncSession): The database session.
            model (Type[Model]): The model class.
        """
        self.session = session
        self.model = model

    async def create_one(
        self, schema: CreateSchema, exclude_none: bool = True, auto_commit: bool = True
    ) -> Model:
        """
        Create a new object in the database.

        Args:
            schema (CreateSchema): The data to create the object.
            exclude_none (bool): Whether to exclude None values from the creation.
            auto_commit (bool): Whether to commit the transaction.

        Returns:
            created_object (Model): The created object.
        """
        stmt = (
            insert(self.model)
            .values(**schema.model_dump(exclude_none=exclude_none))
            .returning(self.model)
        )
        result = await self.session.execute(stmt)
        if auto_commit:
            await self.session.commit()
        return result.scalar_one()

    async def get_by_id(self, obj_id: uuid.UUID) -> Model | None:
        """
        Retrieve an object by its ID.

        Args:
            obj_id (uuid.UUID): The ID of the object to retrieve.

        Returns:
            Model | None: The retrieved object or None if not found.
        """
        stmt = select(self.model).where(self.model.id == obj_id)
        result = await self.session.execute(stmt)

        return result.scalar_one_or_none()
