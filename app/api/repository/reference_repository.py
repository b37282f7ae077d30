"""
Reference data repository.
Get-or-create access to categories, units and suppliers by unique name.
"""

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Category, Supplier, Unit

ReferenceModel = Category | Unit | Supplier


class ReferenceRepository:
    """Repository for the name-keyed reference tables."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_name(
        self, model: type[ReferenceModel], name: str
    ) -> ReferenceModel | None:
        result = await self.session.execute(select(model).where(model.name == name))
        return result.scalar_one_or_none()

    async def get_or_create(
        self, model: type[ReferenceModel], name: str, **defaults
    ) -> ReferenceModel | None:
        """
        Return the row named ``name``, inserting it first if it is absent.

        The insert uses ``ON CONFLICT (name) DO NOTHING`` so that two
        transactions creating the same name at once both end up reading
        the single surviving row instead of failing.

        Args:
            model: Category, Unit or Supplier
            name: Unique name to look up
            **defaults: Column values used only when the row is created

        Returns:
            The existing or newly created row, or None if it could not be read back
        """
        instance = await self.get_by_name(model, name)
        if instance is not None:
            return instance

        stmt = (
            insert(model)
            .values(name=name, **defaults)
            .on_conflict_do_nothing(index_elements=["name"])
        )
        await self.session.execute(stmt)
        return await self.get_by_name(model, name)
