"""
Reference resolver.
Turns category, unit and supplier names into persisted row identifiers.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from app.api.repository.reference_repository import ReferenceModel, ReferenceRepository
from app.core.exceptions import ResolutionError
from app.models import Category, Supplier, Unit

# Contact details for suppliers created implicitly
SUPPLIER_PLACEHOLDER = "-"


@dataclass(frozen=True)
class ResolvedReferences:
    category_id: str
    unit_id: str
    supplier_id: str


class ReferenceResolver:
    """
    Get-or-create access to the reference entities a drug points at.
    """

    def __init__(self, reference_repo: ReferenceRepository):
        self.reference_repo = reference_repo

    async def resolve(
        self, category: str, unit_name: str, supplier_name: str
    ) -> ResolvedReferences:
        """
        Resolve (creating when missing) the category, unit and supplier.

        Args:
            category: Category name
            unit_name: Unit name
            supplier_name: Supplier name

        Returns:
            ResolvedReferences with the three identifiers

        Raises:
            ResolutionError: If a row could not be created or read back
        """
        category_row = await self._get_or_create("category", Category, category)
        unit_row = await self._get_or_create("unit", Unit, unit_name)
        supplier_row = await self._get_or_create(
            "supplier",
            Supplier,
            supplier_name,
            address=SUPPLIER_PLACEHOLDER,
            phone=SUPPLIER_PLACEHOLDER,
        )
        return ResolvedReferences(
            category_id=category_row.id,
            unit_id=unit_row.id,
            supplier_id=supplier_row.id,
        )

    async def _get_or_create(
        self, entity: str, model: type[ReferenceModel], name: str, **defaults
    ) -> ReferenceModel:
        try:
            instance = await self.reference_repo.get_or_create(model, name, **defaults)
        except SQLAlchemyError as e:
            logger.error(f"Failed to resolve {entity} '{name}': {e}")
            raise ResolutionError(entity, name, f"Could not resolve {entity} '{name}': {e}") from e

        if instance is None:
            raise ResolutionError(entity, name, f"{entity.capitalize()} '{name}' was not found after insert")
        return instance
