"""
Drug service layer.
Handles drug creation with derived pricing, partial updates, filtered
listings and inventory statistics.
"""

from datetime import datetime, timedelta
from typing import Any

from loguru import logger
from sqlalchemy.exc import IntegrityError

from app.api.repository.drugs_repository import DrugsRepository
from app.core.config import Settings, get_settings
from app.core.exceptions import InsufficientStockError, NotFoundError, PersistenceError
from app.models import Drug
from app.schemas.drug import DrugCreate, DrugPage, DrugResponse, DrugStatistics, DrugUpdate
from app.services.pricing import calculate_prices
from app.services.reference_resolver import ReferenceResolver
from app.utils.helpers import utc_now

PRICE_FIELDS = ("purchase_price", "tax", "margin")
# Fields an update may clear; a null for any other field leaves it unchanged
NULLABLE_FIELDS = ("description", "batch_no")


class DrugService:
    """
    Service layer for drug records.
    """

    def __init__(
        self,
        drugs_repo: DrugsRepository,
        resolver: ReferenceResolver,
        settings: Settings | None = None,
    ):
        """
        Initialize service with repository dependencies.

        Args:
            drugs_repo: Repository for the drugs table
            resolver: Get-or-create access to categories, units and suppliers
            settings: Application settings; defaults to the cached instance
        """
        self.drugs_repo = drugs_repo
        self.resolver = resolver
        self.settings = settings or get_settings()

    def default_expiry(self) -> datetime:
        return utc_now() + timedelta(days=self.settings.default_expiry_days)

    async def add_drug(
        self,
        *,
        name: str,
        category: str,
        unit_name: str,
        supplier_name: str,
        purchase_price: Any,
        tax: Any = None,
        margin: Any = None,
        quantity: int | None = None,
        description: str | None = None,
        batch_no: str | None = None,
        expired_date: datetime | None = None,
    ) -> Drug:
        """
        Resolve references, derive prices and persist one drug.

        Raises:
            ResolutionError: If a category, unit or supplier cannot be resolved
            PersistenceError: If the store rejects the row (e.g. duplicate name)
        """
        refs = await self.resolver.resolve(category, unit_name, supplier_name)
        prices = calculate_prices(purchase_price, tax, margin)

        try:
            drug = await self.drugs_repo.create(
                name=name,
                description=description,
                category=category,
                unit_name=unit_name,
                supplier_name=supplier_name,
                category_id=refs.category_id,
                unit_id=refs.unit_id,
                supplier_id=refs.supplier_id,
                purchase_price_before_tax=prices.purchase_price,
                tax=prices.tax,
                margin=prices.margin,
                purchase_price_after_tax=prices.purchase_price_after_tax,
                selling_price=prices.selling_price,
                quantity=quantity or 0,
                batch_no=batch_no,
                expired_date=expired_date or self.default_expiry(),
            )
        except IntegrityError as e:
            logger.warning(f"Drug '{name}' rejected by the database: {e.orig}")
            raise PersistenceError(f"Drug '{name}' could not be saved: {e.orig}") from e

        logger.debug(f"Created drug '{drug.name}' selling_price={drug.selling_price}")
        return drug

    async def create_drug(self, payload: DrugCreate) -> Drug:
        if await self.drugs_repo.get_by_name(payload.name):
            raise PersistenceError(f"Drug '{payload.name}' already exists")
        return await self.add_drug(**payload.model_dump())

    async def get_drug(self, drug_id: str) -> Drug:
        drug = await self.drugs_repo.get_by_id(drug_id)
        if drug is None:
            raise NotFoundError(f"Drug '{drug_id}' not found")
        return drug

    async def list_all(self) -> list[Drug]:
        return await self.drugs_repo.list_all()

    async def list_drugs(
        self,
        page: int = 1,
        limit: int = 10,
        name: str | None = None,
        category_name: str | None = None,
        unit_name: str | None = None,
    ) -> DrugPage:
        drugs, total = await self.drugs_repo.filter(
            page=page,
            limit=limit,
            name=name,
            category_name=category_name,
            unit_name=unit_name,
        )
        return DrugPage(
            data=[DrugResponse.model_validate(drug) for drug in drugs],
            total=total,
            page=page,
            limit=limit,
        )

    async def list_expired(self) -> list[Drug]:
        return await self.drugs_repo.list_expired(utc_now())

    async def list_out_of_stock(self) -> list[Drug]:
        return await self.drugs_repo.list_out_of_stock()

    async def list_almost_expired(self, limit: int | None = None) -> list[Drug]:
        return await self.drugs_repo.list_almost_expired(
            limit or self.settings.almost_expired_limit
        )

    async def update_drug(self, drug_id: str, payload: DrugUpdate) -> Drug:
        """
        Apply a partial update.

        Derived prices are recomputed from the merged purchase price, tax and
        margin whenever any of the three is part of the update. Null values
        only clear the description and batch number. Renamed
        categories, units or suppliers are resolved like on creation.

        Raises:
            NotFoundError: If the drug does not exist
            PersistenceError: If the new name collides with another drug
        """
        current = await self.get_drug(drug_id)
        changes = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        fields: dict[str, Any] = {
            key: value for key, value in changes.items() if key not in PRICE_FIELDS
        }

        if any(key in changes for key in PRICE_FIELDS):
            prices = calculate_prices(
                changes.get("purchase_price", current.purchase_price_before_tax),
                changes.get("tax", current.tax),
                changes.get("margin", current.margin),
            )
            fields.update(
                purchase_price_before_tax=prices.purchase_price,
                tax=prices.tax,
                margin=prices.margin,
                purchase_price_after_tax=prices.purchase_price_after_tax,
                selling_price=prices.selling_price,
            )

        if any(key in changes for key in ("category", "unit_name", "supplier_name")):
            refs = await self.resolver.resolve(
                changes.get("category") or current.category,
                changes.get("unit_name") or current.unit_name,
                changes.get("supplier_name") or current.supplier_name,
            )
            fields.update(
                category_id=refs.category_id,
                unit_id=refs.unit_id,
                supplier_id=refs.supplier_id,
            )

        try:
            updated = await self.drugs_repo.update(drug_id, **fields)
        except IntegrityError as e:
            raise PersistenceError(f"Drug '{drug_id}' could not be updated: {e.orig}") from e

        logger.info(f"Updated drug {drug_id}: fields={sorted(fields)}")
        return updated

    async def delete_drug(self, drug_id: str) -> None:
        if not await self.drugs_repo.delete(drug_id):
            raise NotFoundError(f"Drug '{drug_id}' not found")
        logger.info(f"Deleted drug {drug_id}")

    async def statistics(self) -> DrugStatistics:
        now = datetime.now(self.settings.zone)
        stats = await self.drugs_repo.statistics(now)
        return DrugStatistics(**stats)

    async def withdraw_stock(self, drug: Drug, quantity: int) -> Drug:
        """
        Decrement stock atomically.

        Raises:
            InsufficientStockError: If fewer than ``quantity`` units are left
        """
        updated = await self.drugs_repo.withdraw_stock(drug.id, quantity)
        if updated is None:
            raise InsufficientStockError(
                f"Not enough units of '{drug.name}' in stock to sell {quantity}"
            )
        return updated
