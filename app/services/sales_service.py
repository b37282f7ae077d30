"""
Sales service layer.
Records drug sales with price snapshots used by the financial reports.
"""

from loguru import logger

from app.api.repository.sales_repository import SalesRepository
from app.core.exceptions import InsufficientStockError
from app.models import Sale
from app.schemas.report import SaleCreate
from app.services.drug_service import DrugService


class SalesService:
    def __init__(self, sales_repo: SalesRepository, drug_service: DrugService):
        self.sales_repo = sales_repo
        self.drug_service = drug_service

    async def record_sale(self, payload: SaleCreate) -> Sale:
        """
        Record a sale and take the sold quantity out of stock.

        Raises:
            NotFoundError: If the drug does not exist
            InsufficientStockError: If stock is lower than the sold quantity
        """
        drug = await self.drug_service.get_drug(payload.drug_id)
        if drug.quantity < payload.quantity:
            raise InsufficientStockError(
                f"Only {drug.quantity} units of '{drug.name}' in stock, "
                f"cannot sell {payload.quantity}"
            )

        # Conditional decrement; a concurrent sale may have taken the stock since the read
        await self.drug_service.withdraw_stock(drug, payload.quantity)
        sale = await self.sales_repo.create(
            drug_id=drug.id,
            quantity=payload.quantity,
            unit_price=drug.selling_price,
            unit_cost=drug.purchase_price_after_tax,
        )
        logger.info(f"Sold {payload.quantity} x '{drug.name}' (sale {sale.id})")
        return sale
