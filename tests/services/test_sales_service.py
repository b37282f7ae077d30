"""Tests for SalesService."""
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from app.core.exceptions import InsufficientStockError, NotFoundError
from app.schemas.report import SaleCreate
from app.services.sales_service import SalesService
from tests.factories import make_drug


@pytest.fixture
def mock_drug_service():
    service = Mock()
    service.get_drug = AsyncMock(return_value=make_drug(quantity=5))
    service.withdraw_stock = AsyncMock()
    return service


@pytest.fixture
def mock_sales_repo():
    repo = Mock()
    repo.create = AsyncMock(side_effect=lambda **fields: SimpleNamespace(id="sale-1", **fields))
    return repo


@pytest.fixture
def sales_service(mock_sales_repo, mock_drug_service):
    return SalesService(mock_sales_repo, mock_drug_service)


@pytest.mark.asyncio
async def test_record_sale_snapshots_prices(sales_service, mock_sales_repo, mock_drug_service):
    # When
    sale = await sales_service.record_sale(SaleCreate(drug_id="drug-1", quantity=3))

    # Then
    assert sale.quantity == 3
    assert sale.unit_price == Decimal("1320")
    assert sale.unit_cost == Decimal("1100")
    drug = mock_drug_service.get_drug.return_value
    mock_drug_service.withdraw_stock.assert_awaited_once_with(drug, 3)


@pytest.mark.asyncio
async def test_record_sale_rejects_insufficient_stock(
    sales_service, mock_sales_repo, mock_drug_service
):
    with pytest.raises(InsufficientStockError):
        await sales_service.record_sale(SaleCreate(drug_id="drug-1", quantity=6))

    mock_sales_repo.create.assert_not_awaited()
    mock_drug_service.withdraw_stock.assert_not_awaited()


@pytest.mark.asyncio
async def test_record_sale_unknown_drug(sales_service, mock_drug_service):
    mock_drug_service.get_drug.side_effect = NotFoundError("Drug 'missing' not found")

    with pytest.raises(NotFoundError):
        await sales_service.record_sale(SaleCreate(drug_id="missing", quantity=1))


@pytest.mark.asyncio
async def test_record_sale_loses_race_for_last_units(
    sales_service, mock_sales_repo, mock_drug_service
):
    """Test that a sale is not recorded when the conditional decrement fails."""
    # Given: the read saw enough stock but another sale took it first
    mock_drug_service.withdraw_stock.side_effect = InsufficientStockError(
        "Not enough units of 'Paracetamol' in stock to sell 3"
    )

    # When
    with pytest.raises(InsufficientStockError):
        await sales_service.record_sale(SaleCreate(drug_id="drug-1", quantity=3))

    # Then
    mock_sales_repo.create.assert_not_awaited()
