"""Tests for ReportService and the financial report PDF."""
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, Mock
from zoneinfo import ZoneInfo

import pytest

from app.core.exceptions import ValidationError
from app.schemas.report import NetIncomeRequest
from app.services.report_service import ReportService, _next_month

JAKARTA = ZoneInfo("Asia/Jakarta")


@pytest.fixture
def mock_sales_repo():
    repo = Mock()
    repo.totals_between = AsyncMock(return_value=(Decimal("1000"), Decimal("600")))
    repo.totals_by_period = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def report_service(mock_sales_repo, settings):
    return ReportService(mock_sales_repo, settings)


def test_next_month_rolls_over_year():
    assert _next_month(date(2026, 10, 1)) == date(2026, 11, 1)
    assert _next_month(date(2026, 12, 1)) == date(2027, 1, 1)


@pytest.mark.asyncio
async def test_current_month_recap_uses_local_month_bounds(report_service, mock_sales_repo):
    # When
    recap = await report_service.current_month_recap(today=date(2026, 10, 18))

    # Then
    assert recap.month == "2026-10"
    assert recap.total_revenue == 1000
    assert recap.total_cogs == 600
    assert recap.total_gross_profit_loss == 400
    mock_sales_repo.totals_between.assert_awaited_once_with(
        datetime(2026, 10, 1, tzinfo=JAKARTA),
        datetime(2026, 11, 1, tzinfo=JAKARTA),
    )


@pytest.mark.asyncio
async def test_current_month_recap_reports_loss(report_service, mock_sales_repo):
    mock_sales_repo.totals_between.return_value = (Decimal("100"), Decimal("250"))

    recap = await report_service.current_month_recap(today=date(2026, 10, 18))

    assert recap.total_gross_profit_loss == -150


@pytest.mark.asyncio
async def test_monthly_figures_cover_every_month(report_service, mock_sales_repo):
    """Test that months without sales are reported with zero totals."""
    # Given
    mock_sales_repo.totals_by_period.return_value = [
        (datetime(2026, 3, 1), Decimal("500"), Decimal("300")),
        (datetime(2026, 10, 1), Decimal("1000"), Decimal("600")),
    ]

    # When
    months = await report_service.monthly_revenue_and_cogs(today=date(2026, 10, 18))

    # Then
    assert [m.period for m in months][:3] == ["2026-01", "2026-02", "2026-03"]
    assert len(months) == 12
    assert months[0].revenue == 0
    assert months[2].revenue == 500
    assert months[2].gross_profit == 200
    assert months[9].cogs == 600
    args, kwargs = mock_sales_repo.totals_by_period.call_args
    assert args == ("month", "Asia/Jakarta")
    assert kwargs["start"] == datetime(2026, 1, 1, tzinfo=JAKARTA)
    assert kwargs["end"] == datetime(2027, 1, 1, tzinfo=JAKARTA)


@pytest.mark.asyncio
async def test_yearly_figures(report_service, mock_sales_repo):
    mock_sales_repo.totals_by_period.return_value = [
        (datetime(2025, 1, 1), Decimal("2000"), Decimal("1500")),
        (datetime(2026, 1, 1), Decimal("1000"), Decimal("600")),
    ]

    years = await report_service.yearly_revenue_and_cogs()

    assert [y.period for y in years] == ["2025", "2026"]
    assert years[0].gross_profit == 500


@pytest.mark.asyncio
async def test_net_income_estimation(report_service, mock_sales_repo):
    # Given
    request = NetIncomeRequest(
        start_date=date(2026, 10, 1),
        end_date=date(2026, 10, 31),
        operation_cost=100,
        tax_percentage=10,
    )

    # When
    result = await report_service.net_income_estimation(request)

    # Then
    assert result.gross_profit == 400
    assert result.profit_before_tax == 300
    assert result.tax == 30
    assert result.net_income == 270
    mock_sales_repo.totals_between.assert_awaited_once_with(
        datetime(2026, 10, 1, tzinfo=JAKARTA),
        datetime(2026, 11, 1, tzinfo=JAKARTA),
    )


@pytest.mark.asyncio
async def test_net_income_loss_is_not_taxed(report_service):
    request = NetIncomeRequest(
        start_date=date(2026, 10, 1),
        end_date=date(2026, 10, 31),
        operation_cost=500,
        tax_percentage=10,
    )

    result = await report_service.net_income_estimation(request)

    assert result.profit_before_tax == -100
    assert result.tax == 0
    assert result.net_income == -100


@pytest.mark.asyncio
async def test_net_income_rejects_reversed_range(report_service, mock_sales_repo):
    request = NetIncomeRequest(
        start_date=date(2026, 10, 31),
        end_date=date(2026, 10, 1),
        operation_cost=0,
        tax_percentage=0,
    )

    with pytest.raises(ValidationError) as exc_info:
        await report_service.net_income_estimation(request)

    assert exc_info.value.field == "end_date"
    mock_sales_repo.totals_between.assert_not_awaited()


@pytest.mark.asyncio
async def test_financial_report_pdf(report_service, mock_sales_repo):
    mock_sales_repo.totals_by_period.return_value = [
        (datetime(2026, 1, 1), Decimal("1000"), Decimal("600")),
    ]

    pdf = await report_service.financial_report_pdf()

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000
