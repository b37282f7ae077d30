"""
Financial report service layer.
Computes revenue, cost of goods sold (COGS) and net income estimations
from recorded sales, using calendar periods of the configured time zone.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal

from loguru import logger

from app.api.repository.sales_repository import SalesRepository
from app.core.config import Settings, get_settings
from app.core.exceptions import ValidationError
from app.schemas.report import (
    MonthRecap,
    NetIncomeEstimation,
    NetIncomeRequest,
    PeriodFigures,
    RevenueAndCogs,
)
from app.services.pricing import HUNDRED, to_decimal
from app.services.report_pdf_service import build_financial_report_pdf


def _next_month(day: date) -> date:
    return date(day.year + day.month // 12, day.month % 12 + 1, 1)


def _figures(period: str, revenue: Decimal, cogs: Decimal) -> PeriodFigures:
    return PeriodFigures(
        period=period,
        revenue=float(revenue),
        cogs=float(cogs),
        gross_profit=float(revenue - cogs),
    )


class ReportService:
    """
    Service layer for financial reporting.
    """

    def __init__(self, sales_repo: SalesRepository, settings: Settings | None = None):
        self.sales_repo = sales_repo
        self.settings = settings or get_settings()

    def _local_midnight(self, day: date) -> datetime:
        return datetime.combine(day, time.min, tzinfo=self.settings.zone)

    def _today(self) -> date:
        return datetime.now(self.settings.zone).date()

    async def current_month_recap(self, today: date | None = None) -> MonthRecap:
        """Revenue, COGS and gross profit/loss of the current calendar month."""
        month_start = (today or self._today()).replace(day=1)
        revenue, cogs = await self.sales_repo.totals_between(
            self._local_midnight(month_start),
            self._local_midnight(_next_month(month_start)),
        )
        logger.debug(f"Month recap {month_start:%Y-%m}: revenue={revenue}, cogs={cogs}")
        return MonthRecap(
            month=f"{month_start:%Y-%m}",
            total_revenue=float(revenue),
            total_cogs=float(cogs),
            total_gross_profit_loss=float(revenue - cogs),
        )

    async def monthly_revenue_and_cogs(self, today: date | None = None) -> list[PeriodFigures]:
        """Revenue and COGS for each of the twelve months of the current year."""
        year = (today or self._today()).year
        rows = await self.sales_repo.totals_by_period(
            "month",
            self.settings.timezone,
            start=self._local_midnight(date(year, 1, 1)),
            end=self._local_midnight(date(year + 1, 1, 1)),
        )
        by_month = {(bucket.year, bucket.month): (revenue, cogs) for bucket, revenue, cogs in rows}

        zero = (Decimal(0), Decimal(0))
        return [
            _figures(f"{year}-{month:02d}", *by_month.get((year, month), zero))
            for month in range(1, 13)
        ]

    async def yearly_revenue_and_cogs(self) -> list[PeriodFigures]:
        """Revenue and COGS for every year that has sales."""
        rows = await self.sales_repo.totals_by_period("year", self.settings.timezone)
        return [_figures(str(bucket.year), revenue, cogs) for bucket, revenue, cogs in rows]

    async def revenue_and_cogs(self) -> RevenueAndCogs:
        return RevenueAndCogs(
            monthly=await self.monthly_revenue_and_cogs(),
            yearly=await self.yearly_revenue_and_cogs(),
        )

    async def net_income_estimation(self, request: NetIncomeRequest) -> NetIncomeEstimation:
        """
        Estimate net income for a date range.

        Income tax is charged only when profit before tax is positive.

        Raises:
            ValidationError: If end_date is before start_date
        """
        if request.end_date < request.start_date:
            raise ValidationError(
                "end_date",
                f"end_date {request.end_date} is before start_date {request.start_date}",
            )

        revenue, cogs = await self.sales_repo.totals_between(
            self._local_midnight(request.start_date),
            self._local_midnight(request.end_date + timedelta(days=1)),
        )
        gross_profit = revenue - cogs
        operation_cost = to_decimal(request.operation_cost)
        tax_percentage = to_decimal(request.tax_percentage)
        profit_before_tax = gross_profit - operation_cost
        tax = profit_before_tax * tax_percentage / HUNDRED if profit_before_tax > 0 else Decimal(0)

        logger.info(
            f"Net income estimation {request.start_date}..{request.end_date}: "
            f"revenue={revenue}, cogs={cogs}, net={profit_before_tax - tax}"
        )
        return NetIncomeEstimation(
            start_date=request.start_date,
            end_date=request.end_date,
            revenue=float(revenue),
            cogs=float(cogs),
            gross_profit=float(gross_profit),
            operation_cost=float(operation_cost),
            profit_before_tax=float(profit_before_tax),
            tax_percentage=float(tax_percentage),
            tax=float(tax),
            net_income=float(profit_before_tax - tax),
        )

    async def financial_report_pdf(self) -> bytes:
        recap = await self.current_month_recap()
        monthly = await self.monthly_revenue_and_cogs()
        yearly = await self.yearly_revenue_and_cogs()
        return build_financial_report_pdf(
            title=f"{self.settings.app_name} - Financial Report",
            generated_at=datetime.now(self.settings.zone),
            recap=recap,
            monthly=monthly,
            yearly=yearly,
        )
