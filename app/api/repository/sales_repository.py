"""
Sales repository.
Records sales and aggregates revenue and cost of goods sold.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Sale

from .database_repository import BaseRepository

REVENUE = func.coalesce(func.sum(Sale.quantity * Sale.unit_price), 0)
COGS = func.coalesce(func.sum(Sale.quantity * Sale.unit_cost), 0)


class SalesRepository(BaseRepository[Sale]):
    """Repository for the sales table."""

    def __init__(self, session: AsyncSession):
        super().__init__(Sale, session)

    async def totals_between(
        self, start: datetime, end: datetime
    ) -> tuple[Decimal, Decimal]:
        """
        Sum revenue and COGS for sales in ``[start, end)``.

        Returns:
            Tuple of (revenue, cogs)
        """
        query = select(REVENUE, COGS).where(
            Sale.created_at >= start, Sale.created_at < end
        )
        result = await self.session.execute(query)
        revenue, cogs = result.one()
        return Decimal(revenue), Decimal(cogs)

    async def totals_by_period(
        self,
        period: str,
        timezone: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[tuple[datetime, Decimal, Decimal]]:
        """
        Group revenue and COGS by calendar month or year in a time zone.

        Args:
            period: ``"month"`` or ``"year"``
            timezone: IANA zone the calendar buckets are computed in
            start: Optional inclusive lower bound on sale time
            end: Optional exclusive upper bound on sale time

        Returns:
            List of (local bucket start, revenue, cogs), oldest first
        """
        if period not in ("month", "year"):
            raise ValueError(f"Unsupported period: {period}")

        bucket = func.date_trunc(period, func.timezone(timezone, Sale.created_at))
        query = select(bucket.label("bucket"), REVENUE, COGS)
        if start is not None:
            query = query.where(Sale.created_at >= start)
        if end is not None:
            query = query.where(Sale.created_at < end)
        query = query.group_by(bucket).order_by(bucket)

        result = await self.session.execute(query)
        return [(row[0], Decimal(row[1]), Decimal(row[2])) for row in result.all()]
