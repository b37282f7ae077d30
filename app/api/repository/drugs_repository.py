"""
Drugs repository.
Handles drug lookups, filtered listings and inventory aggregates.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Drug

from .database_repository import BaseRepository


class DrugsRepository(BaseRepository[Drug]):
    """Repository for the drugs table."""

    def __init__(self, session: AsyncSession):
        super().__init__(Drug, session)

    async def get_by_name(self, name: str) -> Drug | None:
        result = await self.session.execute(select(Drug).where(Drug.name == name))
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Drug]:
        result = await self.session.execute(select(Drug).order_by(Drug.name))
        return list(result.scalars().all())

    async def filter(
        self,
        page: int,
        limit: int,
        name: str | None = None,
        category_name: str | None = None,
        unit_name: str | None = None,
    ) -> tuple[list[Drug], int]:
        """
        Filter drugs and return one page plus the total match count.

        Args:
            page: 1-based page number
            limit: Page size
            name: Case-insensitive substring of the drug name
            category_name: Exact category name
            unit_name: Exact unit name

        Returns:
            Tuple of (drugs on the page, total matching drugs)
        """
        conditions: list[Any] = []
        if name:
            conditions.append(Drug.name.ilike(f"%{name}%"))
        if category_name:
            conditions.append(Drug.category == category_name)
        if unit_name:
            conditions.append(Drug.unit_name == unit_name)

        query = (
            select(Drug)
            .where(*conditions)
            .order_by(Drug.name)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.session.execute(query)
        drugs = list(result.scalars().all())

        total = await self.session.execute(
            select(func.count()).select_from(Drug).where(*conditions)
        )
        return drugs, total.scalar_one()

    async def list_expired(self, now: datetime) -> list[Drug]:
        result = await self.session.execute(
            select(Drug).where(Drug.expired_date < now).order_by(Drug.expired_date)
        )
        return list(result.scalars().all())

    async def list_out_of_stock(self) -> list[Drug]:
        result = await self.session.execute(
            select(Drug).where(Drug.quantity <= 0).order_by(Drug.name)
        )
        return list(result.scalars().all())

    async def list_almost_expired(self, limit: int) -> list[Drug]:
        result = await self.session.execute(
            select(Drug).order_by(Drug.expired_date.asc()).limit(limit)
        )
        return list(result.scalars().all())

    async def statistics(self, now: datetime) -> dict[str, int]:
        """
        Aggregate inventory counters in a single query.

        Args:
            now: Reference instant for the expiry check

        Returns:
            Dictionary with total_drugs, total_quantity, expired_drugs
            and out_of_stock_drugs
        """
        query = select(
            func.count(Drug.id),
            func.coalesce(func.sum(Drug.quantity), 0),
            func.count(Drug.id).filter(Drug.expired_date <= now),
            func.count(Drug.id).filter(Drug.quantity == 0),
        )
        result = await self.session.execute(query)
        total, quantity, expired, out_of_stock = result.one()
        return {
            "total_drugs": total,
            "total_quantity": int(quantity),
            "expired_drugs": expired,
            "out_of_stock_drugs": out_of_stock,
        }

    async def withdraw_stock(self, drug_id: str, quantity: int) -> Drug | None:
        """
        Take ``quantity`` units out of stock in one conditional UPDATE.

        The stock check and the decrement run in the same statement, so
        concurrent withdrawals can neither oversell nor overwrite each other.

        Returns:
            Updated drug, or None if the drug is missing or has fewer units
        """
        query = (
            update(Drug)
            .where(Drug.id == drug_id, Drug.quantity >= quantity)
            .values(quantity=Drug.quantity - quantity)
            .returning(Drug)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
