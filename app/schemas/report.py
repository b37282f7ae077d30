"""Pydantic schemas for sales and financial reports."""
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class SaleCreate(BaseModel):
    drug_id: str
    quantity: int = Field(..., gt=0)


class SaleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    drug_id: str | None
    quantity: int
    unit_price: float
    unit_cost: float
    created_at: datetime


class MonthRecap(BaseModel):
    """Revenue, cost of goods sold and gross result for one month."""
    month: str
    total_revenue: float
    total_cogs: float
    total_gross_profit_loss: float


class PeriodFigures(BaseModel):
    period: str
    revenue: float
    cogs: float
    gross_profit: float


class RevenueAndCogs(BaseModel):
    monthly: list[PeriodFigures]
    yearly: list[PeriodFigures]


class NetIncomeRequest(BaseModel):
    """Inputs for a net income estimation.

    Attributes:
        start_date: First day of the period (inclusive).
        end_date: Last day of the period (inclusive).
        operation_cost: Operating expenses for the period.
        tax_percentage: Income tax rate applied to a positive profit.
    """
    start_date: date
    end_date: date
    operation_cost: float = Field(..., ge=0)
    tax_percentage: float = Field(..., ge=0, le=100)


class NetIncomeEstimation(BaseModel):
    start_date: date
    end_date: date
    revenue: float
    cogs: float
    gross_profit: float
    operation_cost: float
    profit_before_tax: float
    tax_percentage: float
    tax: float
    net_income: float
