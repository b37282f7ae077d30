"""Pydantic schemas for request/response validation.

This module exports all Pydantic schema classes used for API request
validation and response serialization.
"""
from .common import ApiResponse
from .drug import (
    AlmostExpiredDrug,
    DrugCreate,
    DrugImportRecord,
    DrugPage,
    DrugResponse,
    DrugStatistics,
    DrugUpdate,
    ImportResult,
)
from .report import (
    MonthRecap,
    NetIncomeEstimation,
    NetIncomeRequest,
    PeriodFigures,
    RevenueAndCogs,
    SaleCreate,
    SaleResponse,
)

__all__ = [
    "AlmostExpiredDrug",
    "ApiResponse",
    "DrugCreate",
    "DrugImportRecord",
    "DrugPage",
    "DrugResponse",
    "DrugStatistics",
    "DrugUpdate",
    "ImportResult",
    "MonthRecap",
    "NetIncomeEstimation",
    "NetIncomeRequest",
    "PeriodFigures",
    "RevenueAndCogs",
    "SaleCreate",
    "SaleResponse",
]
