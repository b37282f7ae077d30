"""Pydantic schemas for drugs.

Defines validation schemas for drug records (create, update, response),
filtered listings, inventory statistics and the canonical import record.
"""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.helpers import clean_text, is_blank, to_utc_datetime


class DrugBase(BaseModel):
    """Fields shared by drug create and response schemas.

    Attributes:
        name: Unique drug name.
        description: Free-text description.
        category: Category name; created on first use.
        unit_name: Unit of sale (box, strip, bottle...); created on first use.
        supplier_name: Supplier name; created on first use.
        batch_no: Manufacturer batch number.
        quantity: Units on hand.
        expired_date: Expiry date and time.
    """
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    category: str = Field(..., min_length=1)
    unit_name: str = Field(..., min_length=1)
    supplier_name: str = Field(..., min_length=1)
    batch_no: str | None = None
    quantity: int = Field(default=0, ge=0)
    expired_date: datetime | None = None


class DrugCreate(DrugBase):
    """Schema for creating a drug. Prices after tax and margin are derived."""
    purchase_price: float = Field(..., ge=0)
    tax: float = Field(default=0, ge=0)
    margin: float = Field(default=0, ge=0)


class DrugUpdate(BaseModel):
    """Schema for updating a drug. All fields are optional."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    category: str | None = Field(default=None, min_length=1)
    unit_name: str | None = Field(default=None, min_length=1)
    supplier_name: str | None = Field(default=None, min_length=1)
    batch_no: str | None = None
    quantity: int | None = Field(default=None, ge=0)
    expired_date: datetime | None = None
    purchase_price: float | None = Field(default=None, ge=0)
    tax: float | None = Field(default=None, ge=0)
    margin: float | None = Field(default=None, ge=0)


class DrugResponse(DrugBase):
    """Schema for drug API responses, built from the ORM model."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    purchase_price_before_tax: float
    tax: float
    margin: float
    purchase_price_after_tax: float
    selling_price: float
    expired_date: datetime


class AlmostExpiredDrug(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    quantity: int
    expired_date: datetime


class DrugPage(BaseModel):
    """One page of a filtered drug listing."""
    data: list[DrugResponse]
    total: int
    page: int
    limit: int


class DrugStatistics(BaseModel):
    total_drugs: int
    total_quantity: int
    expired_drugs: int
    out_of_stock_drugs: int


class DrugImportRecord(BaseModel):
    """Canonical record produced by the row normalizer.

    Field aliases are the column names used in import files, so keyed rows
    validate directly into this model. Every field is optional here; the
    import validator reports missing mandatory fields by name.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    description: str | None = None
    category: str | None = None
    purchase_price: float | None = Field(default=None, ge=0, alias="purchasePrice")
    tax: float | None = Field(default=None, ge=0)
    quantity: int | None = Field(default=None, ge=0)
    unit_name: str | None = Field(default=None, alias="unitName")
    margin: float | None = Field(default=None, ge=0)
    batch_no: str | None = Field(default=None, alias="batchNo")
    expired_date: datetime | None = Field(default=None, alias="expiredDate")
    supplier_name: str | None = Field(default=None, alias="supplierName")

    @field_validator(
        "name", "description", "category", "unit_name", "batch_no", "supplier_name",
        mode="before",
    )
    @classmethod
    def _clean_text(cls, v: Any) -> str | None:
        return clean_text(v)

    @field_validator("purchase_price", "tax", "quantity", "margin", mode="before")
    @classmethod
    def _blank_number(cls, v: Any) -> Any:
        if is_blank(v):
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("expired_date", mode="before")
    @classmethod
    def _normalize_date(cls, v: Any) -> datetime | None:
        return to_utc_datetime(v)

    def echo(self) -> dict[str, Any]:
        """Return the record with file column names, for error messages."""
        return self.model_dump(by_alias=True, mode="json")


class ImportResult(BaseModel):
    """Outcome of a successful import batch."""
    count: int
    atomic: bool
    data: list[DrugResponse]
