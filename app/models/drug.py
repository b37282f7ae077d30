import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base

MONEY = Numeric(18, 4)
PERCENT = Numeric(7, 3)


class Drug(Base):
    """
    SQLAlchemy model for the drugs table.

    Category, unit and supplier are stored both by name (as shown to users)
    and by foreign key to their reference tables. The two price columns after
    tax and margin are derived from ``purchase_price_before_tax``, ``tax`` and
    ``margin`` and must be recomputed whenever one of those changes.
    """
    __tablename__ = "drugs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    category: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    unit_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    supplier_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category_id: Mapped[str | None] = mapped_column(ForeignKey("categories.id"), nullable=True)
    unit_id: Mapped[str | None] = mapped_column(ForeignKey("units.id"), nullable=True)
    supplier_id: Mapped[str | None] = mapped_column(ForeignKey("suppliers.id"), nullable=True)

    purchase_price_before_tax: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    tax: Mapped[Decimal] = mapped_column(PERCENT, nullable=False, default=0)
    margin: Mapped[Decimal] = mapped_column(PERCENT, nullable=False, default=0)
    purchase_price_after_tax: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    selling_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    batch_no: Mapped[str | None] = mapped_column(String(100), nullable=True)
    expired_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<Drug(id='{self.id}', name='{self.name}', quantity={self.quantity})>"
