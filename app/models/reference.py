import uuid

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Category(Base):
    """Drug category, unique by name."""
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Category(name='{self.name}')>"


class Unit(Base):
    """Unit of sale (box, strip, bottle...), unique by name."""
    __tablename__ = "units"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Unit(name='{self.name}')>"


class Supplier(Base):
    """
    Supplier, unique by name.

    Suppliers created implicitly by a drug import have no contact details;
    address and phone then hold the ``"-"`` placeholder.
    """
    __tablename__ = "suppliers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False, default="-")
    phone: Mapped[str] = mapped_column(String(50), nullable=False, default="-")

    def __repr__(self) -> str:
        return f"<Supplier(name='{self.name}')>"
