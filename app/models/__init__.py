"""SQLAlchemy ORM models for database tables.

This module exports all database model classes used throughout the application.
Each model represents a table in the PostgreSQL database.
"""
from .drug import Drug
from .reference import Category, Supplier, Unit
from .sale import Sale

__all__ = [
    "Category",
    "Drug",
    "Sale",
    "Supplier",
    "Unit",
]
