"""
Dependency injection for FastAPI endpoints.
Provides database sessions, repositories and services.
"""

from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.repository.drugs_repository import DrugsRepository
from app.api.repository.reference_repository import ReferenceRepository
from app.api.repository.sales_repository import SalesRepository
from app.core.config import Settings, get_settings
from app.core.database import async_session
from app.services.drug_import_service import DrugImportService
from app.services.drug_service import DrugService
from app.services.reference_resolver import ReferenceResolver
from app.services.report_service import ReportService
from app.services.sales_service import SalesService


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides an async database session with automatic transaction management.

    - Commits when the request handler completes
    - Rolls back on any exception
    - Repositories only flush, so the whole request is one transaction

    Yields:
        AsyncSession: Database session for async operations
    """
    if async_session is None:
        raise RuntimeError("Database connection not available - async_session is None")

    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def get_transactional_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a session WITHOUT automatic commit.
    The import service commits per row or per batch itself.

    Yields:
        AsyncSession: Database session for manual transaction management
    """
    if async_session is None:
        raise RuntimeError("Database connection not available - async_session is None")

    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


def get_drug_service(
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> DrugService:
    """
    Dependency that provides a DrugService bound to a request-scoped session.

    Args:
        session: Database session with auto-commit/rollback
        settings: Application settings

    Returns:
        DrugService: Service instance
    """
    return DrugService(
        drugs_repo=DrugsRepository(session=session),
        resolver=ReferenceResolver(ReferenceRepository(session=session)),
        settings=settings,
    )


def get_drug_import_service(
    session: AsyncSession = Depends(get_transactional_session),
    settings: Settings = Depends(get_settings),
) -> DrugImportService:
    """
    Dependency that provides a DrugImportService with manual transaction control.

    Args:
        session: Database session the import service commits itself
        settings: Application settings

    Returns:
        DrugImportService: Service instance
    """
    drug_service = DrugService(
        drugs_repo=DrugsRepository(session=session),
        resolver=ReferenceResolver(ReferenceRepository(session=session)),
        settings=settings,
    )
    return DrugImportService(session=session, drug_service=drug_service, settings=settings)


def get_sales_service(
    session: AsyncSession = Depends(get_async_session),
    drug_service: DrugService = Depends(get_drug_service),
) -> SalesService:
    return SalesService(sales_repo=SalesRepository(session=session), drug_service=drug_service)


def get_report_service(
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> ReportService:
    return ReportService(sales_repo=SalesRepository(session=session), settings=settings)
