"""Tests for ReferenceResolver and ReferenceRepository get-or-create."""
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from app.api.repository.reference_repository import ReferenceRepository
from app.core.exceptions import ResolutionError
from app.models import Category, Supplier, Unit
from app.services.reference_resolver import ReferenceResolver


def _result(value):
    result = Mock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def mock_reference_repo():
    """Create a mock ReferenceRepository whose rows are named after their ids."""
    repo = Mock()
    repo.get_or_create = AsyncMock(
        side_effect=lambda model, name, **defaults: SimpleNamespace(
            id=f"{model.__tablename__}:{name}", name=name, **defaults
        )
    )
    return repo


@pytest.mark.asyncio
async def test_resolve_returns_identifiers(mock_reference_repo):
    # Given
    resolver = ReferenceResolver(mock_reference_repo)

    # When
    refs = await resolver.resolve("Analgesic", "box", "PT Kimia")

    # Then
    assert refs.category_id == "categories:Analgesic"
    assert refs.unit_id == "units:box"
    assert refs.supplier_id == "suppliers:PT Kimia"


@pytest.mark.asyncio
async def test_supplier_created_with_placeholder_contact(mock_reference_repo):
    resolver = ReferenceResolver(mock_reference_repo)

    await resolver.resolve("Analgesic", "box", "PT Kimia")

    mock_reference_repo.get_or_create.assert_any_await(
        Supplier, "PT Kimia", address="-", phone="-"
    )
    mock_reference_repo.get_or_create.assert_any_await(Category, "Analgesic")
    mock_reference_repo.get_or_create.assert_any_await(Unit, "box")


@pytest.mark.asyncio
async def test_database_failure_raises_resolution_error(mock_reference_repo):
    mock_reference_repo.get_or_create.side_effect = OperationalError("INSERT", {}, Exception("down"))
    resolver = ReferenceResolver(mock_reference_repo)

    with pytest.raises(ResolutionError) as exc_info:
        await resolver.resolve("Analgesic", "box", "PT Kimia")

    assert exc_info.value.entity == "category"
    assert exc_info.value.name == "Analgesic"


@pytest.mark.asyncio
async def test_missing_row_after_insert_raises_resolution_error(mock_reference_repo):
    mock_reference_repo.get_or_create.side_effect = None
    mock_reference_repo.get_or_create.return_value = None
    resolver = ReferenceResolver(mock_reference_repo)

    with pytest.raises(ResolutionError):
        await resolver.resolve("Analgesic", "box", "PT Kimia")


@pytest.mark.asyncio
async def test_get_or_create_returns_existing_row_without_insert():
    """Test that an existing name is read, not inserted again."""
    existing = Category(id="cat-1", name="Analgesic")
    session = Mock()
    session.execute = AsyncMock(return_value=_result(existing))

    instance = await ReferenceRepository(session).get_or_create(Category, "Analgesic")

    assert instance is existing
    session.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_get_or_create_rereads_after_conflicting_insert():
    """Test that a row created concurrently is read back after ON CONFLICT DO NOTHING."""
    created_elsewhere = Unit(id="unit-1", name="box")
    session = Mock()
    session.execute = AsyncMock(
        side_effect=[_result(None), Mock(), _result(created_elsewhere)]
    )

    instance = await ReferenceRepository(session).get_or_create(Unit, "box")

    assert instance is created_elsewhere
    assert session.execute.await_count == 3
    insert_stmt = session.execute.await_args_list[1].args[0]
    assert "ON CONFLICT" in str(insert_stmt.compile(dialect=postgresql.dialect()))
