"""Shared fixtures for the test suite."""
import pytest

from app.core.config import Settings


@pytest.fixture
def settings():
    """Settings with deterministic import and time zone options."""
    return Settings(
        timezone="Asia/Jakarta",
        import_atomic=False,
        import_strict_columns=True,
        default_expiry_days=365,
    )
