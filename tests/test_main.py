"""Tests for main FastAPI application endpoints.

Tests the root and health check endpoints to ensure basic
application functionality.
"""
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

import app.main as main
from app.main import app

client = TestClient(app)


def test_root():
    """Test the root endpoint returns correct status and application info."""
    response = client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "running"
    assert body["app"] == "Pharmacy Inventory API"


def test_health_reports_database_connected(monkeypatch):
    monkeypatch.setattr(main, "test_connection_async", AsyncMock(return_value=True))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["database"] == "connected"


def test_health_reports_database_unavailable(monkeypatch):
    monkeypatch.setattr(main, "test_connection_async", AsyncMock(return_value=False))

    response = client.get("/health")

    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "unavailable"
