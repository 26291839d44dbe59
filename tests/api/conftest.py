"""Fixtures pour les tests d'intégration API."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

FIXTURES = Path(__file__).parent.parent / "fixtures"


@pytest.fixture
def client() -> TestClient:
    """TestClient FastAPI avec configuration de test."""
    os.environ["CONFIG_DIR"] = str(FIXTURES / "config")

    from api.app.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def orders_upload() -> dict[str, tuple[str, bytes, str]]:
    """Fichier de commandes pour upload multipart."""
    return {"orders": ("orders.csv", (FIXTURES / "orders" / "orders.csv").read_bytes(), "text/csv")}


@pytest.fixture
def history_upload() -> tuple[str, bytes, str]:
    return ("history.csv", (FIXTURES / "orders" / "history.csv").read_bytes(), "text/csv")


@pytest.fixture
def july_form() -> dict[str, str]:
    return {
        "order_date_from": "2025-07-01",
        "order_date_to": "2025-07-31",
        "delivered_date_from": "2025-07-01",
        "delivered_date_to": "2025-07-31",
    }
