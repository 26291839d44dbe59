from pathlib import Path

import pytest

from dropship_payout.config.loader import AppConfig, OrdersFileConfig
from dropship_payout.models import PayoutRequest, ProductPrice


@pytest.fixture
def fixtures_dir() -> Path:
    """Chemin vers le répertoire de fixtures."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_config() -> AppConfig:
    """AppConfig valide minimale pour les tests (identique à fixtures/config)."""
    return AppConfig(
        product_prices=[
            ProductPrice(
                dropshipper_email="seller@example.com",
                product_uid="SKU-001",
                product_name="Steel Water Bottle 1L",
                product_cost_per_unit=100.0,
                sku="SKU-001",
            ),
            ProductPrice(
                dropshipper_email="seller@example.com",
                product_uid="SKU-002",
                product_name="Cotton Kurta",
                product_cost_per_unit=240.5,
                sku="SKU-002",
            ),
            ProductPrice(
                dropshipper_email="other@example.com",
                product_uid="SKU-001",
                product_name="Steel Water Bottle 1L",
                product_cost_per_unit=90.0,
            ),
        ],
        shipping_rates={"Delhivery": 45.0, "Ekart": 40.0},
        orders_file=OrdersFileConfig(encoding="utf-8", separator=","),
    )


@pytest.fixture
def july_request() -> PayoutRequest:
    """Fenêtres de commande et de livraison couvrant juillet 2025."""
    return PayoutRequest(
        order_date_from="2025-07-01",
        order_date_to="2025-07-31",
        delivered_date_from="2025-07-01",
        delivered_date_to="2025-07-31",
    )
