"""Tests pour controls/missing_config_checker.py."""

from __future__ import annotations

import logging
from datetime import date

import pytest

from dropship_payout.controls.missing_config_checker import MissingConfigChecker
from dropship_payout.engine.indexes import ProductPriceIndex, ShippingRateIndex
from dropship_payout.models import MissingPrice, OrderRecord

PRICES = ProductPriceIndex({("seller@example.com", "SKU-001"): 100.0})
RATES = ShippingRateIndex({"Delhivery": 45.0})


def _make_order(**overrides: object) -> OrderRecord:
    defaults: dict[str, object] = {
        "order_id": "ORD-1",
        "waybill": "WB-1",
        "dropshipper_email": "seller@example.com",
        "product_uid": "SKU-001",
        "product_name": "Steel Water Bottle 1L",
        "sku": "SKU-001",
        "shipping_provider": "Delhivery",
        "qty": 1,
        "order_date": date(2025, 7, 3),
        "delivered_date": None,
        "rts_date": None,
        "status": "shipped",
        "mode": "COD",
        "product_value": 250.0,
    }
    defaults.update(overrides)
    return OrderRecord(**defaults)  # type: ignore[arg-type]


class TestMissingConfigChecker:
    def test_nothing_missing(self) -> None:
        assert MissingConfigChecker.check([_make_order()], PRICES, RATES).is_empty

    def test_missing_price_deduplicated(self) -> None:
        orders = [
            _make_order(order_id="1", product_uid="Phone Stand", product_name="Phone Stand", sku=None),
            _make_order(order_id="2", product_uid="SKU-009", product_name="Lamp", sku="SKU-009"),
            _make_order(order_id="3", product_uid="Phone Stand", product_name="Phone Stand", sku=None),
        ]
        missing = MissingConfigChecker.check(orders, PRICES, RATES)
        assert missing.missing_prices == [
            MissingPrice("seller@example.com", "Phone Stand", "Phone Stand", None),
            MissingPrice("seller@example.com", "SKU-009", "Lamp", "SKU-009"),
        ]

    def test_price_keyed_by_dropshipper(self) -> None:
        missing = MissingConfigChecker.check([_make_order(dropshipper_email="other@example.com")], PRICES, RATES)
        assert [(p.dropshipper_email, p.product_uid) for p in missing.missing_prices] == [
            ("other@example.com", "SKU-001")
        ]

    def test_missing_rates_sorted(self) -> None:
        orders = [
            _make_order(shipping_provider="Xpressbees"),
            _make_order(shipping_provider="BlueDart"),
            _make_order(shipping_provider="Xpressbees"),
        ]
        assert MissingConfigChecker.check(orders, PRICES, RATES).missing_rates == ["BlueDart", "Xpressbees"]

    def test_cancelled_and_blank_provider_ignored(self) -> None:
        orders = [
            _make_order(shipping_provider="BlueDart", status="cancelled"),
            _make_order(shipping_provider=""),
        ]
        assert MissingConfigChecker.check(orders, PRICES, RATES).missing_rates == []

    def test_warning_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            MissingConfigChecker.check([_make_order(shipping_provider="BlueDart")], PRICES, RATES)
        assert "Configuration incomplète" in caplog.text
