"""Tests pour PayoutPipeline.calculate — validation, filtre dropshipper, contrôles."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from dropship_payout.config.loader import AppConfig
from dropship_payout.models import DateRangeError, NoResultError, OrderRecord, PayoutRequest
from dropship_payout.parsers import OrdersParser
from dropship_payout.pipeline import PayoutPipeline


@pytest.fixture
def fixture_orders(fixtures_dir: Path, sample_config: AppConfig) -> list[OrderRecord]:
    return OrdersParser().parse(fixtures_dir / "orders" / "orders.csv", sample_config).orders


class TestCalculate:
    def test_without_history(
        self, fixture_orders: list[OrderRecord], sample_config: AppConfig, july_request: PayoutRequest
    ) -> None:
        result, missing = PayoutPipeline().calculate(fixture_orders, sample_config, july_request)

        assert result.adjustments == []
        assert result.summary.rts_rto_reversal_total == 0
        assert result.summary.final_payable == 343
        assert missing.missing_rates == ["BlueDart"]
        assert [(p.dropshipper_email, p.product_uid) for p in missing.missing_prices] == [
            ("other@example.com", "Phone Stand")
        ]

    def test_invalid_windows_raise(self, fixture_orders: list[OrderRecord], sample_config: AppConfig) -> None:
        request = PayoutRequest("2025-07-31", "2025-07-01", "", "2025-07-31")
        with pytest.raises(DateRangeError) as exc_info:
            PayoutPipeline().calculate(fixture_orders, sample_config, request)
        assert exc_info.value.errors == [
            'Order date "from" must be before "to"',
            "Delivered date range is required",
        ]

    def test_dropshipper_filter_case_insensitive(
        self, fixture_orders: list[OrderRecord], sample_config: AppConfig, july_request: PayoutRequest
    ) -> None:
        request = replace(july_request, dropshipper_email=" Seller@Example.com ")
        result, missing = PayoutPipeline().calculate(fixture_orders, sample_config, request)

        assert {r.dropshipper_email for r in result.rows} == {"seller@example.com"}
        assert result.summary.orders_with_shipping_charges == 3
        assert missing.is_empty

    def test_unknown_dropshipper_no_result(
        self, fixture_orders: list[OrderRecord], sample_config: AppConfig, july_request: PayoutRequest
    ) -> None:
        request = replace(july_request, dropshipper_email="nobody@example.com")
        with pytest.raises(NoResultError):
            PayoutPipeline().calculate(fixture_orders, sample_config, request)

    def test_empty_orders_no_result(self, sample_config: AppConfig, july_request: PayoutRequest) -> None:
        with pytest.raises(NoResultError):
            PayoutPipeline().calculate([], sample_config, july_request)

    def test_windows_checked_before_orders(self, sample_config: AppConfig) -> None:
        request = PayoutRequest("", "", "", "")
        with pytest.raises(DateRangeError):
            PayoutPipeline().calculate([], sample_config, request)
