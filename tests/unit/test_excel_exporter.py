"""Tests pour l'export Excel du rapport de versement."""

from __future__ import annotations

import datetime
from dataclasses import replace
from pathlib import Path

import openpyxl
import pytest

from dropship_payout.config.loader import AppConfig
from dropship_payout.exporters.excel import (
    ADJUSTMENTS_COLUMNS,
    ORDER_DETAILS_COLUMNS,
    PRICE_REQUEST_COLUMNS,
    PRODUCT_COST_COLUMNS,
    RATE_REQUEST_COLUMNS,
    export,
    export_missing_template_to_bytes,
    export_to_bytes,
    print_summary,
    report_filename,
)
from dropship_payout.models import (
    MissingConfiguration,
    MissingPrice,
    PayoutRequest,
    PayoutResult,
    PayoutSummary,
    ProductPrice,
)
from dropship_payout.parsers import OrdersParser, PayoutHistoryParser
from dropship_payout.pipeline import PayoutPipeline

GENERATED_AT = datetime.datetime(2025, 8, 1, 9, 30)


@pytest.fixture
def july_result(fixtures_dir: Path, sample_config: AppConfig, july_request: PayoutRequest) -> PayoutResult:
    orders = OrdersParser().parse(fixtures_dir / "orders" / "orders.csv", sample_config).orders
    history = PayoutHistoryParser().parse(fixtures_dir / "orders" / "history.csv", sample_config)
    result, _missing = PayoutPipeline().calculate(orders, sample_config, july_request, history)
    return result


def _empty_result() -> PayoutResult:
    return PayoutResult(
        summary=PayoutSummary(0, 0, 0, 0, 0, 0, 0, 0, 0),
        rows=[],
        adjustments=[],
    )


def _header(ws: openpyxl.worksheet.worksheet.Worksheet) -> list[object]:
    return [cell.value for cell in ws[1]]


def _column(ws: openpyxl.worksheet.worksheet.Worksheet, name: str) -> list[object]:
    idx = _header(ws).index(name)
    return [row[idx] for row in ws.iter_rows(min_row=2, values_only=True)]


class TestReportFilename:
    def test_with_dropshipper(self) -> None:
        request = PayoutRequest("2025-07-01", "2025-07-31", "2025-07-01", "2025-07-31", "seller@example.com")
        assert report_filename(request) == "payout-report_2025-07-01_to_2025-07-31_seller.xlsx"

    def test_all_dropshippers(self, july_request: PayoutRequest) -> None:
        assert report_filename(july_request) == "payout-report_2025-07-01_to_2025-07-31_all.xlsx"


class TestExport:
    def test_sheets(self, tmp_path: Path, july_result: PayoutResult, july_request: PayoutRequest) -> None:
        output = tmp_path / "report.xlsx"
        export(july_result, july_request, output, payout_id="PAYOUT_20250801_ABCDEFGHI", generated_at=GENERATED_AT)

        wb = openpyxl.load_workbook(output)
        assert wb.sheetnames == [
            "Summary",
            "Order Details",
            "Shipping Details",
            "COD Details",
            "Product Cost Details",
            "Adjustments",
        ]

    def test_summary_values(self, july_result: PayoutResult, july_request: PayoutRequest) -> None:
        buffer = export_to_bytes(july_result, july_request, payout_id="PAYOUT_X", generated_at=GENERATED_AT)
        ws = openpyxl.load_workbook(buffer)["Summary"]

        values = {row[0]: row[1] for row in ws.iter_rows(min_row=2, values_only=True)}
        assert values["Payout ID"] == "PAYOUT_X"
        assert values["Generated on"] == "2025-08-01 09:30"
        assert values["Dropshipper"] == "All Dropshippers"
        assert values["Order Date Range"] == "2025-07-01 to 2025-07-31"
        assert values["Total Shipping Charges"] == 175
        assert values["Total COD Received"] == 1199
        assert values["Total Product Cost"] == 681
        assert values["RTS/RTO Reversal"] == -210
        assert values["FINAL PAYOUT"] == 133

    def test_order_details(self, july_result: PayoutResult, july_request: PayoutRequest) -> None:
        ws = openpyxl.load_workbook(export_to_bytes(july_result, july_request))["Order Details"]

        assert _header(ws) == ORDER_DETAILS_COLUMNS
        assert _column(ws, "Order ID") == ["ORD-1001", "ORD-1002", "ORD-0950", "ORD-0900"]
        assert _column(ws, "Net Payable") == [210, -280.5, -255, 458.5]
        assert _column(ws, "Adjustment") == [0, 0, -210, 0]

    def test_filtered_sheets(self, july_result: PayoutResult, july_request: PayoutRequest) -> None:
        wb = openpyxl.load_workbook(export_to_bytes(july_result, july_request))

        assert _column(wb["Shipping Details"], "Order ID") == ["ORD-1001", "ORD-1002", "ORD-0950"]
        assert _column(wb["COD Details"], "Order ID") == ["ORD-1001", "ORD-0900"]
        product_ws = wb["Product Cost Details"]
        assert _header(product_ws) == PRODUCT_COST_COLUMNS
        assert _column(product_ws, "Order ID") == ["ORD-1001", "ORD-1002", "ORD-0900"]
        assert _column(product_ws, "Cost Source") == ["Configured", "Configured", "Configured"]

    def test_order_details_location(self, july_result: PayoutResult, july_request: PayoutRequest) -> None:
        ws = openpyxl.load_workbook(export_to_bytes(july_result, july_request))["Order Details"]
        assert _column(ws, "City") == ["New Delhi", "Mumbai", "Kolkata", "Hyderabad"]
        assert _column(ws, "Pincode") == ["110001", "400001", "700001", "500001"]

    def test_cost_source_zero_cost_is_configured(
        self, fixtures_dir: Path, sample_config: AppConfig, july_request: PayoutRequest
    ) -> None:
        """Un coût configuré à 0 reste « Configured » ; seul un produit absent est « Missing »."""
        orders = OrdersParser().parse(fixtures_dir / "orders" / "orders.csv", sample_config).orders
        request = replace(july_request, delivered_date_to="2025-08-31")

        result, _ = PayoutPipeline().calculate(orders, sample_config, request)
        ws = openpyxl.load_workbook(export_to_bytes(result, request))["Product Cost Details"]
        sources = dict(zip(_column(ws, "Order ID"), _column(ws, "Cost Source")))
        assert sources["ORD-2001"] == "Missing"

        zero_cost = replace(
            sample_config,
            product_prices=[
                *sample_config.product_prices,
                ProductPrice("other@example.com", "Phone Stand", "Phone Stand", 0.0),
            ],
        )
        result, _ = PayoutPipeline().calculate(orders, zero_cost, request)
        ws = openpyxl.load_workbook(export_to_bytes(result, request))["Product Cost Details"]
        sources = dict(zip(_column(ws, "Order ID"), _column(ws, "Cost Source")))
        assert sources["ORD-2001"] == "Configured"
        assert sources["ORD-1001"] == "Configured"

    def test_adjustments_sheet(self, july_result: PayoutResult, july_request: PayoutRequest) -> None:
        ws = openpyxl.load_workbook(export_to_bytes(july_result, july_request))["Adjustments"]

        assert _header(ws) == ADJUSTMENTS_COLUMNS
        rows = list(ws.iter_rows(min_row=2, values_only=True))
        assert rows == [("ORD-0950", "Delivered->RTS/RTO (reversal)", -210, "2025-06-30 period")]

    def test_no_adjustments_sheet_when_empty(self, july_request: PayoutRequest) -> None:
        wb = openpyxl.load_workbook(export_to_bytes(_empty_result(), july_request))
        assert "Adjustments" not in wb.sheetnames
        assert wb["Order Details"].max_row == 1

    def test_buffer_rewound(self, july_result: PayoutResult, july_request: PayoutRequest) -> None:
        buffer = export_to_bytes(july_result, july_request)
        assert buffer.tell() == 0
        assert buffer.read(2) == b"PK"


class TestMissingTemplate:
    def test_template_sheets(self) -> None:
        missing = MissingConfiguration(
            missing_prices=[MissingPrice("other@example.com", "Phone Stand", "Phone Stand", None)],
            missing_rates=["BlueDart"],
        )
        wb = openpyxl.load_workbook(export_missing_template_to_bytes(missing))

        assert wb.sheetnames == ["Price_Request", "Shipping_Rate_Request"]
        prices = wb["Price_Request"]
        assert _header(prices) == PRICE_REQUEST_COLUMNS
        assert _column(prices, "product_uid") == ["Phone Stand"]
        assert _column(prices, "product_cost_per_unit") == [None]
        assert _column(prices, "currency") == ["INR"]
        rates = wb["Shipping_Rate_Request"]
        assert _header(rates) == RATE_REQUEST_COLUMNS
        assert _column(rates, "shipping_provider") == ["BlueDart"]

    def test_empty_template_has_headers(self) -> None:
        wb = openpyxl.load_workbook(export_missing_template_to_bytes(MissingConfiguration([], [])))
        assert _header(wb["Price_Request"]) == PRICE_REQUEST_COLUMNS
        assert wb["Shipping_Rate_Request"].max_row == 1


class TestPrintSummary:
    def test_summary_format(self, capsys: pytest.CaptureFixture[str], july_result: PayoutResult) -> None:
        print_summary(july_result, payout_id="PAYOUT_X")
        out = capsys.readouterr().out
        assert "=== Résumé du versement ===" in out
        assert "Identifiant : PAYOUT_X" in out
        assert "Frais de port      : ₹175" in out
        assert "COD encaissé       : ₹1,199" in out
        assert "Reprises RTS/RTO   : -₹210 (1)" in out
        assert "Net à payer        : ₹133" in out

    def test_missing_listed(self, capsys: pytest.CaptureFixture[str]) -> None:
        missing = MissingConfiguration(
            missing_prices=[MissingPrice("other@example.com", "Phone Stand", "Phone Stand", None)],
            missing_rates=["BlueDart"],
        )
        print_summary(_empty_result(), missing)
        out = capsys.readouterr().out
        assert "Produits sans prix : 1" in out
        assert "other@example.com | Phone Stand (Phone Stand)" in out
        assert "Transporteurs sans tarif : 1" in out
        assert "  BlueDart" in out

    def test_nothing_missing_no_section(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_summary(_empty_result(), MissingConfiguration([], []))
        assert "sans" not in capsys.readouterr().out
