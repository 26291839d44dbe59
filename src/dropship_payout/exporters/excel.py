"""Export Excel du rapport de versement, modèle de configuration et résumé console."""

from __future__ import annotations

import datetime
from io import BytesIO
from pathlib import Path

import pandas as pd

from dropship_payout.formatting import format_currency_inr
from dropship_payout.models import MissingConfiguration, PayoutRequest, PayoutResult, PayoutRow

SUMMARY_COLUMNS = ["Metric", "Value", "Description"]

ORDER_DETAILS_COLUMNS = [
    "Order ID",
    "Waybill",
    "Product",
    "SKU/UID",
    "Dropshipper",
    "Order Date",
    "Delivered Date",
    "Shipped Qty",
    "Delivered Qty",
    "COD Rate",
    "COD Received",
    "Shipping Cost",
    "Product Cost",
    "Adjustment",
    "Net Payable",
    "Status",
    "Shipping Provider",
    "Pincode",
    "State",
    "City",
]

SHIPPING_DETAILS_COLUMNS = [
    "Order ID",
    "Waybill",
    "Product",
    "Dropshipper",
    "Shipping Provider",
    "Order Date",
    "Quantity",
    "Shipping Rate",
    "Shipping Cost",
    "Status",
]

COD_DETAILS_COLUMNS = [
    "Order ID",
    "Waybill",
    "Product",
    "Dropshipper",
    "Delivered Date",
    "Delivered Qty",
    "COD Rate",
    "Total COD Received",
    "Mode",
    "Status",
]

PRODUCT_COST_COLUMNS = [
    "Order ID",
    "Waybill",
    "Product",
    "SKU/UID",
    "Dropshipper",
    "Delivered Qty",
    "Product Cost per Unit",
    "Total Product Cost",
    "Status",
    "Cost Source",
]

ADJUSTMENTS_COLUMNS = ["Order ID", "Reason", "Amount", "Reference"]

PRICE_REQUEST_COLUMNS = [
    "dropshipper_email",
    "product_uid",
    "product_name",
    "sku",
    "product_cost_per_unit",
    "currency",
]

RATE_REQUEST_COLUMNS = ["shipping_provider", "shipping_rate_per_order", "currency"]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def report_filename(request: PayoutRequest) -> str:
    """Nom du fichier : payout-report_<du>_to_<au>_<identifiant|all>.xlsx."""
    who = f"_{request.dropshipper_email.split('@')[0]}" if request.dropshipper_email else "_all"
    return f"payout-report_{request.order_date_from}_to_{request.order_date_to}{who}.xlsx"


def _summary_frame(
    result: PayoutResult,
    request: PayoutRequest,
    payout_id: str | None,
    generated_at: datetime.datetime,
) -> pd.DataFrame:
    s = result.summary
    data = [
        ["Payout ID", payout_id or "", ""],
        ["Generated on", generated_at.strftime("%Y-%m-%d %H:%M"), ""],
        ["Dropshipper", request.dropshipper_email or "All Dropshippers", ""],
        [
            "Order Date Range",
            f"{request.order_date_from} to {request.order_date_to}",
            "Scope for shipping costs and RTS/RTO reversals",
        ],
        [
            "Delivered Date Range",
            f"{request.delivered_date_from} to {request.delivered_date_to}",
            "Scope for COD received and product costs",
        ],
        ["Orders with Shipping Charges", s.orders_with_shipping_charges, "Cancelled orders excluded"],
        ["Orders with Product Amount", s.orders_with_product_amount, "All delivered orders (COD + prepaid)"],
        ["Orders with COD Amount", s.orders_with_cod_amount, "Delivered COD orders only"],
        ["Total Shipping Charges", s.shipping_total, "Quantity × rate per order for the carrier"],
        ["Total COD Received", s.cod_total, "Quantity × product value for delivered COD orders"],
        ["Total Product Cost", s.product_cost_total, "Quantity × unit cost for delivered orders"],
        ["RTS/RTO Reversal", s.rts_rto_reversal_total, "Prior payouts reversed for returned orders"],
        ["FINAL PAYOUT", s.final_payable, "COD - Shipping - Product Cost + RTS/RTO Reversal"],
        ["Rows", s.total_orders_processed, ""],
    ]
    return pd.DataFrame(data, columns=SUMMARY_COLUMNS)


def _order_details_frame(rows: list[PayoutRow]) -> pd.DataFrame:
    data = [
        {
            "Order ID": r.order_id,
            "Waybill": r.waybill or "",
            "Product": r.product_name,
            "SKU/UID": r.sku or r.product_uid,
            "Dropshipper": r.dropshipper_email,
            "Order Date": r.order_date,
            "Delivered Date": r.delivered_date,
            "Shipped Qty": r.shipped_qty,
            "Delivered Qty": r.delivered_qty,
            "COD Rate": r.cod_rate,
            "COD Received": r.cod_received,
            "Shipping Cost": r.shipping_cost,
            "Product Cost": r.product_cost,
            "Adjustment": r.adjustment_amount,
            "Net Payable": r.payable,
            "Status": r.status,
            "Shipping Provider": r.shipping_provider,
            "Pincode": r.pincode or "",
            "State": r.state or "",
            "City": r.city or "",
        }
        for r in rows
    ]
    return pd.DataFrame(data, columns=ORDER_DETAILS_COLUMNS)


def _shipping_details_frame(rows: list[PayoutRow]) -> pd.DataFrame:
    data = [
        {
            "Order ID": r.order_id,
            "Waybill": r.waybill or "",
            "Product": r.product_name,
            "Dropshipper": r.dropshipper_email,
            "Shipping Provider": r.shipping_provider,
            "Order Date": r.order_date,
            "Quantity": r.shipped_qty,
            "Shipping Rate": r.shipping_rate,
            "Shipping Cost": r.shipping_cost,
            "Status": r.status,
        }
        for r in rows
        if r.shipping_cost != 0
    ]
    return pd.DataFrame(data, columns=SHIPPING_DETAILS_COLUMNS)


def _cod_details_frame(rows: list[PayoutRow]) -> pd.DataFrame:
    data = [
        {
            "Order ID": r.order_id,
            "Waybill": r.waybill or "",
            "Product": r.product_name,
            "Dropshipper": r.dropshipper_email,
            "Delivered Date": r.delivered_date,
            "Delivered Qty": r.delivered_qty,
            "COD Rate": r.cod_rate,
            "Total COD Received": r.cod_received,
            "Mode": r.mode or "",
            "Status": r.status,
        }
        for r in rows
        if r.cod_received != 0
    ]
    return pd.DataFrame(data, columns=COD_DETAILS_COLUMNS)


def _product_cost_frame(rows: list[PayoutRow]) -> pd.DataFrame:
    data = [
        {
            "Order ID": r.order_id,
            "Waybill": r.waybill or "",
            "Product": r.product_name,
            "SKU/UID": r.sku or r.product_uid,
            "Dropshipper": r.dropshipper_email,
            "Delivered Qty": r.delivered_qty,
            "Product Cost per Unit": r.product_cost_per_unit,
            "Total Product Cost": r.product_cost,
            "Status": r.status,
            "Cost Source": "Configured" if r.price_configured else "Missing",
        }
        for r in rows
        if r.delivered_qty > 0
    ]
    return pd.DataFrame(data, columns=PRODUCT_COST_COLUMNS)


def _write_report(
    target: Path | BytesIO,
    result: PayoutResult,
    request: PayoutRequest,
    payout_id: str | None,
    generated_at: datetime.datetime | None,
) -> None:
    generated_at = generated_at or datetime.datetime.now()
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        _summary_frame(result, request, payout_id, generated_at).to_excel(writer, sheet_name="Summary", index=False)
        _order_details_frame(result.rows).to_excel(writer, sheet_name="Order Details", index=False)
        _shipping_details_frame(result.rows).to_excel(writer, sheet_name="Shipping Details", index=False)
        _cod_details_frame(result.rows).to_excel(writer, sheet_name="COD Details", index=False)
        _product_cost_frame(result.rows).to_excel(writer, sheet_name="Product Cost Details", index=False)
        if result.adjustments:
            df_adjustments = pd.DataFrame(
                [
                    {"Order ID": a.order_id, "Reason": a.reason, "Amount": a.amount, "Reference": a.reference}
                    for a in result.adjustments
                ],
                columns=ADJUSTMENTS_COLUMNS,
            )
            df_adjustments.to_excel(writer, sheet_name="Adjustments", index=False)


def export(
    result: PayoutResult,
    request: PayoutRequest,
    output_path: Path,
    *,
    payout_id: str | None = None,
    generated_at: datetime.datetime | None = None,
) -> None:
    """Exporte le rapport de versement dans un fichier Excel multi-onglets."""
    _write_report(output_path, result, request, payout_id, generated_at)


def export_to_bytes(
    result: PayoutResult,
    request: PayoutRequest,
    *,
    payout_id: str | None = None,
    generated_at: datetime.datetime | None = None,
) -> BytesIO:
    """Exporte le rapport de versement en mémoire (téléchargement API)."""
    buffer = BytesIO()
    _write_report(buffer, result, request, payout_id, generated_at)
    buffer.seek(0)
    return buffer


def export_missing_template_to_bytes(missing: MissingConfiguration, currency: str = "INR") -> BytesIO:
    """Modèle à compléter : onglets Price_Request et Shipping_Rate_Request pré-remplis."""
    df_prices = pd.DataFrame(
        [
            {
                "dropshipper_email": p.dropshipper_email,
                "product_uid": p.product_uid,
                "product_name": p.product_name,
                "sku": p.sku or "",
                "product_cost_per_unit": None,
                "currency": currency,
            }
            for p in missing.missing_prices
        ],
        columns=PRICE_REQUEST_COLUMNS,
    )
    df_rates = pd.DataFrame(
        [
            {"shipping_provider": provider, "shipping_rate_per_order": None, "currency": currency}
            for provider in missing.missing_rates
        ],
        columns=RATE_REQUEST_COLUMNS,
    )

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df_prices.to_excel(writer, sheet_name="Price_Request", index=False)
        df_rates.to_excel(writer, sheet_name="Shipping_Rate_Request", index=False)
    buffer.seek(0)
    return buffer


def print_summary(
    result: PayoutResult,
    missing: MissingConfiguration | None = None,
    payout_id: str | None = None,
) -> None:
    """Affiche un résumé en console."""
    s = result.summary
    print("=== Résumé du versement ===")
    if payout_id:
        print(f"Identifiant : {payout_id}")
    print(f"Lignes produites : {s.total_orders_processed}")
    print(f"  Commandes avec frais de port : {s.orders_with_shipping_charges}")
    print(f"  Commandes livrées : {s.orders_with_product_amount}")
    print(f"  Commandes COD encaissées : {s.orders_with_cod_amount}")
    print(f"Frais de port      : {format_currency_inr(s.shipping_total)}")
    print(f"COD encaissé       : {format_currency_inr(s.cod_total)}")
    print(f"Coût produits      : {format_currency_inr(s.product_cost_total)}")
    print(f"Reprises RTS/RTO   : {format_currency_inr(s.rts_rto_reversal_total)} ({len(result.adjustments)})")
    print(f"Net à payer        : {format_currency_inr(s.final_payable)}")

    if missing is None or missing.is_empty:
        return

    if missing.missing_prices:
        print(f"Produits sans prix : {len(missing.missing_prices)}")
        for p in missing.missing_prices:
            print(f"  {p.dropshipper_email} | {p.product_uid} ({p.product_name})")
    if missing.missing_rates:
        print(f"Transporteurs sans tarif : {len(missing.missing_rates)}")
        for provider in missing.missing_rates:
            print(f"  {provider}")
