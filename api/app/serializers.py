"""Conversion des dataclasses métier vers les structures JSON de l'API."""

from __future__ import annotations

import datetime

from dropship_payout.config.loader import AppConfig
from dropship_payout.models import Adjustment, MissingConfiguration, PayoutResult, PayoutRow, PayoutSummary


def _iso(day: datetime.date | None) -> str | None:
    return day.isoformat() if day is not None else None


def serialize_summary(summary: PayoutSummary) -> dict[str, object]:
    """Sérialise un PayoutSummary (clés camelCase attendues par le frontend)."""
    return {
        "shippingTotal": summary.shipping_total,
        "codTotal": summary.cod_total,
        "productCostTotal": summary.product_cost_total,
        "rtsRtoReversalTotal": summary.rts_rto_reversal_total,
        "finalPayable": summary.final_payable,
        "ordersWithShippingCharges": summary.orders_with_shipping_charges,
        "ordersWithProductAmount": summary.orders_with_product_amount,
        "ordersWithCodAmount": summary.orders_with_cod_amount,
        "totalOrdersProcessed": summary.total_orders_processed,
    }


def serialize_row(row: PayoutRow) -> dict[str, object]:
    """Sérialise une PayoutRow vers le format JSON de l'API."""
    return {
        "orderId": row.order_id,
        "waybill": row.waybill,
        "productUid": row.product_uid,
        "productName": row.product_name,
        "sku": row.sku,
        "dropshipperEmail": row.dropshipper_email,
        "orderDate": _iso(row.order_date),
        "deliveredDate": _iso(row.delivered_date),
        "rtsDate": _iso(row.rts_date),
        "shippingProvider": row.shipping_provider,
        "status": row.status,
        "mode": row.mode,
        "qty": row.qty,
        "shippedQty": row.shipped_qty,
        "deliveredQty": row.delivered_qty,
        "shippingRate": row.shipping_rate,
        "shippingCost": row.shipping_cost,
        "codRate": row.cod_rate,
        "codReceived": row.cod_received,
        "productCostPerUnit": row.product_cost_per_unit,
        "productCost": row.product_cost,
        "adjustmentAmount": row.adjustment_amount,
        "payable": row.payable,
        "priceConfigured": row.price_configured,
        "pincode": row.pincode,
        "state": row.state,
        "city": row.city,
    }


def serialize_adjustment(adjustment: Adjustment) -> dict[str, object]:
    return {
        "orderId": adjustment.order_id,
        "reason": adjustment.reason,
        "amount": adjustment.amount,
        "reference": adjustment.reference,
    }


def serialize_missing(missing: MissingConfiguration) -> dict[str, object]:
    """Format de /api/missing-data : missingPrices + missingRates."""
    return {
        "missingPrices": [
            {
                "dropshipperEmail": p.dropshipper_email,
                "productUid": p.product_uid,
                "productName": p.product_name,
                "sku": p.sku,
            }
            for p in missing.missing_prices
        ],
        "missingRates": list(missing.missing_rates),
    }


def serialize_settings(config: AppConfig) -> dict[str, object]:
    """Export de tous les paramètres : prix produits et tarifs transporteurs."""
    return {
        "currency": config.currency,
        "productPrices": [
            {
                "dropshipperEmail": p.dropshipper_email,
                "productUid": p.product_uid,
                "productName": p.product_name,
                "sku": p.sku,
                "productCostPerUnit": p.product_cost_per_unit,
                "currency": p.currency,
            }
            for p in config.product_prices
        ],
        "shippingRates": [
            {"shippingProvider": provider, "shippingRatePerOrder": rate}
            for provider, rate in sorted(config.shipping_rates.items())
        ],
    }


def serialize_response(
    result: PayoutResult,
    missing: MissingConfiguration | None = None,
    payout_id: str | None = None,
) -> dict[str, object]:
    """Assemble la réponse complète de /api/calculate-payouts."""
    response: dict[str, object] = {
        "summary": serialize_summary(result.summary),
        "rows": [serialize_row(r) for r in result.rows],
        "adjustments": [serialize_adjustment(a) for a in result.adjustments],
    }
    if payout_id is not None:
        response["payoutId"] = payout_id
    if missing is not None:
        response["missingData"] = serialize_missing(missing)
    return response
