"""Moteur de rapprochement des versements."""

from __future__ import annotations

from dropship_payout.engine.indexes import PayoutHistoryIndex, ProductPriceIndex, ShippingRateIndex
from dropship_payout.engine.reconciliation import calculate_payouts

__all__ = [
    "PayoutHistoryIndex",
    "ProductPriceIndex",
    "ShippingRateIndex",
    "calculate_payouts",
]
