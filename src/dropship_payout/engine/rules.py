"""Règles métier du versement, partagées par le moteur, l'export et les contrôles.

Le matching des statuts par sous-chaîne ("rts", "rto", "COD") est conservé
tel quel pour compatibilité avec les exports transporteurs existants. Un
statut comme "completed-rts-flow" est donc classé RTS/RTO.
"""

from __future__ import annotations

from dataclasses import dataclass

from dropship_payout.engine.indexes import PayoutHistoryIndex, ProductPriceIndex, ShippingRateIndex
from dropship_payout.models import REVERSAL_REASON, Adjustment, DateWindow, OrderRecord, to_date


def _status(order: OrderRecord) -> str:
    return (order.status or "").lower()


def is_cancelled(order: OrderRecord) -> bool:
    return _status(order) == "cancelled"


def is_delivered(order: OrderRecord) -> bool:
    return _status(order) == "delivered"


def is_rts_rto(order: OrderRecord) -> bool:
    """Statut contenant "rts"/"rto", ou date de retour renseignée."""
    status = _status(order)
    return "rts" in status or "rto" in status or bool(order.rts_date)


def is_cod(order: OrderRecord) -> bool:
    return "COD" in (order.mode or "").upper()


def charges_shipping(order: OrderRecord, order_window: DateWindow) -> bool:
    """Règle 1 : commande dans la fenêtre de commande et non annulée."""
    return order_window.contains(to_date(order.order_date)) and not is_cancelled(order)


def settles_delivery(order: OrderRecord, delivered_window: DateWindow) -> bool:
    """Règle 2 : livrée, avec une date de livraison dans la fenêtre de livraison."""
    return is_delivered(order) and delivered_window.contains(to_date(order.delivered_date))


def eligible_for_reversal(order: OrderRecord, order_window: DateWindow) -> bool:
    """Règle 3 : RTS/RTO avec une date de commande dans la fenêtre de commande."""
    return is_rts_rto(order) and order_window.contains(to_date(order.order_date))


@dataclass(frozen=True)
class DeliveryAmounts:
    cod_received: float
    product_cost: float
    is_cod: bool


def shipping_cost(order: OrderRecord, rates: ShippingRateIndex) -> float:
    return order.qty * rates.rate_for(order.shipping_provider)


def delivery_amounts(order: OrderRecord, prices: ProductPriceIndex) -> DeliveryAmounts:
    """COD encaissé (commandes COD uniquement) et coût produit (toutes les livrées)."""
    cod = is_cod(order)
    cod_received = order.qty * float(order.product_value or 0.0) if cod else 0.0
    product_cost = order.qty * prices.cost_for(order.dropshipper_email, order.product_uid)
    return DeliveryAmounts(cod_received=cod_received, product_cost=product_cost, is_cod=cod)


def reversal_for(order: OrderRecord, history: PayoutHistoryIndex) -> Adjustment | None:
    """Reprise du montant déjà versé si l'historique contient un versement positif."""
    prior = history.find(order.order_id, order.dropshipper_email, order.product_uid, order.waybill)
    if prior is None or prior.paid_amount <= 0:
        return None
    return Adjustment(
        order_id=order.order_id,
        reason=REVERSAL_REASON,
        amount=-prior.paid_amount,
        reference=f"{prior.paid_on} period",
    )
