"""Moteur de rapprochement des versements dropshipper.

Fonction pure : aucune I/O, aucune dépendance à l'horloge. Les fenêtres de
dates doivent avoir été validées en amont (validate_date_ranges) ; une
fenêtre inversée ne contient simplement aucune commande.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from dropship_payout.engine import rules
from dropship_payout.engine.indexes import PayoutHistoryIndex, ProductPriceIndex, ShippingRateIndex
from dropship_payout.formatting import round_half_up
from dropship_payout.models import (
    Adjustment,
    DateWindow,
    OrderRecord,
    PayoutHistoryEntry,
    PayoutResult,
    PayoutRow,
    PayoutSummary,
    to_date,
)

logger = logging.getLogger(__name__)


def calculate_payouts(
    orders: Iterable[OrderRecord],
    product_prices: ProductPriceIndex,
    shipping_rates: ShippingRateIndex,
    order_window: DateWindow,
    delivered_window: DateWindow,
    payout_history: Iterable[PayoutHistoryEntry] = (),
) -> PayoutResult:
    """Calcule le versement de la période : lignes d'audit, régularisations, totaux.

    Chaque commande est évaluée indépendamment contre les trois règles
    (frais de port, COD + coût produit, reprise RTS/RTO) ; leurs effets
    s'additionnent. Seules les commandes avec au moins un montant non nul
    produisent une ligne. L'arrondi n'est appliqué qu'aux totaux.
    """
    history = PayoutHistoryIndex(payout_history)

    shipping_total = 0.0
    cod_total = 0.0
    product_cost_total = 0.0
    reversal_total = 0.0

    orders_with_shipping_charges = 0
    orders_with_product_amount = 0
    orders_with_cod_amount = 0

    rows: list[PayoutRow] = []
    adjustments: list[Adjustment] = []

    for order in orders:
        order_shipping_cost = 0.0
        order_cod_received = 0.0
        order_product_cost = 0.0
        order_adjustment = 0.0
        shipped_qty = 0
        delivered_qty = 0

        # Règle 1 : frais de port (fenêtre de commande, hors annulées)
        if rules.charges_shipping(order, order_window):
            order_shipping_cost = rules.shipping_cost(order, shipping_rates)
            shipped_qty = order.qty
            shipping_total += order_shipping_cost
            orders_with_shipping_charges += 1

        # Règle 2 : COD encaissé et coût produit (fenêtre de livraison)
        if rules.settles_delivery(order, delivered_window):
            amounts = rules.delivery_amounts(order, product_prices)
            delivered_qty = order.qty
            if amounts.is_cod:
                order_cod_received = amounts.cod_received
                cod_total += order_cod_received
                orders_with_cod_amount += 1
            order_product_cost = amounts.product_cost
            product_cost_total += order_product_cost
            orders_with_product_amount += 1

        # Règle 3 : reprise d'un versement antérieur après RTS/RTO
        if rules.eligible_for_reversal(order, order_window):
            adjustment = rules.reversal_for(order, history)
            if adjustment is not None:
                order_adjustment = adjustment.amount
                reversal_total += order_adjustment
                adjustments.append(adjustment)
                logger.debug("Reprise %s : %.2f (%s)", order.order_id, adjustment.amount, adjustment.reference)

        if (
            order_shipping_cost == 0
            and order_cod_received == 0
            and order_product_cost == 0
            and order_adjustment == 0
        ):
            continue

        rows.append(
            PayoutRow(
                order_id=order.order_id,
                waybill=order.waybill,
                product_uid=order.product_uid,
                product_name=order.product_name,
                sku=order.sku,
                dropshipper_email=order.dropshipper_email,
                order_date=to_date(order.order_date),
                delivered_date=to_date(order.delivered_date),
                rts_date=to_date(order.rts_date),
                shipping_provider=order.shipping_provider,
                status=order.status,
                mode=order.mode,
                qty=order.qty,
                shipped_qty=shipped_qty,
                delivered_qty=delivered_qty,
                shipping_rate=shipping_rates.rate_for(order.shipping_provider),
                shipping_cost=order_shipping_cost,
                cod_rate=float(order.product_value or 0.0),
                cod_received=order_cod_received,
                product_cost_per_unit=product_prices.cost_for(order.dropshipper_email, order.product_uid),
                product_cost=order_product_cost,
                adjustment_amount=order_adjustment,
                payable=order_cod_received - order_shipping_cost - order_product_cost + order_adjustment,
                price_configured=(order.dropshipper_email, order.product_uid) in product_prices,
                pincode=order.pincode,
                state=order.state,
                city=order.city,
            )
        )

    final_payable = cod_total - shipping_total - product_cost_total + reversal_total

    summary = PayoutSummary(
        shipping_total=round_half_up(shipping_total),
        cod_total=round_half_up(cod_total),
        product_cost_total=round_half_up(product_cost_total),
        rts_rto_reversal_total=round_half_up(reversal_total),
        final_payable=round_half_up(final_payable),
        orders_with_shipping_charges=orders_with_shipping_charges,
        orders_with_product_amount=orders_with_product_amount,
        orders_with_cod_amount=orders_with_cod_amount,
        total_orders_processed=len(rows),
    )

    logger.info(
        "Versement calculé : %d lignes, %d reprises, net à payer %.0f",
        len(rows),
        len(adjustments),
        summary.final_payable,
    )

    return PayoutResult(summary=summary, rows=rows, adjustments=adjustments)
