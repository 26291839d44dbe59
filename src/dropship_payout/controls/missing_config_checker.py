"""Détection des trous de configuration : produits sans prix, transporteurs sans tarif."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from dropship_payout.engine import rules
from dropship_payout.engine.indexes import ProductPriceIndex, ShippingRateIndex
from dropship_payout.models import MissingConfiguration, MissingPrice, OrderRecord

logger = logging.getLogger(__name__)


class MissingConfigChecker:
    """Lecteur en lecture seule des index utilisés par le moteur.

    Le moteur applique 0 sur une clé absente ; ce contrôle rend ces trous
    visibles sans modifier le calcul.
    """

    @staticmethod
    def check(
        orders: Iterable[OrderRecord],
        prices: ProductPriceIndex,
        rates: ShippingRateIndex,
    ) -> MissingConfiguration:
        """Liste les couples (dropshipper, produit) sans prix et les transporteurs sans tarif.

        Les prix manquants sont listés dans l'ordre de première apparition ;
        les transporteurs manquants sont triés. Les commandes annulées ne
        génèrent jamais de frais de port et n'entrent pas dans les tarifs manquants.
        """
        missing_prices: dict[tuple[str, str], MissingPrice] = {}
        missing_rates: set[str] = set()

        for order in orders:
            key = (order.dropshipper_email, order.product_uid)
            if key not in prices and key not in missing_prices:
                missing_prices[key] = MissingPrice(
                    dropshipper_email=order.dropshipper_email,
                    product_uid=order.product_uid,
                    product_name=order.product_name,
                    sku=order.sku,
                )
            if (
                not rules.is_cancelled(order)
                and order.shipping_provider
                and order.shipping_provider not in rates
            ):
                missing_rates.add(order.shipping_provider)

        result = MissingConfiguration(
            missing_prices=list(missing_prices.values()),
            missing_rates=sorted(missing_rates),
        )
        if not result.is_empty:
            logger.warning(
                "Configuration incomplète : %d produits sans prix, %d transporteurs sans tarif",
                len(result.missing_prices),
                len(result.missing_rates),
            )
        return result
