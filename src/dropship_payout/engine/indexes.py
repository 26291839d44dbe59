"""Index de consultation immuables : prix produits, tarifs transporteurs, historique."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from dropship_payout.models import PayoutHistoryEntry, ProductPrice

logger = logging.getLogger(__name__)

PriceKey = tuple[str, str]
HistoryKey = tuple[str, str, str, str | None]


class ProductPriceIndex:
    """Coût unitaire par couple (email dropshipper, product_uid).

    Une clé absente vaut 0.0 : ce n'est pas une erreur, le trou est remonté
    par MissingConfigChecker.
    """

    def __init__(self, costs: Mapping[PriceKey, float] | None = None) -> None:
        self._costs: Mapping[PriceKey, float] = MappingProxyType(dict(costs or {}))

    @classmethod
    def from_prices(cls, prices: Iterable[ProductPrice]) -> ProductPriceIndex:
        """Construit l'index depuis des ProductPrice (la dernière entrée l'emporte)."""
        return cls({(p.dropshipper_email, p.product_uid): float(p.product_cost_per_unit) for p in prices})

    def cost_for(self, dropshipper_email: str, product_uid: str) -> float:
        return self._costs.get((dropshipper_email, product_uid), 0.0)

    def __contains__(self, key: object) -> bool:
        return key in self._costs

    def __len__(self) -> int:
        return len(self._costs)

    def __iter__(self) -> Iterator[PriceKey]:
        return iter(self._costs)


class ShippingRateIndex:
    """Tarif forfaitaire par unité expédiée, indexé par transporteur. Absent → 0.0."""

    def __init__(self, rates: Mapping[str, float] | None = None) -> None:
        self._rates: Mapping[str, float] = MappingProxyType({k: float(v) for k, v in (rates or {}).items()})

    def rate_for(self, shipping_provider: str) -> float:
        return self._rates.get(shipping_provider, 0.0)

    def __contains__(self, key: object) -> bool:
        return key in self._rates

    def __len__(self) -> int:
        return len(self._rates)

    def __iter__(self) -> Iterator[str]:
        return iter(self._rates)


def normalize_waybill(waybill: str | None) -> str | None:
    """Waybill vide ou absent → None (les deux côtés absents doivent matcher)."""
    return waybill or None


class PayoutHistoryIndex:
    """Historique des versements indexé par (order_id, email, product_uid, waybill).

    Construit une seule fois avant la passe principale. En cas de doublons,
    la première entrée dans l'ordre d'entrée est conservée.
    """

    def __init__(self, entries: Iterable[PayoutHistoryEntry] = ()) -> None:
        index: dict[HistoryKey, PayoutHistoryEntry] = {}
        duplicates = 0
        for entry in entries:
            key = (entry.order_id, entry.dropshipper_email, entry.product_uid, normalize_waybill(entry.waybill))
            if key in index:
                duplicates += 1
                continue
            index[key] = entry
        if duplicates:
            logger.debug("Historique : %d entrées en doublon ignorées", duplicates)
        self._entries: Mapping[HistoryKey, PayoutHistoryEntry] = MappingProxyType(index)

    def find(
        self, order_id: str, dropshipper_email: str, product_uid: str, waybill: str | None
    ) -> PayoutHistoryEntry | None:
        return self._entries.get((order_id, dropshipper_email, product_uid, normalize_waybill(waybill)))

    def __len__(self) -> int:
        return len(self._entries)
