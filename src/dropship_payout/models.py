"""Modèles de données métier et hiérarchie d'exceptions."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field


# --- Exceptions métier ---


class DropshipPayoutError(Exception):
    """Erreur de base pour l'application dropship-payout."""


class ConfigError(DropshipPayoutError):
    """YAML malformé, clé manquante, valeur invalide."""


class ParseError(DropshipPayoutError):
    """Colonne CSV manquante, fichier illisible."""


class NoResultError(DropshipPayoutError):
    """Aucune commande exploitable après parsing et filtrage."""


class DateRangeError(DropshipPayoutError):
    """Fenêtres de dates invalides (levée par le pipeline, jamais par le moteur)."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)


# --- Constantes métier ---

REVERSAL_REASON = "Delivered->RTS/RTO (reversal)"


# --- Dataclasses métier (frozen) ---


@dataclass(frozen=True)
class OrderRecord:
    """Ligne de commande (un produit d'un envoi) issue de l'upload.

    Les dates sont normalement des ``datetime.date`` ; le moteur accepte aussi
    des ``datetime`` ou des chaînes ISO et traite une date illisible comme absente.
    """

    order_id: str
    waybill: str | None
    dropshipper_email: str
    product_uid: str
    product_name: str
    sku: str | None
    shipping_provider: str
    qty: int
    order_date: datetime.date | str | None
    delivered_date: datetime.date | str | None
    rts_date: datetime.date | str | None
    status: str
    mode: str | None
    product_value: float
    pincode: str | None = None
    state: str | None = None
    city: str | None = None


@dataclass(frozen=True)
class ProductPrice:
    """Coût unitaire configuré pour un couple (dropshipper, produit)."""

    dropshipper_email: str
    product_uid: str
    product_name: str
    product_cost_per_unit: float
    sku: str | None = None
    currency: str = "INR"


@dataclass(frozen=True)
class PayoutHistoryEntry:
    """Versement déjà effectué lors d'une période antérieure."""

    order_id: str
    waybill: str | None
    dropshipper_email: str
    product_uid: str
    paid_amount: float
    paid_on: str


@dataclass(frozen=True)
class DateWindow:
    """Fenêtre de dates inclusive ``[start, end]``.

    Les bornes sont normalisées à la construction (``to_date``) : un datetime
    est tronqué à sa date, une chaîne ISO est lue, toute autre valeur devient
    None. Une borne absente ou illisible donne une fenêtre qui ne contient
    aucune date ; ``contains`` ne lève jamais.
    """

    start: datetime.date | None
    end: datetime.date | None

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", to_date(self.start))
        object.__setattr__(self, "end", to_date(self.end))

    @classmethod
    def parse(cls, start: object, end: object) -> DateWindow:
        """Construit une fenêtre depuis des dates, datetimes ou chaînes ISO."""
        return cls(start=start, end=end)  # type: ignore[arg-type]

    def contains(self, day: object) -> bool:
        day = to_date(day)
        if day is None or self.start is None or self.end is None:
            return False
        return self.start <= day <= self.end


@dataclass(frozen=True)
class PayoutRow:
    """Ligne d'audit : une commande ayant au moins un effet non nul.

    ``price_configured`` distingue un coût unitaire configuré à 0 d'un produit
    absent de l'index des prix.
    """

    order_id: str
    waybill: str | None
    product_uid: str
    product_name: str
    sku: str | None
    dropshipper_email: str
    order_date: datetime.date | None
    delivered_date: datetime.date | None
    rts_date: datetime.date | None
    shipping_provider: str
    status: str
    mode: str | None
    qty: int
    shipped_qty: int
    delivered_qty: int
    shipping_rate: float
    shipping_cost: float
    cod_rate: float
    cod_received: float
    product_cost_per_unit: float
    product_cost: float
    adjustment_amount: float
    payable: float
    price_configured: bool = False
    pincode: str | None = None
    state: str | None = None
    city: str | None = None


@dataclass(frozen=True)
class Adjustment:
    """Régularisation négative (reprise d'un versement après RTS/RTO)."""

    order_id: str
    reason: str
    amount: float
    reference: str


@dataclass(frozen=True)
class PayoutSummary:
    """Totaux arrondis d'un calcul de versement."""

    shipping_total: float
    cod_total: float
    product_cost_total: float
    rts_rto_reversal_total: float
    final_payable: float
    orders_with_shipping_charges: int
    orders_with_product_amount: int
    orders_with_cod_amount: int
    total_orders_processed: int


@dataclass(frozen=True)
class PayoutResult:
    """Résultat complet du moteur de rapprochement.

    Convention : les listes ne doivent pas être mutées après construction.
    """

    summary: PayoutSummary
    rows: list[PayoutRow]
    adjustments: list[Adjustment]


@dataclass(frozen=True)
class DateRangeValidation:
    """Résultat de la validation structurelle des fenêtres de dates."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PayoutRequest:
    """Paramètres d'un calcul : les deux fenêtres et un filtre dropshipper optionnel."""

    order_date_from: str
    order_date_to: str
    delivered_date_from: str
    delivered_date_to: str
    dropshipper_email: str | None = None

    @property
    def order_window(self) -> DateWindow:
        return DateWindow.parse(self.order_date_from, self.order_date_to)

    @property
    def delivered_window(self) -> DateWindow:
        return DateWindow.parse(self.delivered_date_from, self.delivered_date_to)


@dataclass(frozen=True)
class MissingPrice:
    """Produit vendu sans coût unitaire configuré."""

    dropshipper_email: str
    product_uid: str
    product_name: str
    sku: str | None


@dataclass(frozen=True)
class MissingConfiguration:
    """Trous de configuration détectés (prix produits et tarifs transporteurs)."""

    missing_prices: list[MissingPrice]
    missing_rates: list[str]

    @property
    def is_empty(self) -> bool:
        return not self.missing_prices and not self.missing_rates


def to_date(value: object) -> datetime.date | None:
    """Convertit une date, un datetime ou une chaîne ISO en ``datetime.date``.

    Retourne None pour une valeur vide ou illisible.
    """
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.date.fromisoformat(text[:10])
    except ValueError:
        return None
