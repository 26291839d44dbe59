"""Chargement et validation de la configuration YAML (prix, tarifs, paramètres)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from dropship_payout.engine.indexes import ProductPriceIndex, ShippingRateIndex
from dropship_payout.models import ConfigError, ProductPrice

logger = logging.getLogger(__name__)

SUPPORTED_ENCODINGS = {"utf-8", "utf-8-sig", "latin-1", "iso-8859-1"}
SUPPORTED_SEPARATORS = {",", ";"}


@dataclass
class OrdersFileConfig:
    """Format des fichiers CSV d'upload (non frozen — dataclass technique)."""

    encoding: str = "utf-8"
    separator: str = ","


@dataclass
class AppConfig:
    """Configuration complète de l'application (non frozen — dataclass technique)."""

    product_prices: list[ProductPrice]
    shipping_rates: dict[str, float]
    orders_file: OrdersFileConfig = field(default_factory=OrdersFileConfig)
    currency: str = "INR"
    default_dropshipper: str | None = None

    def price_index(self) -> ProductPriceIndex:
        return ProductPriceIndex.from_prices(self.product_prices)

    def rate_index(self) -> ShippingRateIndex:
        return ShippingRateIndex(self.shipping_rates)


def _load_yaml(filepath: Path) -> dict[str, object]:
    """Charge un fichier YAML et retourne son contenu."""
    if not filepath.exists():
        raise ConfigError(f"Fichier de configuration manquant : {filepath}")
    try:
        with open(filepath, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML malformé dans {filepath} : {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Le fichier {filepath} doit contenir un mapping YAML (reçu : {type(data).__name__})")
    return data


def _require_key(data: dict[str, object], key: str, context: str) -> object:
    """Vérifie qu'une clé existe dans un dictionnaire."""
    if key not in data:
        raise ConfigError(f"Clé obligatoire '{key}' manquante dans {context}")
    return data[key]


def _to_amount(raw: object, label: str, context: str) -> float:
    """Convertit un montant YAML en float positif ou nul."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ConfigError(f"{label} doit être un nombre dans {context} (reçu : {raw!r})")
    amount = float(raw)
    if amount < 0:
        raise ConfigError(f"{label} ne peut pas être négatif dans {context} : {amount}")
    return amount


def _validate_prices(data: dict[str, object]) -> list[ProductPrice]:
    """Valide et extrait la liste des coûts produits."""
    context = "product_prices.yaml"

    products = _require_key(data, "products", context)
    if products is None:
        return []
    if not isinstance(products, list):
        raise ConfigError(f"'products' doit être une liste dans {context}")

    prices: list[ProductPrice] = []
    seen: set[tuple[str, str]] = set()
    for i, entry in enumerate(products):
        where = f"{context}[{i}]"
        if not isinstance(entry, dict):
            raise ConfigError(f"L'entrée produit {i} doit être un mapping dans {context}")
        email = str(_require_key(entry, "dropshipper_email", where)).strip()
        uid = str(_require_key(entry, "product_uid", where)).strip()
        if not email or not uid:
            raise ConfigError(f"'dropshipper_email' et 'product_uid' ne peuvent pas être vides dans {where}")
        key = (email, uid)
        if key in seen:
            raise ConfigError(f"Produit en doublon ({email}, {uid}) dans {context}")
        seen.add(key)

        cost = _to_amount(_require_key(entry, "product_cost_per_unit", where), "'product_cost_per_unit'", where)
        sku = entry.get("sku")
        prices.append(
            ProductPrice(
                dropshipper_email=email,
                product_uid=uid,
                product_name=str(entry.get("product_name") or uid),
                product_cost_per_unit=cost,
                sku=str(sku) if sku else None,
                currency=str(entry.get("currency", "INR")),
            )
        )
    return prices


def _validate_rates(data: dict[str, object]) -> dict[str, float]:
    """Valide et extrait les tarifs par transporteur."""
    context = "shipping_rates.yaml"

    providers = _require_key(data, "providers", context)
    if providers is None:
        return {}
    if not isinstance(providers, dict):
        raise ConfigError(f"'providers' doit être un mapping dans {context}")

    rates: dict[str, float] = {}
    for provider, raw in providers.items():
        name = str(provider)
        where = f"{context}/{name}"
        if isinstance(raw, dict):
            raw = _require_key(raw, "rate_per_order", where)
        rates[name] = _to_amount(raw, "Tarif", where)
    return rates


def _validate_settings(data: dict[str, object]) -> tuple[OrdersFileConfig, str, str | None]:
    """Valide les paramètres généraux (format CSV, devise d'affichage)."""
    context = "settings.yaml"

    orders_raw = data.get("orders", {})
    if not isinstance(orders_raw, dict):
        raise ConfigError(f"'orders' doit être un mapping dans {context}")

    encoding = str(orders_raw.get("encoding", "utf-8"))
    if encoding not in SUPPORTED_ENCODINGS:
        raise ConfigError(
            f"Encodage '{encoding}' non supporté. "
            f"Encodages acceptés : {', '.join(sorted(SUPPORTED_ENCODINGS))}"
        )
    separator = str(orders_raw.get("separator", ","))
    if separator not in SUPPORTED_SEPARATORS:
        raise ConfigError(
            f"Séparateur '{separator}' non supporté. "
            f"Séparateurs acceptés : {', '.join(sorted(SUPPORTED_SEPARATORS))}"
        )

    currency = str(data.get("currency", "INR"))
    default_dropshipper = data.get("default_dropshipper")

    return (
        OrdersFileConfig(encoding=encoding, separator=separator),
        currency,
        str(default_dropshipper) if default_dropshipper else None,
    )


def load_config(config_dir: Path) -> AppConfig:
    """Charge et valide la configuration complète depuis un répertoire.

    Args:
        config_dir: Répertoire contenant product_prices.yaml, shipping_rates.yaml
            et settings.yaml.

    Returns:
        AppConfig validée.

    Raises:
        ConfigError: Si un fichier est manquant, malformé, ou contient des valeurs invalides.
    """
    logger.info("Chargement de la configuration depuis %s", config_dir)

    prices = _validate_prices(_load_yaml(config_dir / "product_prices.yaml"))
    rates = _validate_rates(_load_yaml(config_dir / "shipping_rates.yaml"))
    orders_file, currency, default_dropshipper = _validate_settings(_load_yaml(config_dir / "settings.yaml"))

    config = AppConfig(
        product_prices=prices,
        shipping_rates=rates,
        orders_file=orders_file,
        currency=currency,
        default_dropshipper=default_dropshipper,
    )

    logger.debug("%d prix produits, %d tarifs transporteurs", len(prices), len(rates))

    return config
