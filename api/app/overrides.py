"""Validation et application des overrides de prix produits et tarifs transporteurs."""

from __future__ import annotations

import dataclasses
from typing import Any

from pydantic import BaseModel, Field, field_validator

from dropship_payout.config.loader import AppConfig
from dropship_payout.models import ProductPrice


class ProductPriceOverride(BaseModel):
    """Coût unitaire ponctuel pour un couple (dropshipper, produit)."""

    dropshipper_email: str = Field(min_length=1)
    product_uid: str = Field(min_length=1)
    product_cost_per_unit: float = Field(ge=0)
    product_name: str | None = None
    sku: str | None = None

    @field_validator("dropshipper_email", "product_uid")
    @classmethod
    def strip_key(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("valeur vide")
        return v


class PayoutOverridesSchema(BaseModel):
    """Schéma Pydantic des overrides envoyés avec une requête de calcul."""

    product_prices: list[ProductPriceOverride] | None = None
    shipping_rates: dict[str, float] | None = None

    @field_validator("shipping_rates")
    @classmethod
    def validate_rates(cls, v: dict[str, float] | None) -> dict[str, float] | None:
        if v is None:
            return None
        for provider, rate in v.items():
            if rate < 0:
                raise ValueError(f"Tarif négatif pour '{provider}' : {rate}")
        return v


def apply_overrides(config: AppConfig, overrides: dict[str, Any]) -> AppConfig:
    """Applique les overrides au config — merge partiel, retourne une copie."""
    schema = PayoutOverridesSchema.model_validate(overrides)

    replacements: dict[str, Any] = {}

    if schema.product_prices:
        merged = {(p.dropshipper_email, p.product_uid): p for p in config.product_prices}
        for o in schema.product_prices:
            key = (o.dropshipper_email, o.product_uid)
            existing = merged.get(key)
            merged[key] = ProductPrice(
                dropshipper_email=o.dropshipper_email,
                product_uid=o.product_uid,
                product_name=o.product_name or (existing.product_name if existing else o.product_uid),
                product_cost_per_unit=o.product_cost_per_unit,
                sku=o.sku if o.sku is not None else (existing.sku if existing else None),
                currency=existing.currency if existing else config.currency,
            )
        replacements["product_prices"] = list(merged.values())

    if schema.shipping_rates:
        replacements["shipping_rates"] = {**config.shipping_rates, **schema.shipping_rates}

    if not replacements:
        return config

    return dataclasses.replace(config, **replacements)
