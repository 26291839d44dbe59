"""Formatage monétaire (INR, groupement indien), arrondis et identifiants de versement."""

from __future__ import annotations

import datetime
import math
import random
import string

CURRENCY_SYMBOL = "₹"
PAYOUT_ID_PREFIX = "PAYOUT"
PAYOUT_ID_SUFFIX_LENGTH = 9
_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def round_half_up(value: float) -> float:
    """Arrondi à l'unité, demi vers le haut (-2.5 → -2.0, 2.5 → 3.0)."""
    return float(math.floor(value + 0.5))


def round_to_decimals(value: float, decimals: int) -> float:
    """Arrondi demi vers le haut sur la valeur mise à l'échelle 10**decimals."""
    factor = 10**decimals
    return math.floor(value * factor + 0.5) / factor


def _group_indian(integer_part: str) -> str:
    """Groupement en-IN : 3 derniers chiffres, puis par paquets de 2 (12,34,567)."""
    if len(integer_part) <= 3:
        return integer_part
    head, tail = integer_part[:-3], integer_part[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def _format_inr(amount: float, decimals: int) -> str:
    rounded = round_to_decimals(abs(amount), decimals)
    text = f"{rounded:.{decimals}f}"
    integer_part, _, fraction = text.partition(".")
    body = _group_indian(integer_part)
    if fraction:
        body = f"{body}.{fraction}"
    sign = "-" if amount < 0 and rounded != 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{body}"


def format_currency_inr(amount: float) -> str:
    """Montant en roupies sans décimales : 123456.7 → '₹1,23,457'."""
    return _format_inr(amount, 0)


def format_currency_inr_with_decimals(amount: float) -> str:
    """Montant en roupies à deux décimales : 123456.789 → '₹1,23,456.79'."""
    return _format_inr(amount, 2)


def generate_payout_id(
    *,
    _today: datetime.date | None = None,
    _rng: random.Random | None = None,
) -> str:
    """Identifiant de run : PAYOUT_<AAAAMMJJ>_<9 caractères alphanumériques>.

    Non cryptographique ; le risque de collision est accepté aux volumes
    attendus (quelques runs par jour).
    """
    today = _today or datetime.date.today()
    rng = _rng or random.Random()
    suffix = "".join(rng.choices(_SUFFIX_ALPHABET, k=PAYOUT_ID_SUFFIX_LENGTH))
    return f"{PAYOUT_ID_PREFIX}_{today.strftime('%Y%m%d')}_{suffix}"
