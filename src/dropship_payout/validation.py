"""Validation structurelle des fenêtres de dates d'un calcul de versement."""

from __future__ import annotations

from dropship_payout.models import DateRangeValidation, to_date

ORDER_RANGE_REQUIRED = "Order date range is required"
ORDER_RANGE_INVALID = "Order date range is invalid"
ORDER_RANGE_REVERSED = 'Order date "from" must be before "to"'
DELIVERED_RANGE_REQUIRED = "Delivered date range is required"
DELIVERED_RANGE_INVALID = "Delivered date range is invalid"
DELIVERED_RANGE_REVERSED = 'Delivered date "from" must be before "to"'


def _is_missing(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_window(
    start: object,
    end: object,
    required_msg: str,
    invalid_msg: str,
    reversed_msg: str,
) -> str | None:
    if _is_missing(start) or _is_missing(end):
        return required_msg
    start_date, end_date = to_date(start), to_date(end)
    if start_date is None or end_date is None:
        return invalid_msg
    if start_date > end_date:
        return reversed_msg
    return None


def validate_date_ranges(
    order_from: object,
    order_to: object,
    delivered_from: object,
    delivered_to: object,
) -> DateRangeValidation:
    """Vérifie les deux fenêtres indépendamment ; une erreur par fenêtre fautive.

    Ne lève jamais : le résultat porte ``is_valid`` et la liste des messages.
    """
    errors: list[str] = []

    order_error = _check_window(
        order_from, order_to, ORDER_RANGE_REQUIRED, ORDER_RANGE_INVALID, ORDER_RANGE_REVERSED
    )
    if order_error:
        errors.append(order_error)

    delivered_error = _check_window(
        delivered_from, delivered_to, DELIVERED_RANGE_REQUIRED, DELIVERED_RANGE_INVALID, DELIVERED_RANGE_REVERSED
    )
    if delivered_error:
        errors.append(delivered_error)

    return DateRangeValidation(is_valid=not errors, errors=errors)
