"""Parsers CSV des fichiers d'upload."""

from dropship_payout.parsers.base import BaseParser
from dropship_payout.parsers.orders import OrdersParser, PayoutHistoryParser

__all__ = ["BaseParser", "OrdersParser", "PayoutHistoryParser"]
