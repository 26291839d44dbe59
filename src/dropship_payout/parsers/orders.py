"""Parsers des uploads : commandes transporteur et historique des versements."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

import pandas as pd

from dropship_payout.config.loader import AppConfig
from dropship_payout.models import OrderRecord, PayoutHistoryEntry
from dropship_payout.parsers.base import BaseParser

logger = logging.getLogger(__name__)

ORDER_REQUIRED_COLUMNS = [
    "Dropshipper Email",
    "Order ID",
    "Order Date",
    "Product Name",
    "Qty",
    "Product Value",
    "Status",
    "Shipping Provider",
]

ORDER_OPTIONAL_COLUMNS = [
    "Waybill",
    "SKU",
    "Mode",
    "Delivered Date",
    "RTS Date",
    "Pincode",
    "State",
    "City",
]

# Aliases : colonne attendue → alternatives dans les exports réels
ORDER_COLUMN_ALIASES: dict[str, list[str]] = {
    "Dropshipper Email": ["dropshipper_email", "Dropshipper", "Email"],
    "Order ID": ["order_id", "Order Id", "OrderID"],
    "Order Date": ["order_date", "Order Created"],
    "Waybill": ["waybill", "AWB", "AWB Number", "Tracking Number"],
    "Product Name": ["product_name", "Product"],
    "SKU": ["sku", "SKU Code"],
    "Qty": ["qty", "Quantity"],
    "Product Value": ["product_value", "COD Amount", "Product Price"],
    "Mode": ["mode", "Payment Mode", "Payment Method"],
    "Status": ["status", "Order Status", "Shipment Status"],
    "Delivered Date": ["delivered_date", "Delivery Date"],
    "RTS Date": ["rts_date", "RTO Date", "Return Date"],
    "Shipping Provider": ["shipping_provider", "Courier", "Courier Company", "Carrier"],
    "Pincode": ["pincode", "Pin Code"],
    "State": ["state"],
    "City": ["city"],
}

HISTORY_REQUIRED_COLUMNS = ["Order ID", "Dropshipper Email", "Product UID", "Paid Amount", "Paid On"]

HISTORY_COLUMN_ALIASES: dict[str, list[str]] = {
    "Order ID": ["order_id"],
    "Waybill": ["waybill", "AWB"],
    "Dropshipper Email": ["dropshipper_email"],
    "Product UID": ["product_uid", "SKU/UID"],
    "Paid Amount": ["paid_amount", "Amount"],
    "Paid On": ["paid_on", "Payout Date"],
}


@dataclass(frozen=True)
class OrdersParseResult:
    """Résultat du parsing d'un fichier de commandes."""

    orders: list[OrderRecord]
    skipped: int
    cancelled: int


def _to_number(value: str) -> float | None:
    if not value:
        return None
    number = pd.to_numeric(value.replace(",", ""), errors="coerce")
    if pd.isna(number):
        return None
    return float(number)


class OrdersParser(BaseParser):
    """Parser du fichier de commandes (une ligne par produit et par envoi)."""

    def parse(self, source: Path | BytesIO, config: AppConfig) -> OrdersParseResult:
        df = self.read_csv(
            source,
            configured_sep=config.orders_file.separator,
            encoding=config.orders_file.encoding,
        )
        df = self.strip_whitespace(df)
        df = self.apply_column_aliases(df, ORDER_COLUMN_ALIASES)
        self.validate_columns(df, ORDER_REQUIRED_COLUMNS)
        for col in ORDER_OPTIONAL_COLUMNS:
            if col not in df.columns:
                df[col] = ""

        orders: list[OrderRecord] = []
        skipped = 0
        cancelled = 0

        for line_no, row in enumerate(df.to_dict("records"), start=2):
            order_id = row["Order ID"]
            email = row["Dropshipper Email"]
            qty = _to_number(row["Qty"])
            if not order_id or not email:
                logger.warning("Ligne %d ignorée : Order ID ou Dropshipper Email manquant", line_no)
                skipped += 1
                continue
            if qty is None or qty <= 0 or qty != int(qty):
                logger.warning("Ligne %d ignorée (%s) : quantité invalide %r", line_no, order_id, row["Qty"])
                skipped += 1
                continue

            order_date = self.parse_date(row["Order Date"])
            if order_date is None:
                logger.warning("Commande %s : date de commande illisible %r", order_id, row["Order Date"])

            status = row["Status"]
            if status.lower() == "cancelled":
                cancelled += 1

            sku = self.optional_text(row["SKU"])
            product_name = row["Product Name"]
            orders.append(
                OrderRecord(
                    order_id=order_id,
                    waybill=self.optional_text(row["Waybill"]),
                    dropshipper_email=email,
                    product_uid=sku or product_name,
                    product_name=product_name,
                    sku=sku,
                    shipping_provider=row["Shipping Provider"],
                    qty=int(qty),
                    order_date=order_date,
                    delivered_date=self.parse_date(row["Delivered Date"]),
                    rts_date=self.parse_date(row["RTS Date"]),
                    status=status,
                    mode=self.optional_text(row["Mode"]),
                    product_value=_to_number(row["Product Value"]) or 0.0,
                    pincode=self.optional_text(row["Pincode"]),
                    state=self.optional_text(row["State"]),
                    city=self.optional_text(row["City"]),
                )
            )

        logger.info(
            "Commandes : %d lignes retenues, %d ignorées, %d annulées",
            len(orders),
            skipped,
            cancelled,
        )
        return OrdersParseResult(orders=orders, skipped=skipped, cancelled=cancelled)


class PayoutHistoryParser(BaseParser):
    """Parser de l'historique des versements (export des périodes précédentes)."""

    def parse(self, source: Path | BytesIO, config: AppConfig) -> list[PayoutHistoryEntry]:
        df = self.read_csv(
            source,
            configured_sep=config.orders_file.separator,
            encoding=config.orders_file.encoding,
        )
        df = self.strip_whitespace(df)
        df = self.apply_column_aliases(df, HISTORY_COLUMN_ALIASES)
        self.validate_columns(df, HISTORY_REQUIRED_COLUMNS)
        if "Waybill" not in df.columns:
            df["Waybill"] = ""

        entries: list[PayoutHistoryEntry] = []
        for line_no, row in enumerate(df.to_dict("records"), start=2):
            amount = _to_number(row["Paid Amount"])
            if amount is None:
                logger.warning("Historique ligne %d ignorée : montant invalide %r", line_no, row["Paid Amount"])
                continue
            entries.append(
                PayoutHistoryEntry(
                    order_id=row["Order ID"],
                    waybill=self.optional_text(row["Waybill"]),
                    dropshipper_email=row["Dropshipper Email"],
                    product_uid=row["Product UID"],
                    paid_amount=amount,
                    paid_on=row["Paid On"],
                )
            )

        logger.info("Historique : %d versements antérieurs chargés", len(entries))
        return entries
