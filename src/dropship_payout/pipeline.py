"""Orchestrateur du pipeline : CSV → calcul du versement → Excel."""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path

from dropship_payout.config.loader import AppConfig
from dropship_payout.controls.missing_config_checker import MissingConfigChecker
from dropship_payout.engine import calculate_payouts
from dropship_payout.exporters.excel import export, print_summary
from dropship_payout.formatting import generate_payout_id
from dropship_payout.models import (
    DateRangeError,
    MissingConfiguration,
    NoResultError,
    OrderRecord,
    PayoutHistoryEntry,
    PayoutRequest,
    PayoutResult,
)
from dropship_payout.parsers import OrdersParser, PayoutHistoryParser
from dropship_payout.validation import validate_date_ranges

logger = logging.getLogger(__name__)


class PayoutPipeline:
    """Orchestre le pipeline commandes CSV → versement → rapport Excel."""

    def run(
        self,
        orders_path: Path,
        output_path: Path,
        config: AppConfig,
        request: PayoutRequest,
        history_path: Path | None = None,
    ) -> PayoutResult:
        """Exécute le pipeline complet depuis des fichiers sur disque."""
        orders = OrdersParser().parse(orders_path, config).orders
        history: list[PayoutHistoryEntry] = []
        if history_path is not None:
            history = PayoutHistoryParser().parse(history_path, config)

        result, missing = self.calculate(orders, config, request, history)

        payout_id = generate_payout_id()
        export(result, request, output_path, payout_id=payout_id)
        logger.info("Rapport %s écrit dans %s", payout_id, output_path)
        print_summary(result, missing, payout_id)
        return result

    def run_from_buffers(
        self,
        orders_content: bytes,
        config: AppConfig,
        request: PayoutRequest,
        history_content: bytes | None = None,
    ) -> tuple[PayoutResult, MissingConfiguration]:
        """Exécute le calcul à partir de fichiers en mémoire.

        Args:
            orders_content: Contenu du CSV de commandes.
            config: Configuration de l'application.
            request: Fenêtres de dates et filtre dropshipper.
            history_content: Contenu optionnel du CSV d'historique des versements.

        Returns:
            Tuple (résultat du versement, configuration manquante).
        """
        orders = OrdersParser().parse(BytesIO(orders_content), config).orders
        history: list[PayoutHistoryEntry] = []
        if history_content:
            history = PayoutHistoryParser().parse(BytesIO(history_content), config)
        return self.calculate(orders, config, request, history)

    def calculate(
        self,
        orders: list[OrderRecord],
        config: AppConfig,
        request: PayoutRequest,
        history: list[PayoutHistoryEntry] | None = None,
    ) -> tuple[PayoutResult, MissingConfiguration]:
        """Valide les fenêtres, filtre le dropshipper, appelle le moteur et le contrôle de configuration."""
        validation = validate_date_ranges(
            request.order_date_from,
            request.order_date_to,
            request.delivered_date_from,
            request.delivered_date_to,
        )
        if not validation.is_valid:
            raise DateRangeError(validation.errors)

        selected = self._filter_dropshipper(orders, request.dropshipper_email)
        if not selected:
            raise NoResultError(
                "Aucune commande à traiter. "
                "Vérifiez le fichier de commandes et le filtre dropshipper."
            )

        prices = config.price_index()
        rates = config.rate_index()

        result = calculate_payouts(
            selected,
            prices,
            rates,
            request.order_window,
            request.delivered_window,
            history or [],
        )
        missing = MissingConfigChecker.check(selected, prices, rates)
        return result, missing

    @staticmethod
    def _filter_dropshipper(orders: list[OrderRecord], dropshipper_email: str | None) -> list[OrderRecord]:
        """Restreint aux commandes d'un dropshipper (comparaison insensible à la casse)."""
        if not dropshipper_email:
            return orders
        wanted = dropshipper_email.strip().lower()
        selected = [o for o in orders if o.dropshipper_email.lower() == wanted]
        logger.info("Filtre dropshipper %s : %d/%d commandes", dropshipper_email, len(selected), len(orders))
        return selected
