"""Point d'entrée CLI de dropship-payout."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dropship_payout.config.loader import load_config
from dropship_payout.models import ConfigError, DateRangeError, NoResultError, ParseError, PayoutRequest
from dropship_payout.pipeline import PayoutPipeline

logger = logging.getLogger("dropship_payout.main")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s — %(message)s"
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse les arguments CLI."""
    parser = argparse.ArgumentParser(
        prog="dropship-payout",
        description="Calcul des versements dropshipper (COD, frais de port, coûts produits, reprises RTS/RTO)",
    )
    parser.add_argument("orders_file", help="Fichier CSV des commandes")
    parser.add_argument("output_file", help="Fichier Excel de sortie")
    parser.add_argument("--order-from", required=True, help="Début de la fenêtre de commande (AAAA-MM-JJ)")
    parser.add_argument("--order-to", required=True, help="Fin de la fenêtre de commande (incluse)")
    parser.add_argument("--delivered-from", required=True, help="Début de la fenêtre de livraison (AAAA-MM-JJ)")
    parser.add_argument("--delivered-to", required=True, help="Fin de la fenêtre de livraison (incluse)")
    parser.add_argument("--history", default=None, help="CSV de l'historique des versements (reprises RTS/RTO)")
    parser.add_argument("--dropshipper", default=None, help="Limiter le calcul à un email dropshipper")
    parser.add_argument(
        "--config-dir",
        default="./config/",
        help="Répertoire de configuration YAML (défaut : ./config/)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=VALID_LOG_LEVELS,
        help="Niveau de log (défaut : INFO)",
    )
    return parser.parse_args(args)


def main(args: list[str] | None = None) -> None:
    """Point d'entrée principal."""
    parsed = parse_args(args)

    logging.basicConfig(
        level=getattr(logging, parsed.log_level),
        format=LOG_FORMAT,
    )

    config_dir = Path(parsed.config_dir)
    try:
        config = load_config(config_dir)
    except ConfigError as e:
        logger.error("Erreur de configuration : %s", e)
        sys.exit(2)

    request = PayoutRequest(
        order_date_from=parsed.order_from,
        order_date_to=parsed.order_to,
        delivered_date_from=parsed.delivered_from,
        delivered_date_to=parsed.delivered_to,
        dropshipper_email=parsed.dropshipper or config.default_dropshipper,
    )

    try:
        PayoutPipeline().run(
            orders_path=Path(parsed.orders_file),
            output_path=Path(parsed.output_file),
            config=config,
            request=request,
            history_path=Path(parsed.history) if parsed.history else None,
        )
    except DateRangeError as e:
        for message in e.errors:
            print(f"ERREUR : {message}")
        sys.exit(4)
    except NoResultError:
        print(
            "ERREUR : Aucune commande à traiter. "
            "Vérifiez le fichier de commandes et le filtre dropshipper."
        )
        sys.exit(3)
    except ParseError as e:
        logger.error("Erreur de lecture : %s", e)
        sys.exit(3)
    except Exception:
        logger.exception("Erreur inattendue")
        sys.exit(1)


if __name__ == "__main__":
    main()
