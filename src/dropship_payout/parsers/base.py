"""Classe abstraite de base pour les parsers CSV."""

from __future__ import annotations

import datetime
import logging
from abc import ABC, abstractmethod
from io import BytesIO
from pathlib import Path

import pandas as pd

from dropship_payout.config.loader import AppConfig
from dropship_payout.models import ParseError

logger = logging.getLogger(__name__)


class BaseParser(ABC):
    """Classe abstraite définissant l'interface commune des parsers."""

    @abstractmethod
    def parse(self, source: Path | BytesIO, config: AppConfig) -> object:
        """Parse un fichier CSV et retourne des enregistrements normalisés."""

    @staticmethod
    def detect_separator(
        source: Path | BytesIO,
        encoding: str = "utf-8",
        candidates: tuple[str, ...] = (",", ";"),
    ) -> str:
        """Détecte le séparateur CSV en comptant les occurrences dans le header."""
        if isinstance(source, BytesIO):
            pos = source.tell()
            header = source.readline().decode(encoding)
            source.seek(pos)
        elif isinstance(source, Path):
            with open(source, encoding=encoding) as f:
                header = f.readline()
        else:
            return candidates[0] if candidates else ","

        if not header.strip():
            return candidates[0] if candidates else ","

        best = candidates[0]
        best_count = 0
        for sep in candidates:
            count = header.count(sep)
            if count > best_count:
                best_count = count
                best = sep
        return best

    def read_csv(
        self,
        source: Path | BytesIO,
        *,
        configured_sep: str,
        encoding: str = "utf-8",
    ) -> pd.DataFrame:
        """Lit un CSV (toutes colonnes en texte) avec auto-détection du séparateur."""
        try:
            detected = self.detect_separator(source, encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(f"Fichier illisible : {e}") from e
        if detected != configured_sep:
            logger.warning(
                "Séparateur détecté '%s' différent du séparateur configuré '%s'"
                " — utilisation du séparateur détecté",
                detected,
                configured_sep,
            )
        if isinstance(source, BytesIO):
            source.seek(0)
        try:
            return pd.read_csv(source, sep=detected, encoding=encoding, dtype=str, keep_default_na=False)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise ParseError(f"CSV illisible : {e}") from e

    @staticmethod
    def apply_column_aliases(df: pd.DataFrame, aliases: dict[str, list[str]]) -> pd.DataFrame:
        """Renomme les colonnes du DataFrame selon les alias définis.

        Pour chaque colonne attendue, si elle est absente mais qu'un alias
        est présent (comparaison insensible à la casse), la colonne est renommée.
        """
        lowered = {str(col).lower(): col for col in df.columns}
        rename_map: dict[str, str] = {}
        for expected, alternatives in aliases.items():
            if expected in df.columns:
                continue
            for alt in [expected, *alternatives]:
                actual = lowered.get(alt.lower())
                if actual is not None:
                    rename_map[actual] = expected
                    break
        if rename_map:
            df = df.rename(columns=rename_map)
        return df

    @staticmethod
    def strip_whitespace(df: pd.DataFrame) -> pd.DataFrame:
        """Strip whitespace from column names and string cell values."""
        df.columns = df.columns.str.strip()
        for col in df.columns:
            if pd.api.types.is_string_dtype(df[col]) or df[col].dtype == object:
                df[col] = df[col].astype(str).str.strip()
        return df

    def validate_columns(self, df: pd.DataFrame, required: list[str]) -> None:
        """Vérifie que toutes les colonnes requises sont présentes dans le DataFrame.

        Raises:
            ParseError: Si des colonnes requises sont absentes du DataFrame.
                Le message liste les colonnes manquantes.
        """
        missing = [col for col in required if col not in df.columns]
        if missing:
            raise ParseError(f"Colonnes manquantes : {', '.join(missing)}")

    @staticmethod
    def parse_date(value: str) -> datetime.date | None:
        """Date ISO ou jour/mois/année ; None si vide ou illisible (tolérance par ligne)."""
        if not value:
            return None
        parsed = pd.to_datetime(value, dayfirst=not value[:4].isdigit(), errors="coerce")
        if pd.isna(parsed):
            return None
        return parsed.date()

    @staticmethod
    def optional_text(value: str) -> str | None:
        return value or None
