"""Endpoints de l'API : calcul, export Excel, configuration manquante, paramètres, health."""

from __future__ import annotations

import json
import logging
from io import BytesIO

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from dropship_payout.config.loader import AppConfig
from dropship_payout.controls.missing_config_checker import MissingConfigChecker
from dropship_payout.exporters.excel import (
    XLSX_MEDIA_TYPE,
    export_missing_template_to_bytes,
    export_to_bytes,
    report_filename,
)
from dropship_payout.formatting import generate_payout_id
from dropship_payout.models import (
    ConfigError,
    DateRangeError,
    MissingConfiguration,
    NoResultError,
    ParseError,
    PayoutRequest,
    PayoutResult,
)
from dropship_payout.parsers import OrdersParser
from dropship_payout.pipeline import PayoutPipeline

from .overrides import apply_overrides
from .serializers import serialize_missing, serialize_response, serialize_settings

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB


async def _read_csv_upload(upload: UploadFile | None, label: str) -> bytes | None:
    """Valide un upload CSV et retourne son contenu."""
    if upload is None:
        return None
    filename = upload.filename or "unknown"
    if not filename.lower().endswith(".csv"):
        raise HTTPException(
            status_code=422,
            detail=f"Extension invalide pour '{filename}' ({label}) : seuls les fichiers .csv sont acceptés.",
        )
    content = await upload.read()
    if len(content) > MAX_FILE_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"Fichier '{filename}' trop volumineux : {len(content)} octets (maximum {MAX_FILE_SIZE}).",
        )
    return content


def _resolve_config(request: Request, overrides_json: str | None) -> AppConfig:
    """Parse optional overrides JSON and apply to config."""
    config: AppConfig = request.app.state.config
    if overrides_json:
        try:
            overrides_dict = json.loads(overrides_json)
        except json.JSONDecodeError as e:
            raise HTTPException(status_code=422, detail=f"JSON overrides invalide : {e}")
        try:
            config = apply_overrides(config, overrides_dict)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=f"Overrides invalides : {e}")
    return config


def _run_pipeline(
    orders_content: bytes,
    history_content: bytes | None,
    config: AppConfig,
    payout_request: PayoutRequest,
) -> tuple[PayoutResult, MissingConfiguration]:
    """Exécute le calcul et traduit les erreurs métier en réponses HTTP."""
    try:
        return PayoutPipeline().run_from_buffers(orders_content, config, payout_request, history_content)
    except DateRangeError as e:
        raise HTTPException(status_code=422, detail={"errors": e.errors})
    except (ParseError, NoResultError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ConfigError as e:
        logger.error("Erreur de configuration : %s", e)
        raise HTTPException(status_code=500, detail="Erreur de configuration interne")


@router.post("/api/calculate-payouts")
async def calculate(
    request: Request,
    orders: UploadFile,
    history: UploadFile | None = File(None),
    order_date_from: str = Form(""),
    order_date_to: str = Form(""),
    delivered_date_from: str = Form(""),
    delivered_date_to: str = Form(""),
    dropshipper_email: str | None = Form(None),
    overrides: str | None = Form(None),
) -> JSONResponse:
    """Upload CSV → JSON (summary, rows, adjustments, missingData)."""
    orders_content = await _read_csv_upload(orders, "commandes")
    history_content = await _read_csv_upload(history, "historique")
    config = _resolve_config(request, overrides)

    payout_request = PayoutRequest(
        order_date_from=order_date_from,
        order_date_to=order_date_to,
        delivered_date_from=delivered_date_from,
        delivered_date_to=delivered_date_to,
        dropshipper_email=dropshipper_email or None,
    )
    logger.info("Calcul de versement demandé : %s", payout_request)

    result, missing = _run_pipeline(orders_content or b"", history_content, config, payout_request)

    return JSONResponse(content=serialize_response(result, missing, generate_payout_id()))


@router.post("/api/export-workbook")
async def export_workbook(
    request: Request,
    orders: UploadFile,
    history: UploadFile | None = File(None),
    order_date_from: str = Form(""),
    order_date_to: str = Form(""),
    delivered_date_from: str = Form(""),
    delivered_date_to: str = Form(""),
    dropshipper_email: str | None = Form(None),
    overrides: str | None = Form(None),
) -> StreamingResponse:
    """Upload CSV → rapport de versement .xlsx en téléchargement."""
    orders_content = await _read_csv_upload(orders, "commandes")
    history_content = await _read_csv_upload(history, "historique")
    config = _resolve_config(request, overrides)

    payout_request = PayoutRequest(
        order_date_from=order_date_from,
        order_date_to=order_date_to,
        delivered_date_from=delivered_date_from,
        delivered_date_to=delivered_date_to,
        dropshipper_email=dropshipper_email or None,
    )

    result, _missing = _run_pipeline(orders_content or b"", history_content, config, payout_request)

    payout_id = generate_payout_id()
    buffer = export_to_bytes(result, payout_request, payout_id=payout_id)
    filename = report_filename(payout_request)
    logger.info("Export %s : %s (%d lignes)", payout_id, filename, len(result.rows))

    return StreamingResponse(
        buffer,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _check_missing(orders_content: bytes, config: AppConfig) -> MissingConfiguration:
    try:
        orders = OrdersParser().parse(BytesIO(orders_content), config).orders
    except ParseError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return MissingConfigChecker.check(orders, config.price_index(), config.rate_index())


@router.post("/api/missing-data")
async def missing_data(
    request: Request,
    orders: UploadFile,
    overrides: str | None = Form(None),
) -> JSONResponse:
    """Upload CSV → produits sans prix et transporteurs sans tarif."""
    orders_content = await _read_csv_upload(orders, "commandes")
    config = _resolve_config(request, overrides)
    missing = _check_missing(orders_content or b"", config)
    return JSONResponse(content=serialize_missing(missing))


@router.post("/api/missing-data/template")
async def missing_data_template(
    request: Request,
    orders: UploadFile,
    overrides: str | None = Form(None),
) -> StreamingResponse:
    """Upload CSV → modèle Excel pré-rempli avec la configuration manquante."""
    orders_content = await _read_csv_upload(orders, "commandes")
    config = _resolve_config(request, overrides)
    missing = _check_missing(orders_content or b"", config)
    buffer = export_missing_template_to_bytes(missing, config.currency)
    return StreamingResponse(
        buffer,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="missing-settings-template.xlsx"'},
    )


@router.get("/api/settings")
async def settings(request: Request) -> JSONResponse:
    """Retourne tous les prix produits et tarifs transporteurs configurés."""
    return JSONResponse(content=serialize_settings(request.app.state.config))


@router.get("/api/health")
async def health() -> dict[str, str]:
    """Health check."""
    return {"status": "ok"}
