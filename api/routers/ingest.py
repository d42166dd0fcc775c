"""
Router per import Excel inventario tubi.

Endpoint:
- POST /pipe/upload-excel: Elabora file Excel e crea un tubo per riga.
"""
import logging
import os

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from core.config import get_config
from core.repository import PipeRepository
from api.dependencies import get_repository
from ingest.pipeline import process_excel_file
from ingest.report import BatchReport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pipe", tags=["ingest"])

ALLOWED_EXTENSIONS = (".xlsx", ".xls")


def is_valid_excel_filename(filename: str) -> bool:
    """Verifica estensione .xlsx/.xls (case-insensitive)."""
    if not filename:
        return False
    _, ext = os.path.splitext(filename.lower())
    return ext in ALLOWED_EXTENSIONS


def _report_response(report: BatchReport, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=report.model_dump(mode="json"))


@router.post("/upload-excel", response_model=BatchReport)
async def upload_excel_file(
    file: UploadFile = File(...),
    repository: PipeRepository = Depends(get_repository)
):
    """
    Importa un file Excel con dati tubi.

    Status:
    - 200: tutte le righe importate
    - 206: import parziale (righe duplicate o non valide)
    - 400: file vuoto, formato non valido o file non leggibile
    - 413: file oltre il limite configurato
    """
    config = get_config()
    file_name = file.filename or ""
    logger.info(f"[UPLOAD] Received Excel file upload request: {file_name}")

    file_content = await file.read()

    if not file_content:
        return _report_response(BatchReport.failure("File is empty"), 400)

    if not is_valid_excel_filename(file_name):
        return _report_response(
            BatchReport.failure("Invalid file format. Please upload Excel file (.xlsx or .xls)"),
            400
        )

    if len(file_content) > config.max_upload_bytes:
        logger.warning(
            f"[UPLOAD] File too large: {file_name} "
            f"({len(file_content)} bytes, max {config.max_upload_bytes})"
        )
        return _report_response(
            BatchReport.failure(f"File too large. Maximum size is {config.max_upload_size_mb} MB"),
            413
        )

    report = await process_excel_file(file_content, repository, file_name=file_name)

    if report.success:
        logger.info(
            f"[UPLOAD] Excel file processed successfully: {report.total_records} total, "
            f"{report.successful_records} successful, {report.failed_records} failed"
        )
        return _report_response(report, 200)

    if report.total_records == 0 and report.errors:
        # File non leggibile: nessuna riga processata
        return _report_response(report, 400)

    logger.warning(f"[UPLOAD] Excel file processing completed with errors: {report.message}")
    return _report_response(report, 206)
