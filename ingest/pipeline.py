"""
Pipeline Orchestratore per import Excel inventario tubi.

Flow: workbook → righe → {Row Mapper → Duplicate Guard → insert} per riga
→ esiti → Batch Reporter → BatchReport.

Ogni riga è isolata: un errore di parsing, un duplicato o un errore di
persistenza finisce nel report e l'elaborazione prosegue con la riga
successiva. Solo un file non leggibile (ContainerError) interrompe la
chiamata, con report di fallimento e zero righe processate.
"""
import logging
import time
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from core.config import get_config
from core.errors import ContainerError, DuplicateKeyError, RowParseError, StoreError
from core.logger import log_json, log_with_context, set_request_context
from core.pipe_service import create_pipe
from ingest.dedup import pipe_number_exists
from ingest.excel_parser import is_blank_row, open_workbook
from ingest.report import BatchReport, build_report
from ingest.row_mapper import map_row
from ingest.types import RowOutcome, RowStatus
from ingest.validation import PipeModel

logger = logging.getLogger(__name__)


def format_validation_error(error: ValidationError) -> str:
    """Errori pydantic su una riga: 'campo: messaggio; ...'."""
    parts = []
    for err in error.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "value"
        parts.append(f"{location}: {err.get('msg')}")
    return "; ".join(parts)


async def process_row(
    row_number: int,
    cells: Sequence[Any],
    repository
) -> Tuple[RowOutcome, Optional[PipeModel]]:
    """
    Elabora una singola riga dati.

    Stati terminali: succeeded, skipped_duplicate, failed_parse, failed_other.
    Non solleva mai: ogni errore diventa un RowOutcome.

    Returns:
        Tuple (outcome, pipe creato o None)
    """
    # 1. Decodifica posizionale
    try:
        mapped = map_row(cells, row_number)
    except RowParseError as e:
        message = f"Row {row_number}: {e}"
        logger.warning(f"[PIPELINE] {message}")
        return RowOutcome(row_number, RowStatus.FAILED_PARSE, error=message), None

    warnings = tuple(mapped.warnings)
    for warning in warnings:
        logger.warning(f"[PIPELINE] Row {row_number}: {warning}")

    pipe_number = mapped.pipe_number

    try:
        # 2. Duplicate Guard (fast path, nessuna create per duplicati)
        if await pipe_number_exists(repository, pipe_number):
            message = f"Row {row_number}: {DuplicateKeyError(pipe_number)}"
            logger.info(f"[PIPELINE] {message}")
            return RowOutcome(row_number, RowStatus.SKIPPED_DUPLICATE, error=message, warnings=warnings), None

        # 3. Stesso percorso della creazione diretta
        pipe = await create_pipe(repository, mapped.values)

    except DuplicateKeyError as e:
        # Race con un altro import/creazione tra check e insert
        message = f"Row {row_number}: {e}"
        logger.warning(f"[PIPELINE] {message} (detected at insert)")
        return RowOutcome(row_number, RowStatus.SKIPPED_DUPLICATE, error=message, warnings=warnings), None
    except ValidationError as e:
        message = f"Row {row_number}: {format_validation_error(e)}"
        logger.warning(f"[PIPELINE] {message}")
        return RowOutcome(row_number, RowStatus.FAILED_OTHER, error=message, warnings=warnings), None
    except StoreError as e:
        message = f"Row {row_number}: {e}"
        logger.error(f"[PIPELINE] Error processing row {row_number}: {e}")
        return RowOutcome(row_number, RowStatus.FAILED_OTHER, error=message, warnings=warnings), None
    except Exception as e:
        message = f"Row {row_number}: {e}"
        logger.error(f"[PIPELINE] Unexpected error processing row {row_number}: {e}", exc_info=True)
        return RowOutcome(row_number, RowStatus.FAILED_OTHER, error=message, warnings=warnings), None

    return RowOutcome(row_number, RowStatus.SUCCEEDED, pipe_id=pipe.id, warnings=warnings), pipe


async def ingest_rows(
    rows: Iterable[Tuple[int, Sequence[Any]]],
    repository
) -> Tuple[List[RowOutcome], List[PipeModel]]:
    """
    Scorre le righe in ordine di foglio.

    La prima riga è sempre header. Righe completamente vuote vengono
    saltate senza essere contate.

    Returns:
        Tuple (outcomes, processed_pipes) in ordine di riga
    """
    outcomes: List[RowOutcome] = []
    processed_pipes: List[PipeModel] = []
    header_skipped = False

    for row_number, cells in rows:
        if not header_skipped:
            header_skipped = True
            continue

        if is_blank_row(cells):
            logger.debug(f"[PIPELINE] Row {row_number}: empty, skipped")
            continue

        outcome, pipe = await process_row(row_number, cells, repository)
        outcomes.append(outcome)
        if pipe is not None:
            processed_pipes.append(pipe)

    return outcomes, processed_pipes


async def process_excel_file(
    file_content: bytes,
    repository,
    file_name: Optional[str] = None,
    correlation_id: Optional[str] = None
) -> BatchReport:
    """
    Entry point import Excel.

    Args:
        file_content: Contenuto file (bytes, .xlsx)
        repository: Record store (PipeRepository o compatibile)
        file_name: Nome file per logging
        correlation_id: ID correlazione (genera se None)

    Returns:
        BatchReport: successo completo, parziale (errors non vuoto) o
        fallimento con zero righe se il file non è leggibile
    """
    start_time = time.time()
    config = get_config()
    correlation_id = set_request_context(correlation_id=correlation_id, file_name=file_name)

    logger.info(f"[PIPELINE] Starting Excel import: {file_name} ({len(file_content)} bytes)")

    try:
        with open_workbook(file_content) as (rows, sheet_info):
            outcomes, processed_pipes = await ingest_rows(rows, repository)
    except ContainerError as e:
        elapsed_sec = time.time() - start_time
        log_with_context("error", f"[PIPELINE] Excel file not readable: {e}")
        if config.log_json_enabled:
            log_json(
                level='error',
                message="Excel import failed: container not readable",
                correlation_id=correlation_id,
                stage='excel_parse',
                rows_total=0,
                elapsed_sec=elapsed_sec,
                decision='error',
                error=str(e)
            )
        return BatchReport.failure(str(e), [str(e)])

    report = build_report(outcomes, processed_pipes)
    elapsed_sec = time.time() - start_time

    decision = 'success' if report.success else 'partial'
    if config.log_json_enabled:
        log_json(
            level='info' if report.success else 'warning',
            message=f"Excel import completed: decision={decision}",
            correlation_id=correlation_id,
            stage='ingest',
            rows_total=report.total_records,
            rows_valid=report.successful_records,
            rows_rejected=report.failed_records,
            elapsed_sec=elapsed_sec,
            decision=decision,
            sheet_name=sheet_info.get('sheet_name'),
            warnings_count=len(report.warnings)
        )

    logger.info(
        f"[PIPELINE] Completed: {file_name} | "
        f"total={report.total_records}, successful={report.successful_records}, "
        f"failed={report.failed_records}, elapsed={elapsed_sec:.2f}s"
    )

    return report
