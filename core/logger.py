"""
Logging strutturato per pipe-processor.

Unifica logging colorato (colorlog) e structured logging JSON.
"""
import logging
import json
import uuid
import sys
import contextvars
from typing import Optional, Dict, Any
from datetime import datetime

import colorlog

# Context variables per tracciare richieste
_request_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar('request_context', default={})


def setup_colored_logging(service_name: str = "processor"):
    """
    Configura logging colorato con colorlog.

    Args:
        service_name: Nome del servizio per identificare log
    """
    handler = colorlog.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)

    formatter = colorlog.ColoredFormatter(
        f'%(log_color)s[%(levelname)s]%(reset)s %(cyan)s{service_name}%(reset)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        reset=True,
        log_colors={
            'DEBUG': 'white',
            'INFO': 'blue',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'red,bg_white',
        },
        secondary_log_colors={},
        style='%'
    )

    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    # Rimuovi handler esistenti
    root_logger.handlers = []
    root_logger.addHandler(handler)

    # Riduci verbosità librerie
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)

    return root_logger


def set_request_context(correlation_id: Optional[str] = None, file_name: Optional[str] = None) -> str:
    """
    Imposta contesto richiesta per logging strutturato.

    Args:
        correlation_id: ID correlazione (genera se None)
        file_name: Nome file in elaborazione

    Returns:
        correlation_id effettivo
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    context: Dict[str, Any] = {"correlation_id": correlation_id}
    if file_name:
        context["file_name"] = file_name

    _request_context.set(context)
    return correlation_id


def get_request_context() -> Dict[str, Any]:
    """Recupera contesto richiesta corrente."""
    return _request_context.get({})


def get_correlation_id() -> Optional[str]:
    """Recupera correlation ID dal contesto, None se assente."""
    return get_request_context().get("correlation_id")


def log_with_context(level: str, message: str, correlation_id: Optional[str] = None, **extra):
    """
    Log con prefisso di contesto ([correlation_id=...]).

    Args:
        level: 'info', 'warning', 'error', 'debug'
        message: Messaggio da loggare
        correlation_id: ID correlazione (usa contesto se None)
    """
    if correlation_id is None:
        correlation_id = get_correlation_id()

    log_message = message
    if correlation_id:
        log_message = f"[correlation_id={correlation_id}] {log_message}"

    logger = logging.getLogger(__name__)
    log_func = getattr(logger, level.lower(), logger.info)
    log_func(log_message, **extra)


def log_json(
    level: str,
    message: str,
    correlation_id: Optional[str] = None,
    stage: Optional[str] = None,
    file_name: Optional[str] = None,
    rows_total: Optional[int] = None,
    rows_valid: Optional[int] = None,
    rows_rejected: Optional[int] = None,
    elapsed_sec: Optional[float] = None,
    decision: Optional[str] = None,
    **extra
) -> Dict[str, Any]:
    """
    Log strutturato in formato JSON line (per produzione).

    Args:
        level: 'info', 'warning', 'error', 'debug'
        message: Messaggio da loggare
        correlation_id: ID correlazione (usa contesto se None)
        stage: Fase pipeline (excel_parse, ingest, ...)
        file_name: Nome file processato
        rows_total: Numero totale righe dati
        rows_valid: Numero righe salvate
        rows_rejected: Numero righe non salvate
        elapsed_sec: Tempo elaborazione in secondi
        decision: Esito (success/partial/error)
        **extra: Campi aggiuntivi

    Returns:
        Dict loggato (utile nei test)
    """
    ctx = get_request_context()
    if correlation_id is None:
        correlation_id = ctx.get("correlation_id")
    if file_name is None:
        file_name = ctx.get("file_name")

    log_data: Dict[str, Any] = {
        "timestamp": datetime.utcnow().isoformat(),
        "level": level.upper(),
        "message": message,
    }

    if correlation_id:
        log_data["correlation_id"] = correlation_id
    if file_name:
        log_data["file_name"] = file_name
    if stage:
        log_data["stage"] = stage

    # Metriche
    if rows_total is not None:
        log_data["rows_total"] = rows_total
    if rows_valid is not None:
        log_data["rows_valid"] = rows_valid
    if rows_rejected is not None:
        log_data["rows_rejected"] = rows_rejected
    if elapsed_sec is not None:
        log_data["elapsed_sec"] = elapsed_sec
    if decision:
        log_data["decision"] = decision

    log_data.update(extra)

    logger = logging.getLogger(__name__)
    log_func = getattr(logger, level.lower(), logger.info)
    log_func(json.dumps(log_data, ensure_ascii=False, default=str))

    return log_data
