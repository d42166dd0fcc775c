"""
Cell Coercer per import Excel.

Converte una singola cella (valore grezzo letto da openpyxl/pandas) nel tipo
dichiarato dal layout: testo, Decimal, data o PipeStatus.
"""
import logging
import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from numbers import Number
from typing import Any, Optional, Tuple

import numpy as np
import pandas as pd
from openpyxl.utils.datetime import to_excel

from core.errors import CoercionError
from ingest.types import CellKind, PipeStatus

logger = logging.getLogger(__name__)

# Numero locale-invariant: solo punto decimale, niente separatori migliaia
_DECIMAL_RE = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$')

# Unico formato data testuale accettato (YYYY-MM-DD)
_ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
DATE_FORMAT = "%Y-%m-%d"

DEFAULT_STATUS = PipeStatus.NEW

# Sinonimi stato (inglese + russo) -> valore canonico
STATUS_SYNONYMS = {
    # NEW
    'new': PipeStatus.NEW,
    'новый': PipeStatus.NEW,
    'новая': PipeStatus.NEW,
    'новое': PipeStatus.NEW,
    # IN_STOCK
    'in stock': PipeStatus.IN_STOCK,
    'in-stock': PipeStatus.IN_STOCK,
    'stocked': PipeStatus.IN_STOCK,
    'на складе': PipeStatus.IN_STOCK,
    'в наличии': PipeStatus.IN_STOCK,
    # IN_USE
    'in use': PipeStatus.IN_USE,
    'in-use': PipeStatus.IN_USE,
    'в использовании': PipeStatus.IN_USE,
    'используется': PipeStatus.IN_USE,
    # DAMAGED
    'damaged': PipeStatus.DAMAGED,
    'поврежден': PipeStatus.DAMAGED,
    'повреждён': PipeStatus.DAMAGED,
    'поврежденный': PipeStatus.DAMAGED,
    # SCRAPPED
    'scrapped': PipeStatus.SCRAPPED,
    'списан': PipeStatus.SCRAPPED,
    'списана': PipeStatus.SCRAPPED,
    'утилизирован': PipeStatus.SCRAPPED,
    # UNDER_INSPECTION
    'under inspection': PipeStatus.UNDER_INSPECTION,
    'на проверке': PipeStatus.UNDER_INSPECTION,
    'на инспекции': PipeStatus.UNDER_INSPECTION,
}


def is_blank(value: Any) -> bool:
    """
    Verifica se la cella è assente (None, NaN, NaT).

    Le stringhe non sono mai blank qui: il trim è compito di coerce_text.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _is_bool(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not _is_bool(value)


def coerce_text(value: Any) -> Optional[str]:
    """
    Converte cella in testo.

    Regole:
    - stringa: trim, vuota = None
    - numero: intero senza ".0", altrimenti rappresentazione decimale
    - data: ISO (YYYY-MM-DD)
    - booleano: "true"/"false"

    Args:
        value: Valore cella grezzo

    Returns:
        Testo normalizzato o None
    """
    if is_blank(value):
        return None

    if isinstance(value, str):
        text = value.strip()
        return text if text else None

    if _is_bool(value):
        return "true" if value else "false"

    if isinstance(value, datetime):
        return value.date().isoformat()

    if isinstance(value, date):
        return value.isoformat()

    if _is_number(value):
        number = Decimal(str(value))
        if number == number.to_integral_value():
            return str(int(number))
        return str(number)

    text = str(value).strip()
    return text if text else None


def coerce_decimal(value: Any, field: str = "value") -> Optional[Decimal]:
    """
    Converte cella in Decimal.

    Celle numeriche convertite direttamente, celle testo parsate senza
    dipendenza dal locale (punto decimale). Celle formattate come data
    valgono il loro seriale Excel (es. 2024-03-15 -> 45366). Ogni altro
    tipo = None.

    Raises:
        CoercionError: testo non numerico (anche parzialmente, es. "12mm")
    """
    if is_blank(value) or _is_bool(value):
        return None

    if _is_number(value):
        if isinstance(value, float) and (math.isinf(value) or math.isnan(value)):
            return None
        return Decimal(str(value))

    if isinstance(value, (datetime, date)):
        serial = to_excel(value)
        if serial == int(serial):
            serial = int(serial)
        return Decimal(str(serial))

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if not _DECIMAL_RE.match(text):
            raise CoercionError(f"Invalid numeric value for {field}: '{text}'", field=field, value=value)
        try:
            return Decimal(text)
        except InvalidOperation as e:
            raise CoercionError(f"Invalid numeric value for {field}: '{text}'", field=field, value=value) from e

    return None


def coerce_date(value: Any, field: str = "value") -> Optional[date]:
    """
    Converte cella in data.

    - cella formattata come data (datetime da openpyxl) -> date
    - testo: solo formato YYYY-MM-DD, nessun formato alternativo
    - numeri non formattati come data e altri tipi -> None

    Raises:
        CoercionError: testo non vuoto non conforme al formato
    """
    if is_blank(value):
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if not _ISO_DATE_RE.match(text):
            raise CoercionError(
                f"Invalid date value for {field}: '{text}' (expected YYYY-MM-DD)",
                field=field, value=value
            )
        try:
            return datetime.strptime(text, DATE_FORMAT).date()
        except ValueError as e:
            raise CoercionError(
                f"Invalid date value for {field}: '{text}' (expected YYYY-MM-DD)",
                field=field, value=value
            ) from e

    return None


def coerce_status(value: Any) -> Tuple[PipeStatus, Optional[str]]:
    """
    Converte cella in PipeStatus. Non fallisce mai.

    Ordine:
    1. match case-insensitive sul nome canonico (spazi -> '_')
    2. tabella sinonimi (inglese/russo)
    3. default NEW (con warning se il testo non era vuoto)

    Returns:
        Tuple (status, warning): warning è None se il valore è stato riconosciuto o era vuoto
    """
    text = coerce_text(value)
    if text is None:
        return DEFAULT_STATUS, None

    collapsed = " ".join(text.split())
    canonical = collapsed.upper().replace(" ", "_")
    if canonical in PipeStatus.__members__:
        return PipeStatus[canonical], None

    synonym = STATUS_SYNONYMS.get(collapsed.lower())
    if synonym is not None:
        return synonym, None

    warning = f"Unrecognized status '{text}', defaulted to {DEFAULT_STATUS.value}"
    logger.debug(f"[COERCION] {warning}")
    return DEFAULT_STATUS, warning


def coerce_cell(value: Any, kind: CellKind, field: str) -> Tuple[Any, Optional[str]]:
    """
    Dispatcher per tipo cella dichiarato nel layout.

    Returns:
        Tuple (valore convertito, warning opzionale)
    """
    if kind == "text":
        return coerce_text(value), None
    if kind == "decimal":
        number = coerce_decimal(value, field)
        if isinstance(value, (datetime, date)):
            return number, f"Date value in numeric column {field} converted to Excel serial {number}"
        return number, None
    if kind == "date":
        return coerce_date(value, field), None
    if kind == "status":
        return coerce_status(value)
    raise ValueError(f"Tipo cella non supportato: {kind}")
