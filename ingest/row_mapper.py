"""
Row Mapper per import Excel.

Decodifica posizionale di una riga nel candidato tubo. Il layout colonne è
fisso e non documentato nel file: nessuna validazione dei nomi header.
"""
import logging
from typing import Any, Dict, List, Sequence

from core.errors import CoercionError, RowParseError
from ingest.coercion import coerce_cell
from ingest.types import ColumnSpec, MappedRow

logger = logging.getLogger(__name__)

# Ordine colonne del foglio (A..P)
PIPE_COLUMNS: List[ColumnSpec] = [
    ColumnSpec("pipe_number", "text"),
    ColumnSpec("diameter", "decimal"),
    ColumnSpec("length", "decimal"),
    ColumnSpec("wall_thickness", "decimal"),
    ColumnSpec("material", "text"),
    ColumnSpec("grade", "text"),
    ColumnSpec("manufacturer", "text"),
    ColumnSpec("production_date", "date"),
    ColumnSpec("weight", "decimal"),
    ColumnSpec("location", "text"),
    ColumnSpec("status", "status"),
    ColumnSpec("remarks", "text"),
    ColumnSpec("batch_number", "text"),
    ColumnSpec("quality_class", "text"),
    ColumnSpec("coating_type", "text"),
    ColumnSpec("pressure_rating", "decimal"),
]

PIPE_FIELDS = [column.field for column in PIPE_COLUMNS]


def column_letter(index: int) -> str:
    """Indice 0-based -> lettera colonna Excel (0 -> A, 26 -> AA)."""
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord('A') + remainder) + letters
    return letters


def map_row(
    cells: Sequence[Any],
    row_number: int,
    columns: Sequence[ColumnSpec] = PIPE_COLUMNS
) -> MappedRow:
    """
    Mappa una riga (lista celle) in un candidato.

    Celle oltre l'ultima popolata valgono None. Nessun controllo duplicati,
    nessuna persistenza.

    Args:
        cells: Valori grezzi della riga in ordine di colonna
        row_number: Numero riga nel foglio (1-based) per i messaggi
        columns: Layout posizionale (default PIPE_COLUMNS)

    Returns:
        MappedRow con valori convertiti e warning soft

    Raises:
        RowParseError: se una cella non è convertibile
    """
    values: Dict[str, Any] = {}
    warnings: List[str] = []

    for index, column in enumerate(columns):
        raw = cells[index] if index < len(cells) else None
        try:
            value, warning = coerce_cell(raw, column.kind, column.field)
        except CoercionError as e:
            logger.debug(
                f"[ROW_MAPPER] Row {row_number}, column {column_letter(index)} ({column.field}): {e}"
            )
            raise RowParseError(
                f"Error parsing row data: {e} (column {column_letter(index)})",
                row_number=row_number
            ) from e

        values[column.field] = value
        if warning:
            warnings.append(warning)

    return MappedRow(row_number=row_number, values=values, warnings=warnings)
