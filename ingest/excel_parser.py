"""
Excel Parser per import inventario tubi.

Apre il workbook con openpyxl e restituisce le righe del primo foglio con
le celle tipizzate (str, int/float, datetime, bool, None).
"""
import io
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Sequence, Tuple

from openpyxl import load_workbook

from core.errors import ContainerError
from ingest.coercion import is_blank

logger = logging.getLogger(__name__)

Row = Tuple[int, List[Any]]


def is_blank_row(cells: Sequence[Any]) -> bool:
    """True se tutte le celle sono vuote (None/NaN o stringa di soli spazi)."""
    for cell in cells:
        if isinstance(cell, str):
            if cell.strip():
                return False
        elif not is_blank(cell):
            return False
    return True


@contextmanager
def open_workbook(file_content: bytes, sheet_index: int = 0) -> Iterator[Tuple[Iterator[Row], Dict[str, Any]]]:
    """
    Apre il workbook e fornisce le righe del foglio richiesto.

    Il workbook resta aperto per tutta la durata del blocco `with` e viene
    chiuso su ogni percorso di uscita (successo, errore riga, errore file).

    Le righe partono sempre dalla riga 1 del foglio, righe vuote incluse:
    il numero riga coincide con quello visibile in Excel. Formule lette
    come valore calcolato (data_only).

    Args:
        file_content: Contenuto file (bytes)
        sheet_index: Indice foglio (default primo foglio)

    Yields:
        Tuple (rows, sheet_info):
        - rows: iteratore di (row_number 1-based, celle) incluso l'header
        - sheet_info: Dict con sheet_name, total_sheets, rows, columns

    Raises:
        ContainerError: se il file non è un workbook leggibile
    """
    try:
        workbook = load_workbook(filename=io.BytesIO(file_content), data_only=True)
    except Exception as e:
        logger.error(f"[EXCEL_PARSER] Error opening Excel file: {e}")
        raise ContainerError(f"Error reading Excel file: {e}") from e

    try:
        sheet_names = workbook.sheetnames
        if not sheet_names or sheet_index >= len(sheet_names):
            raise ContainerError(f"Error reading Excel file: sheet {sheet_index} not found")

        sheet = workbook[sheet_names[sheet_index]]

        sheet_info = {
            'sheet_name': sheet.title,
            'sheet_index': sheet_index,
            'total_sheets': len(sheet_names),
            'rows': sheet.max_row,
            'columns': sheet.max_column,
        }

        logger.info(
            f"[EXCEL_PARSER] Excel opened: sheet='{sheet.title}', "
            f"{sheet.max_row} rows (header included), {sheet.max_column} columns"
        )

        rows = (
            (row_number, list(cells))
            for row_number, cells in enumerate(sheet.iter_rows(min_row=1, values_only=True), start=1)
        )
        yield rows, sheet_info
    finally:
        workbook.close()
        logger.debug("[EXCEL_PARSER] Workbook closed")
