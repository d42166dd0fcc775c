"""
Duplicate Guard: verifica esistenza pipe_number nello store.

Usato sia dall'import Excel (riga duplicata = skip) sia dalla creazione
diretta (errore). Check e insert non sono atomici: il vincolo unique su
pipes.pipe_number resta il vero backstop.
"""
import logging
from typing import Optional

from core.errors import DuplicateKeyError

logger = logging.getLogger(__name__)


async def pipe_number_exists(repository, pipe_number: Optional[str]) -> bool:
    """
    True se esiste già un tubo con questo numero.

    Numero vuoto/None non è mai considerato duplicato.
    """
    if pipe_number is None or not str(pipe_number).strip():
        return False
    exists = await repository.exists_by_pipe_number(pipe_number)
    if exists:
        logger.debug(f"[DEDUP] Pipe number already present: {pipe_number}")
    return exists


async def ensure_unique_pipe_number(repository, pipe_number: Optional[str]) -> None:
    """
    Solleva DuplicateKeyError se il numero è già presente.

    Raises:
        DuplicateKeyError
    """
    if await pipe_number_exists(repository, pipe_number):
        logger.warning(f"[DEDUP] Pipe number already exists: {pipe_number}")
        raise DuplicateKeyError(pipe_number)
