"""
Gerarchia eccezioni per pipe-processor.

Ogni livello della pipeline solleva un tipo specifico:
- ContainerError: file non leggibile come workbook (fatale per la chiamata)
- CoercionError / RowParseError: singola cella/riga non convertibile (isolato alla riga)
- DuplicateKeyError: pipe_number già presente (isolato alla riga)
- StoreError: errore di persistenza per una riga valida (isolato alla riga)
"""
from typing import Any, Optional


class ProcessorError(Exception):
    """Base per tutti gli errori del processor."""


class ContainerError(ProcessorError):
    """Il file non può essere aperto/parsato come workbook."""


class CoercionError(ProcessorError):
    """Una cella non è convertibile nel tipo dichiarato."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class RowParseError(ProcessorError):
    """Una riga non è decodificabile (causa: CoercionError)."""

    def __init__(self, message: str, row_number: Optional[int] = None):
        super().__init__(message)
        self.row_number = row_number


class StoreError(ProcessorError):
    """Errore del record store (insert/update/delete)."""


class DuplicateKeyError(StoreError):
    """pipe_number già presente nello store."""

    def __init__(self, pipe_number: str):
        super().__init__(f"Pipe number already exists: {pipe_number}")
        self.pipe_number = pipe_number


class PipeNotFoundError(ProcessorError):
    """Tubo non trovato per id."""

    def __init__(self, pipe_id: int):
        super().__init__(f"Pipe not found with id: {pipe_id}")
        self.pipe_id = pipe_id
