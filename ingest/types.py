from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

CellKind = Literal["text", "decimal", "date", "status"]


class PipeStatus(str, enum.Enum):
    NEW = "NEW"
    IN_STOCK = "IN_STOCK"
    IN_USE = "IN_USE"
    DAMAGED = "DAMAGED"
    SCRAPPED = "SCRAPPED"
    UNDER_INSPECTION = "UNDER_INSPECTION"


class RowStatus(str, enum.Enum):
    SUCCEEDED = "succeeded"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    FAILED_PARSE = "failed_parse"
    FAILED_OTHER = "failed_other"


@dataclass(frozen=True)
class ColumnSpec:
    """Una posizione del layout: campo target e tipo cella atteso."""
    field: str
    kind: CellKind


@dataclass
class MappedRow:
    """Candidato prodotto dal Row Mapper (nessuna validazione né persistenza)."""
    row_number: int
    values: Dict[str, Any]
    warnings: List[str] = field(default_factory=list)

    @property
    def pipe_number(self) -> Optional[str]:
        return self.values.get("pipe_number")


@dataclass(frozen=True)
class RowOutcome:
    row_number: int
    status: RowStatus
    pipe_id: Optional[int] = None
    error: Optional[str] = None
    warnings: tuple = ()

    @property
    def succeeded(self) -> bool:
        return self.status is RowStatus.SUCCEEDED
