"""
Batch Reporter: riduce la lista esiti riga in un BatchReport.
"""
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from ingest.types import RowOutcome, RowStatus
from ingest.validation import PipeModel

SUCCESS_MESSAGE = "Excel file processed successfully"


class BatchReport(BaseModel):
    """Riepilogo di un import Excel (non persistito)."""
    success: bool
    message: str
    total_records: int = 0
    successful_records: int = 0
    failed_records: int = 0
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    processed_pipes: List[PipeModel] = Field(default_factory=list)
    outcomes: List[RowOutcome] = Field(default_factory=list, exclude=True)

    @property
    def partial(self) -> bool:
        """Import eseguito ma con almeno una riga non salvata."""
        return self.total_records > 0 and self.failed_records > 0

    @classmethod
    def failure(cls, message: str, errors: Optional[List[str]] = None) -> "BatchReport":
        """Report per file non leggibile: nessuna riga processata."""
        return cls(
            success=False,
            message=message,
            errors=list(errors) if errors else [],
        )


def build_report(outcomes: Sequence[RowOutcome], processed_pipes: Sequence[PipeModel]) -> BatchReport:
    """
    Aggrega esiti riga.

    - total = numero esiti
    - failed = total - successful (duplicati inclusi)
    - success = failed == 0

    Args:
        outcomes: Esiti in ordine di riga
        processed_pipes: Tubi creati in ordine di riga

    Returns:
        BatchReport
    """
    total = len(outcomes)
    successful = sum(1 for outcome in outcomes if outcome.status is RowStatus.SUCCEEDED)
    failed = total - successful

    errors = [outcome.error for outcome in outcomes if outcome.error]
    warnings = [
        f"Row {outcome.row_number}: {warning}"
        for outcome in outcomes
        for warning in outcome.warnings
    ]

    if errors:
        message = f"Excel file processed with errors: {failed} of {total} rows not imported"
    else:
        message = SUCCESS_MESSAGE

    return BatchReport(
        success=failed == 0,
        message=message,
        total_records=total,
        successful_records=successful,
        failed_records=failed,
        errors=errors,
        warnings=warnings,
        processed_pipes=list(processed_pipes),
        outcomes=list(outcomes),
    )
