"""
Test unitari per Row Mapper.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from core.errors import RowParseError
from ingest.row_mapper import PIPE_COLUMNS, PIPE_FIELDS, column_letter, map_row
from ingest.types import PipeStatus


class TestColumnLetter:
    """Test per column_letter."""

    def test_letters(self):
        assert column_letter(0) == "A"
        assert column_letter(1) == "B"
        assert column_letter(15) == "P"
        assert column_letter(25) == "Z"
        assert column_letter(26) == "AA"


class TestLayout:
    """Test layout posizionale."""

    def test_sixteen_columns_in_order(self):
        assert len(PIPE_COLUMNS) == 16
        assert PIPE_FIELDS[0] == "pipe_number"
        assert PIPE_FIELDS[10] == "status"
        assert PIPE_FIELDS[-1] == "pressure_rating"


class TestMapRow:
    """Test per map_row."""

    def test_full_row(self):
        cells = [
            "P-001", 530, 11.7, 8, "Steel", "K52", "ChTPZ", datetime(2024, 3, 15),
            1200.5, "Warehouse A", "in stock", "ok", "B-01", "A", "Epoxy", 10,
        ]
        mapped = map_row(cells, 2)

        assert mapped.row_number == 2
        assert mapped.pipe_number == "P-001"
        assert mapped.values["diameter"] == Decimal("530")
        assert mapped.values["length"] == Decimal("11.7")
        assert mapped.values["production_date"] == date(2024, 3, 15)
        assert mapped.values["status"] is PipeStatus.IN_STOCK
        assert mapped.values["pressure_rating"] == Decimal("10")
        assert mapped.warnings == []

    def test_short_row_missing_cells_are_null(self):
        """Celle oltre l'ultima popolata valgono null."""
        mapped = map_row(["P-002", "100"], 3)

        assert set(mapped.values) == set(PIPE_FIELDS)
        assert mapped.values["diameter"] == Decimal("100")
        assert mapped.values["material"] is None
        assert mapped.values["status"] is PipeStatus.NEW

    def test_numeric_pipe_number_as_text(self):
        mapped = map_row([12345.0], 2)
        assert mapped.pipe_number == "12345"

    def test_invalid_number_raises_row_parse_error(self):
        with pytest.raises(RowParseError) as exc_info:
            map_row(["P-003", "abc"], 4)

        error = exc_info.value
        assert error.row_number == 4
        assert "diameter" in str(error)
        assert "column B" in str(error)

    def test_invalid_date_raises_row_parse_error(self):
        cells = ["P-004", None, None, None, None, None, None, "15/03/2024"]
        with pytest.raises(RowParseError) as exc_info:
            map_row(cells, 5)
        assert "column H" in str(exc_info.value)

    def test_unknown_status_collects_warning(self):
        cells = ["P-005"] + [None] * 9 + ["broken"]
        mapped = map_row(cells, 6)

        assert mapped.values["status"] is PipeStatus.NEW
        assert mapped.warnings == ["Unrecognized status 'broken', defaulted to NEW"]
