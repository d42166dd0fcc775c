"""
Test unitari per Excel Parser.
"""
import io
from datetime import datetime
from unittest.mock import patch

import pandas as pd
import pytest

from core.errors import ContainerError
from ingest.excel_parser import is_blank_row, open_workbook
from tests.mocks import build_workbook, pipe_row


class TestIsBlankRow:
    """Test per is_blank_row."""

    def test_blank(self):
        assert is_blank_row([])
        assert is_blank_row([None, None])
        assert is_blank_row(["", "   ", None])

    def test_not_blank(self):
        assert not is_blank_row([None, "x"])
        assert not is_blank_row([0])


class TestOpenWorkbook:
    """Test per open_workbook."""

    def test_rows_include_header_with_sheet_numbers(self):
        content = build_workbook([pipe_row("P-1"), pipe_row("P-2")])

        with open_workbook(content) as (rows, sheet_info):
            rows = list(rows)

        assert sheet_info["sheet_name"] == "Pipes"
        assert sheet_info["total_sheets"] == 1
        assert [number for number, _ in rows] == [1, 2, 3]
        assert rows[0][1][0] == "Pipe Number"
        assert rows[1][1][0] == "P-1"

    def test_typed_cells(self):
        content = build_workbook([pipe_row("P-1")])

        with open_workbook(content) as (rows, _):
            _, cells = list(rows)[1]

        assert cells[1] == 530
        assert isinstance(cells[7], datetime)

    def test_blank_rows_keep_numbering(self):
        """Righe vuote nel mezzo non spostano la numerazione."""
        content = build_workbook([pipe_row("P-1"), [None], pipe_row("P-3")])

        with open_workbook(content) as (rows, _):
            rows = list(rows)

        assert [number for number, _ in rows] == [1, 2, 3, 4]
        assert is_blank_row(rows[2][1])
        assert rows[3][1][0] == "P-3"

    def test_first_sheet_only(self):
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            pd.DataFrame({"Pipe Number": ["P-1"]}).to_excel(writer, sheet_name="First", index=False)
            pd.DataFrame({"Pipe Number": ["X-1", "X-2"]}).to_excel(writer, sheet_name="Second", index=False)

        with open_workbook(buffer.getvalue()) as (rows, sheet_info):
            rows = list(rows)

        assert sheet_info["sheet_name"] == "First"
        assert sheet_info["total_sheets"] == 2
        assert len(rows) == 2

    def test_unreadable_bytes(self):
        with pytest.raises(ContainerError) as exc_info:
            with open_workbook(b"this is not an excel file"):
                pass
        assert "Error reading Excel file" in str(exc_info.value)

    def test_empty_bytes(self):
        with pytest.raises(ContainerError):
            with open_workbook(b""):
                pass

    def test_workbook_closed_on_error_inside_block(self):
        """Workbook chiuso anche se il blocco solleva."""
        content = build_workbook([pipe_row("P-1")])

        with patch("openpyxl.workbook.workbook.Workbook.close") as mock_close:
            with pytest.raises(RuntimeError):
                with open_workbook(content):
                    raise RuntimeError("boom")

        mock_close.assert_called_once()

    def test_workbook_closed_on_success(self):
        content = build_workbook([])

        with patch("openpyxl.workbook.workbook.Workbook.close") as mock_close:
            with open_workbook(content) as (rows, _):
                list(rows)

        mock_close.assert_called_once()
