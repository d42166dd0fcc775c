"""
Configurazione pytest e fixture comuni.
"""
import pytest

from tests.mocks import MockPipeRepository, build_workbook, pipe_row


@pytest.fixture
def repository():
    """Repository in memoria vuoto."""
    return MockPipeRepository()


@pytest.fixture
def sample_workbook():
    """Workbook con header e tre righe valide (P-1, P-2, P-3)."""
    return build_workbook([pipe_row("P-1"), pipe_row("P-2"), pipe_row("P-3")])


@pytest.fixture
def sample_pipe_data():
    """Payload valido per creazione diretta."""
    return {
        "pipe_number": "P-100",
        "diameter": "530.0",
        "length": "11.7",
        "wall_thickness": "8",
        "material": "Steel",
        "manufacturer": "ChTPZ",
        "production_date": "2024-03-15",
        "location": "Warehouse A",
        "status": "IN_STOCK",
    }
