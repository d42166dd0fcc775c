"""
Test endpoint API.
"""
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_repository
from api.main import app
from ingest.types import PipeStatus
from tests.mocks import build_workbook, pipe_row

XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture
def client(repository):
    """TestClient con repository in memoria."""
    app.dependency_overrides[get_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


def _upload(client, content, filename="pipes.xlsx"):
    return client.post("/pipe/upload-excel", files={"file": (filename, content, XLSX_TYPE)})


class TestHealthEndpoint:
    """Test endpoint /health."""

    def test_health_check_database_connected(self, client):
        session = AsyncMock()

        async def fake_get_db():
            yield session

        with patch("api.main.get_db", fake_get_db):
            response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "pipe-processor"
        assert data["database"] == "connected"
        assert data["name"] == "Pipe Inventory Processor"

    def test_health_check_database_down(self, client):
        async def failing_get_db():
            raise ConnectionError("connection refused")
            yield

        with patch("api.main.get_db", failing_get_db):
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"


class TestUploadExcelEndpoint:
    """Test endpoint POST /pipe/upload-excel."""

    def test_upload_success(self, client, repository):
        content = build_workbook([pipe_row("P-1"), pipe_row("P-2")])

        response = _upload(client, content)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Excel file processed successfully"
        assert data["total_records"] == 2
        assert data["successful_records"] == 2
        assert [p["pipe_number"] for p in data["processed_pipes"]] == ["P-1", "P-2"]
        assert "outcomes" not in data
        assert repository.create_count == 2

    def test_upload_partial(self, client, repository):
        repository.seed("P-1")
        content = build_workbook([pipe_row("P-1"), pipe_row("P-2")])

        response = _upload(client, content)

        assert response.status_code == 206
        data = response.json()
        assert data["success"] is False
        assert data["failed_records"] == 1
        assert data["errors"] == ["Row 2: Pipe number already exists: P-1"]

    def test_upload_header_only(self, client):
        response = _upload(client, build_workbook([]))

        assert response.status_code == 200
        assert response.json()["total_records"] == 0

    def test_upload_empty_file(self, client):
        response = _upload(client, b"")

        assert response.status_code == 400
        assert response.json()["message"] == "File is empty"

    def test_upload_wrong_extension(self, client):
        response = _upload(client, b"a,b,c", filename="pipes.csv")

        assert response.status_code == 400
        assert "Invalid file format" in response.json()["message"]

    def test_upload_unreadable_workbook(self, client, repository):
        response = _upload(client, b"not really a workbook")

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["total_records"] == 0
        assert len(data["errors"]) == 1
        assert repository.create_count == 0

    def test_upload_too_large(self, client):
        content = build_workbook([pipe_row("P-1")])

        with patch("api.routers.ingest.get_config") as mock_config:
            mock_config.return_value.max_upload_bytes = 10
            mock_config.return_value.max_upload_size_mb = 1
            response = _upload(client, content)

        assert response.status_code == 413


class TestPipeCrudEndpoints:
    """Test CRUD /pipe."""

    def test_create_pipe(self, client, sample_pipe_data):
        response = client.post("/pipe", json=sample_pipe_data)

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 1
        assert data["pipe_number"] == "P-100"
        assert data["status"] == "IN_STOCK"

    def test_create_duplicate(self, client, repository, sample_pipe_data):
        repository.seed("P-100")

        response = client.post("/pipe", json=sample_pipe_data)

        assert response.status_code == 409
        assert response.json()["detail"] == "Pipe number already exists: P-100"

    def test_create_invalid(self, client):
        response = client.post("/pipe", json={"pipe_number": "P-1", "diameter": "-1"})
        assert response.status_code == 400

    def test_get_pipe(self, client, repository):
        pipe = repository.seed("P-1")

        assert client.get(f"/pipe/{pipe.id}").json()["pipe_number"] == "P-1"
        assert client.get("/pipe/999").status_code == 404

    def test_get_by_number(self, client, repository):
        repository.seed("P-1")

        assert client.get("/pipe/number/P-1").status_code == 200
        assert client.get("/pipe/number/P-404").status_code == 404

    def test_list(self, client, repository):
        repository.seed("P-1")
        repository.seed("P-2")

        response = client.get("/pipe")
        assert [p["pipe_number"] for p in response.json()] == ["P-1", "P-2"]

    def test_update(self, client, repository):
        pipe = repository.seed("P-1", location="Yard 1")

        response = client.put(f"/pipe/{pipe.id}", json={"location": "Yard 2"})

        assert response.status_code == 200
        assert response.json()["location"] == "Yard 2"

    def test_update_missing(self, client):
        response = client.put("/pipe/42", json={"location": "Yard 2"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Pipe not found with id: 42"

    def test_delete(self, client, repository):
        pipe = repository.seed("P-1")

        assert client.delete(f"/pipe/{pipe.id}").status_code == 204
        assert client.delete(f"/pipe/{pipe.id}").status_code == 404


class TestPipeQueryEndpoints:
    """Test query /pipe/*."""

    @pytest.fixture(autouse=True)
    def seeded(self, repository):
        repository.seed("P-1", status=PipeStatus.IN_STOCK, material="Steel", location="Yard",
                        manufacturer="ChTPZ", batch_number="B-1", diameter=Decimal("100"))
        repository.seed("P-2", status=PipeStatus.DAMAGED, material="Steel", location="Dock",
                        manufacturer="TMK", batch_number="B-2", diameter=Decimal("530"))

    def test_by_status(self, client):
        data = client.get("/pipe/status/DAMAGED").json()
        assert [p["pipe_number"] for p in data] == ["P-2"]

    def test_by_invalid_status(self, client):
        assert client.get("/pipe/status/BROKEN").status_code == 400

    def test_by_material_location_manufacturer_batch(self, client):
        assert len(client.get("/pipe/material/Steel").json()) == 2
        assert [p["pipe_number"] for p in client.get("/pipe/location/Dock").json()] == ["P-2"]
        assert [p["pipe_number"] for p in client.get("/pipe/manufacturer/ChTPZ").json()] == ["P-1"]
        assert [p["pipe_number"] for p in client.get("/pipe/batch/B-2").json()] == ["P-2"]

    def test_by_diameter_range(self, client):
        response = client.get("/pipe/diameter-range", params={"min_diameter": 50, "max_diameter": 200})

        assert response.status_code == 200
        assert [p["pipe_number"] for p in response.json()] == ["P-1"]

    def test_diameter_range_inverted(self, client):
        response = client.get("/pipe/diameter-range", params={"min_diameter": 600, "max_diameter": 100})
        assert response.status_code == 400

    def test_count_by_status(self, client):
        assert client.get("/pipe/count/status/IN_STOCK").json() == {"status": "IN_STOCK", "count": 1}

    def test_exists(self, client):
        assert client.get("/pipe/exists/P-1").json() == {"pipe_number": "P-1", "exists": True}
        assert client.get("/pipe/exists/P-9").json()["exists"] is False
