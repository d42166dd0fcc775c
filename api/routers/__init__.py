"""
Routers per API pipe-processor.

Moduli:
- ingest: Import file Excel (POST /pipe/upload-excel)
- pipes: CRUD e query tubi (/pipe/*)
"""
from . import ingest, pipes

__all__ = ["ingest", "pipes"]
