"""
Main FastAPI application per pipe-processor.

Espone import Excel (/pipe/upload-excel), CRUD tubi (/pipe/*) e health check.
"""
import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy import select

from core.config import get_config, validate_config
from core.database import create_tables, get_db
from core.errors import DuplicateKeyError, PipeNotFoundError, StoreError
from core.logger import setup_colored_logging
from api.routers import ingest, pipes

# Configurazione logging colorato
setup_colored_logging("processor")
logger = logging.getLogger(__name__)

_config = get_config()
app = FastAPI(title=_config.processor_name, version=_config.processor_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers (ingest prima: /pipe/upload-excel)
app.include_router(ingest.router)
app.include_router(pipes.router)


@app.exception_handler(DuplicateKeyError)
async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    logger.warning(f"[API] {exc}")
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(PipeNotFoundError)
async def pipe_not_found_handler(request: Request, exc: PipeNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_errors(exc.errors())})


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_errors(exc.errors())})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"[API] Store error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def jsonable_errors(errors) -> list:
    """Errori pydantic serializzabili (loc + msg)."""
    return [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg")}
        for err in errors
    ]


@app.on_event("startup")
async def startup_event():
    """Inizializza database e configurazione al startup"""
    try:
        validate_config()
        await create_tables()
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error during startup: {e}", exc_info=True)
        raise


@app.get("/health")
async def health_check():
    """Health check del servizio"""
    config = get_config()

    db_status = "unknown"
    try:
        async for db in get_db():
            await db.execute(select(1))
            db_status = "connected"
            break
    except Exception as db_error:
        logger.warning(f"Health check database error: {db_error}")
        db_status = f"error: {str(db_error)}"

    return {
        "status": "healthy" if db_status == "connected" else "unhealthy",
        "service": "pipe-processor",
        "name": config.processor_name,
        "version": config.processor_version,
        "timestamp": str(datetime.utcnow()),
        "database": db_status,
        "limits": {
            "max_upload_size_mb": config.max_upload_size_mb
        },
        "endpoints": {
            "upload_excel": "/pipe/upload-excel",
            "pipes": "/pipe",
            "pipe_by_id": "/pipe/{id}",
            "pipe_by_number": "/pipe/number/{pipe_number}",
        }
    }
