"""
Router per CRUD e query tubi.

Endpoint sotto /pipe: creazione, lettura, aggiornamento, cancellazione e
ricerche per stato, materiale, ubicazione, produttore, lotto e diametro.
"""
import logging
from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from core import pipe_service
from core.repository import PipeRepository
from api.dependencies import get_repository
from ingest.types import PipeStatus
from ingest.validation import PipeCreateModel, PipeModel, PipeUpdateModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pipe", tags=["pipes"])


def _models(pipes) -> List[PipeModel]:
    return [pipe_service.pipe_to_model(pipe) for pipe in pipes]


@router.post("", response_model=PipeModel, status_code=201)
async def create_pipe(
    payload: PipeCreateModel,
    repository: PipeRepository = Depends(get_repository)
):
    """Crea un tubo. 409 se pipe_number già presente."""
    return await pipe_service.create_pipe(repository, payload)


@router.get("", response_model=List[PipeModel])
async def list_pipes(repository: PipeRepository = Depends(get_repository)):
    return await pipe_service.list_pipes(repository)


@router.get("/number/{pipe_number}", response_model=PipeModel)
async def get_pipe_by_number(
    pipe_number: str,
    repository: PipeRepository = Depends(get_repository)
):
    pipe = await pipe_service.get_pipe_by_number(repository, pipe_number)
    if pipe is None:
        raise HTTPException(status_code=404, detail=f"Pipe not found with number: {pipe_number}")
    return pipe


@router.get("/status/{status}", response_model=List[PipeModel])
async def get_pipes_by_status(
    status: PipeStatus,
    repository: PipeRepository = Depends(get_repository)
):
    return _models(await repository.find_by_status(status))


@router.get("/material/{material}", response_model=List[PipeModel])
async def get_pipes_by_material(
    material: str,
    repository: PipeRepository = Depends(get_repository)
):
    return _models(await repository.find_by_material(material))


@router.get("/location/{location}", response_model=List[PipeModel])
async def get_pipes_by_location(
    location: str,
    repository: PipeRepository = Depends(get_repository)
):
    return _models(await repository.find_by_location(location))


@router.get("/manufacturer/{manufacturer}", response_model=List[PipeModel])
async def get_pipes_by_manufacturer(
    manufacturer: str,
    repository: PipeRepository = Depends(get_repository)
):
    return _models(await repository.find_by_manufacturer(manufacturer))


@router.get("/diameter-range", response_model=List[PipeModel])
async def get_pipes_by_diameter_range(
    min_diameter: Decimal = Query(..., ge=0),
    max_diameter: Decimal = Query(..., ge=0),
    repository: PipeRepository = Depends(get_repository)
):
    """Tubi con min_diameter <= diametro <= max_diameter."""
    if min_diameter > max_diameter:
        raise HTTPException(status_code=400, detail="min_diameter must not exceed max_diameter")
    return _models(await repository.find_by_diameter_range(min_diameter, max_diameter))


@router.get("/batch/{batch_number}", response_model=List[PipeModel])
async def get_pipes_by_batch_number(
    batch_number: str,
    repository: PipeRepository = Depends(get_repository)
):
    return _models(await repository.find_by_batch_number(batch_number))


@router.get("/count/status/{status}")
async def count_pipes_by_status(
    status: PipeStatus,
    repository: PipeRepository = Depends(get_repository)
):
    count = await repository.count_by_status(status)
    return {"status": status.value, "count": count}


@router.get("/exists/{pipe_number}")
async def pipe_exists(
    pipe_number: str,
    repository: PipeRepository = Depends(get_repository)
):
    exists = await repository.exists_by_pipe_number(pipe_number)
    return {"pipe_number": pipe_number, "exists": exists}


@router.get("/{pipe_id}", response_model=PipeModel)
async def get_pipe(
    pipe_id: int,
    repository: PipeRepository = Depends(get_repository)
):
    pipe = await pipe_service.get_pipe(repository, pipe_id)
    if pipe is None:
        raise HTTPException(status_code=404, detail=f"Pipe not found with id: {pipe_id}")
    return pipe


@router.put("/{pipe_id}", response_model=PipeModel)
async def update_pipe(
    pipe_id: int,
    payload: PipeUpdateModel,
    repository: PipeRepository = Depends(get_repository)
):
    """Aggiornamento parziale. 404 se id inesistente, 409 se rinomina su numero esistente."""
    return await pipe_service.update_pipe(repository, pipe_id, payload)


@router.delete("/{pipe_id}", status_code=204)
async def delete_pipe(
    pipe_id: int,
    repository: PipeRepository = Depends(get_repository)
):
    await pipe_service.delete_pipe(repository, pipe_id)
    return Response(status_code=204)
