"""
Servizio tubi: creazione, aggiornamento, lettura, cancellazione.

create_pipe è l'unico percorso di inserimento, usato sia dall'API sia
dall'import Excel (stessa validazione).
"""
import logging
from typing import Any, Dict, List, Optional, Union

from core.errors import PipeNotFoundError
from core.repository import PipeRepository
from ingest.dedup import ensure_unique_pipe_number
from ingest.validation import PipeCreateModel, PipeModel, PipeUpdateModel

logger = logging.getLogger(__name__)


def pipe_to_model(pipe) -> PipeModel:
    """Converte entity ORM in modello di risposta."""
    return PipeModel.model_validate(pipe)


async def create_pipe(
    repository: PipeRepository,
    payload: Union[PipeCreateModel, Dict[str, Any]]
) -> PipeModel:
    """
    Valida e inserisce un nuovo tubo.

    Un eventuale id nel payload viene ignorato.

    Args:
        repository: Record store
        payload: Dati tubo (dict o PipeCreateModel)

    Returns:
        PipeModel persistito

    Raises:
        pydantic.ValidationError: dati non validi
        DuplicateKeyError: pipe_number già presente (guard o vincolo unique)
        StoreError: errore database
    """
    if isinstance(payload, dict):
        data = {k: v for k, v in payload.items() if k != "id"}
        model = PipeCreateModel(**data)
    else:
        model = payload

    await ensure_unique_pipe_number(repository, model.pipe_number)

    pipe = await repository.create(model.model_dump())
    logger.info(f"[PIPE_SERVICE] Created pipe {pipe.pipe_number} (id={pipe.id})")
    return pipe_to_model(pipe)


async def update_pipe(
    repository: PipeRepository,
    pipe_id: int,
    payload: PipeUpdateModel
) -> PipeModel:
    """
    Aggiornamento parziale: applica solo i campi non null del payload.

    Raises:
        PipeNotFoundError: id inesistente
        DuplicateKeyError: rinomina su un numero già usato da un altro tubo
    """
    pipe = await repository.get(pipe_id)
    if pipe is None:
        raise PipeNotFoundError(pipe_id)

    changes = payload.model_dump(exclude_none=True)
    new_number = changes.get("pipe_number")
    if new_number and new_number != pipe.pipe_number:
        await ensure_unique_pipe_number(repository, new_number)

    for field_name, value in changes.items():
        setattr(pipe, field_name, value)

    pipe = await repository.save(pipe)
    logger.info(f"[PIPE_SERVICE] Updated pipe id={pipe_id}: {sorted(changes)}")
    return pipe_to_model(pipe)


async def get_pipe(repository: PipeRepository, pipe_id: int) -> Optional[PipeModel]:
    pipe = await repository.get(pipe_id)
    return pipe_to_model(pipe) if pipe is not None else None


async def get_pipe_by_number(repository: PipeRepository, pipe_number: str) -> Optional[PipeModel]:
    pipe = await repository.find_by_pipe_number(pipe_number)
    return pipe_to_model(pipe) if pipe is not None else None


async def list_pipes(repository: PipeRepository) -> List[PipeModel]:
    return [pipe_to_model(pipe) for pipe in await repository.list_all()]


async def delete_pipe(repository: PipeRepository, pipe_id: int) -> None:
    """Cancella un tubo; id inesistente = PipeNotFoundError."""
    pipe = await repository.get(pipe_id)
    if pipe is None:
        raise PipeNotFoundError(pipe_id)
    await repository.delete(pipe)
    logger.info(f"[PIPE_SERVICE] Deleted pipe id={pipe_id}")
