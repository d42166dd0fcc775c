"""
Record store per tubi.

PipeRepository incapsula una AsyncSession: ogni scrittura fa commit (una
riga = una transazione) e in caso di errore rollback + StoreError.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import Pipe
from core.errors import DuplicateKeyError, StoreError
from ingest.types import PipeStatus

logger = logging.getLogger(__name__)


class PipeRepository:
    """Accesso alla tabella `pipes`."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, values: Dict[str, Any]) -> Pipe:
        """
        Inserisce un tubo e fa commit.

        Args:
            values: Campi tubo (già validati)

        Returns:
            Pipe persistito (id e timestamp valorizzati)

        Raises:
            DuplicateKeyError: violazione unique su pipe_number
            StoreError: altri errori database
        """
        pipe = Pipe(**values)
        self.session.add(pipe)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"[REPOSITORY] Integrity error inserting pipe {values.get('pipe_number')}: {e.orig}")
            raise DuplicateKeyError(values.get("pipe_number")) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"[REPOSITORY] Error inserting pipe {values.get('pipe_number')}: {e}", exc_info=True)
            raise StoreError(f"Database error: {e}") from e

        await self.session.refresh(pipe)
        logger.debug(f"[REPOSITORY] Created pipe id={pipe.id} pipe_number={pipe.pipe_number}")
        return pipe

    async def save(self, pipe: Pipe) -> Pipe:
        """Persiste modifiche a un tubo esistente."""
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateKeyError(pipe.pipe_number) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"[REPOSITORY] Error updating pipe id={pipe.id}: {e}", exc_info=True)
            raise StoreError(f"Database error: {e}") from e

        await self.session.refresh(pipe)
        return pipe

    async def delete(self, pipe: Pipe) -> None:
        try:
            await self.session.delete(pipe)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(f"Database error: {e}") from e

    async def get(self, pipe_id: int) -> Optional[Pipe]:
        return await self.session.get(Pipe, pipe_id)

    async def find_by_pipe_number(self, pipe_number: str) -> Optional[Pipe]:
        stmt = select(Pipe).where(Pipe.pipe_number == pipe_number)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists_by_pipe_number(self, pipe_number: str) -> bool:
        stmt = select(Pipe.id).where(Pipe.pipe_number == pipe_number).limit(1)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            # Transazione abortita: rollback per non bloccare le righe successive
            await self.session.rollback()
            raise StoreError(f"Database error: {e}") from e
        return result.scalar_one_or_none() is not None

    async def list_all(self) -> List[Pipe]:
        result = await self.session.execute(select(Pipe).order_by(Pipe.id))
        return list(result.scalars().all())

    async def _find_where(self, *criteria) -> List[Pipe]:
        stmt = select(Pipe).where(*criteria).order_by(Pipe.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_status(self, status: PipeStatus) -> List[Pipe]:
        return await self._find_where(Pipe.status == status)

    async def find_by_material(self, material: str) -> List[Pipe]:
        return await self._find_where(Pipe.material == material)

    async def find_by_location(self, location: str) -> List[Pipe]:
        return await self._find_where(Pipe.location == location)

    async def find_by_manufacturer(self, manufacturer: str) -> List[Pipe]:
        return await self._find_where(Pipe.manufacturer == manufacturer)

    async def find_by_batch_number(self, batch_number: str) -> List[Pipe]:
        return await self._find_where(Pipe.batch_number == batch_number)

    async def find_by_diameter_range(self, min_diameter: Decimal, max_diameter: Decimal) -> List[Pipe]:
        return await self._find_where(Pipe.diameter.between(min_diameter, max_diameter))

    async def count_by_status(self, status: PipeStatus) -> int:
        stmt = select(func.count(Pipe.id)).where(Pipe.status == status)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
