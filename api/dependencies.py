"""
Dipendenze FastAPI condivise dai router.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.repository import PipeRepository


async def get_repository(db: AsyncSession = Depends(get_db)) -> PipeRepository:
    """Repository tubi legato alla sessione della richiesta."""
    return PipeRepository(db)
