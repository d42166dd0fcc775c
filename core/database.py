"""
Database core module per pipe-processor.

Gestisce engine asincrono, sessioni e modello tabella `pipes`.
"""
import logging
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Enum, Integer, Numeric, String, Text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from core.config import get_config
from ingest.types import PipeStatus

logger = logging.getLogger(__name__)

# Base per i modelli
Base = declarative_base()


class Pipe(Base):
    """Tubo in inventario (una riga del foglio Excel)."""
    __tablename__ = 'pipes'

    id = Column(Integer, primary_key=True)
    # Unique index: backstop contro la race check-then-insert
    pipe_number = Column(String(100), nullable=False, unique=True, index=True)

    # Numeric senza scala: nessun arrotondamento dei valori importati
    diameter = Column(Numeric)
    length = Column(Numeric)
    wall_thickness = Column(Numeric)
    material = Column(String(100), index=True)
    grade = Column(String(100))
    manufacturer = Column(String(200), index=True)
    production_date = Column(Date)
    weight = Column(Numeric)
    location = Column(String(200), index=True)
    status = Column(
        Enum(PipeStatus, name='pipe_status', native_enum=False, length=30),
        nullable=False,
        default=PipeStatus.NEW,
        index=True
    )
    remarks = Column(Text)
    batch_number = Column(String(100), index=True)
    quality_class = Column(String(50))
    coating_type = Column(String(100))
    pressure_rating = Column(Numeric)

    # Gestiti dallo store
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<Pipe id={self.id} pipe_number={self.pipe_number!r} status={self.status}>"


_config = get_config()

# Engine asincrono per PostgreSQL (asyncpg)
engine = create_async_engine(
    _config.async_database_url,
    echo=_config.database_echo
)

# Session factory asincrona
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_db():
    """Dependency per ottenere sessione database"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def create_tables():
    """Crea tabella `pipes` (e indici) se non esiste."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully: pipes")
    except Exception as e:
        logger.error(f"Error creating database tables: {e}", exc_info=True)
        raise
