"""
Validation (Pydantic models) per tubi.

Definisce i modelli usati sia dall'import Excel sia dalla creazione diretta
via API: stessa validazione per entrambi i percorsi.
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ingest.types import PipeStatus

logger = logging.getLogger(__name__)

NonNegativeDecimal = Optional[Decimal]


def _strip_or_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v if v else None


class PipeCreateModel(BaseModel):
    """
    Modello Pydantic v2 per creazione tubo.

    pipe_number obbligatorio e non vuoto; misure >= 0 o null.
    """
    pipe_number: str = Field(..., min_length=1, max_length=100, description="Numero tubo (chiave business)")
    diameter: NonNegativeDecimal = Field(None, ge=0, description="Diametro")
    length: NonNegativeDecimal = Field(None, ge=0, description="Lunghezza")
    wall_thickness: NonNegativeDecimal = Field(None, ge=0, description="Spessore parete")
    material: Optional[str] = Field(None, max_length=100)
    grade: Optional[str] = Field(None, max_length=100)
    manufacturer: Optional[str] = Field(None, max_length=200)
    production_date: Optional[date] = None
    weight: NonNegativeDecimal = Field(None, ge=0, description="Peso")
    location: Optional[str] = Field(None, max_length=200)
    status: PipeStatus = Field(default=PipeStatus.NEW, description="Stato ciclo di vita")
    remarks: Optional[str] = None
    batch_number: Optional[str] = Field(None, max_length=100)
    quality_class: Optional[str] = Field(None, max_length=50)
    coating_type: Optional[str] = Field(None, max_length=100)
    pressure_rating: NonNegativeDecimal = Field(None, ge=0, description="Pressione nominale")

    @field_validator('pipe_number', mode='before')
    @classmethod
    def validate_pipe_number(cls, v):
        """Trim del numero tubo; vuoto non ammesso."""
        if v is None:
            raise ValueError("pipe_number is required")
        v = str(v).strip()
        if not v:
            raise ValueError("pipe_number must not be blank")
        return v

    @field_validator(
        'material', 'grade', 'manufacturer', 'location', 'remarks',
        'batch_number', 'quality_class', 'coating_type'
    )
    @classmethod
    def validate_text(cls, v: Optional[str]) -> Optional[str]:
        return _strip_or_none(v)

    @field_validator('status', mode='before')
    @classmethod
    def validate_status(cls, v):
        """Stato assente = NEW."""
        return PipeStatus.NEW if v is None else v

    model_config = {
        "json_schema_extra": {
            "example": {
                "pipe_number": "P-2024-0001",
                "diameter": "530.0",
                "length": "11.7",
                "wall_thickness": "8.0",
                "material": "Steel",
                "grade": "K52",
                "manufacturer": "ChTPZ",
                "production_date": "2024-03-15",
                "status": "IN_STOCK"
            }
        }
    }


class PipeUpdateModel(BaseModel):
    """Aggiornamento parziale: solo i campi forniti vengono applicati."""
    pipe_number: Optional[str] = Field(None, min_length=1, max_length=100)
    diameter: NonNegativeDecimal = Field(None, ge=0)
    length: NonNegativeDecimal = Field(None, ge=0)
    wall_thickness: NonNegativeDecimal = Field(None, ge=0)
    material: Optional[str] = None
    grade: Optional[str] = None
    manufacturer: Optional[str] = None
    production_date: Optional[date] = None
    weight: NonNegativeDecimal = Field(None, ge=0)
    location: Optional[str] = None
    status: Optional[PipeStatus] = None
    remarks: Optional[str] = None
    batch_number: Optional[str] = None
    quality_class: Optional[str] = None
    coating_type: Optional[str] = None
    pressure_rating: NonNegativeDecimal = Field(None, ge=0)


class PipeModel(PipeCreateModel):
    """Tubo persistito (risposta API)."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
