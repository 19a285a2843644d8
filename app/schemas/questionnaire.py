"""
Schemas para cuestionarios de visitantes y reportes.
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict
from uuid import UUID
from datetime import date, datetime

from app.models.listing import ListingType


class QuestionnaireBase(BaseModel):
    """Campos comunes del cuestionario."""

    visit_date: date
    nights: int = Field(default=0, ge=0)
    visitors: int = Field(default=1, ge=1)
    origin_city: Optional[str] = Field(None, max_length=120)
    origin_state: Optional[str] = Field(None, max_length=120)
    origin_country: Optional[str] = Field(None, max_length=120)
    visit_reason: Optional[str] = Field(None, max_length=120)
    rating: int = Field(..., ge=1, le=5)
    service_rating: Optional[int] = Field(None, ge=1, le=5)
    cleanliness_rating: Optional[int] = Field(None, ge=1, le=5)
    value_rating: Optional[int] = Field(None, ge=1, le=5)
    comments: Optional[str] = Field(None, max_length=2000)

    model_config = {"from_attributes": True}


class QuestionnaireCreate(QuestionnaireBase):
    """Schema para registrar un cuestionario (hotel, cabaña o renta)."""

    listing_type: ListingType
    listing_id: UUID


class QuestionnaireUpdate(BaseModel):
    """Schema para actualizar un cuestionario."""

    visit_date: Optional[date] = None
    nights: Optional[int] = Field(None, ge=0)
    visitors: Optional[int] = Field(None, ge=1)
    origin_city: Optional[str] = Field(None, max_length=120)
    origin_state: Optional[str] = Field(None, max_length=120)
    origin_country: Optional[str] = Field(None, max_length=120)
    visit_reason: Optional[str] = Field(None, max_length=120)
    rating: Optional[int] = Field(None, ge=1, le=5)
    service_rating: Optional[int] = Field(None, ge=1, le=5)
    cleanliness_rating: Optional[int] = Field(None, ge=1, le=5)
    value_rating: Optional[int] = Field(None, ge=1, le=5)
    comments: Optional[str] = Field(None, max_length=2000)

    model_config = {"from_attributes": True, "extra": "forbid"}


class QuestionnaireResponse(QuestionnaireBase):
    """Schema de respuesta de cuestionario."""

    id: UUID
    user_id: Optional[UUID] = None
    listing_type: ListingType
    listing_id: UUID
    created_at: datetime
    updated_at: datetime


class DateWindow(BaseModel):
    """Ventana de fechas de visita (inclusive)."""

    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @model_validator(mode="after")
    def check_order(self):
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from debe ser anterior o igual a date_to")
        return self


# ================================================================
# REPORTES
# ================================================================

class RatingAverages(BaseModel):
    """Promedios de calificación."""

    rating: Optional[float] = None
    service: Optional[float] = None
    cleanliness: Optional[float] = None
    value: Optional[float] = None


class StatsSummary(BaseModel):
    """Resumen de cuestionarios."""

    total_questionnaires: int
    total_visitors: int
    total_nights: int
    average_visitors: Optional[float] = None
    average_nights: Optional[float] = None
    averages: RatingAverages
    rating_distribution: Dict[str, int]
    by_listing_type: Dict[str, int]


class ListingWeekReport(BaseModel):
    """Reporte semanal de un alojamiento."""

    listing_type: ListingType
    listing_id: UUID
    listing_name: Optional[str] = None
    week: str
    questionnaires: int
    visitors: int
    nights: int
    average_rating: Optional[float] = None


class MonthlyTrend(BaseModel):
    """Tendencia mensual."""

    month: str
    questionnaires: int
    visitors: int
    average_rating: Optional[float] = None


class TopListing(BaseModel):
    """Alojamiento mejor calificado."""

    listing_type: ListingType
    listing_id: UUID
    listing_name: Optional[str] = None
    questionnaires: int
    visitors: int
    average_rating: float


class GroupCount(BaseModel):
    """Conteo por grupo."""

    name: str
    questionnaires: int
    visitors: int


class OriginAnalysis(BaseModel):
    """Procedencia de visitantes."""

    by_country: List[GroupCount]
    by_state: List[GroupCount]
    by_city: List[GroupCount]


class BusyDates(BaseModel):
    """Fechas más concurridas."""

    top_dates: List[GroupCount]
    by_weekday: Dict[str, int]


class PeriodComparison(BaseModel):
    """Comparación entre dos periodos."""

    current: StatsSummary
    previous: StatsSummary
    questionnaires_change_pct: Optional[float] = None
    visitors_change_pct: Optional[float] = None
    rating_change: Optional[float] = None
