"""
Schemas para alojamientos (hoteles, cabañas y rentas).
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from app.db.base import ListingStatus


class LocationSchema(BaseModel):
    """Ubicación estructurada del alojamiento."""

    address: Optional[str] = Field(None, max_length=300)
    city: str = Field(..., min_length=1, max_length=120)
    region: Optional[str] = Field(None, max_length=120)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class ContactSchema(BaseModel):
    """Datos de contacto."""

    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = Field(None, max_length=500)
    whatsapp: Optional[str] = Field(None, max_length=30)


class CapacitySchema(BaseModel):
    """Capacidad del alojamiento."""

    guests: int = Field(..., ge=1)
    rooms: Optional[int] = Field(None, ge=0)
    beds: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)


class ListingBase(BaseModel):
    """Schema base de alojamiento."""

    name: str = Field(..., min_length=2, max_length=150)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    price: float = Field(..., ge=0)
    location: LocationSchema
    contact: ContactSchema = Field(default_factory=ContactSchema)
    capacity: CapacitySchema
    amenities: List[str] = []
    payment_methods: List[str] = []

    model_config = {"from_attributes": True}


class HotelCreate(ListingBase):
    """Schema para crear hotel."""
    stars: Optional[int] = Field(None, ge=1, le=5)


class CabinCreate(ListingBase):
    """Schema para crear cabaña."""
    pass


class RentalCreate(ListingBase):
    """Schema para crear renta."""
    min_nights: int = Field(default=1, ge=1)


class ListingUpdate(BaseModel):
    """
    Schema para actualizar alojamiento.

    Los sub-documentos (location, contact, capacity, amenities,
    payment_methods) se reemplazan completos cuando vienen en el payload.
    El propietario, el estado y las imágenes no se modifican por esta vía.
    """

    name: Optional[str] = Field(None, min_length=2, max_length=150)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    location: Optional[LocationSchema] = None
    contact: Optional[ContactSchema] = None
    capacity: Optional[CapacitySchema] = None
    amenities: Optional[List[str]] = None
    payment_methods: Optional[List[str]] = None

    model_config = {"from_attributes": True, "extra": "forbid"}

    @field_validator("name", "price", "location", "contact", "capacity", "amenities", "payment_methods")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("El campo no puede ser nulo")
        return value


class HotelUpdate(ListingUpdate):
    """Schema para actualizar hotel."""
    stars: Optional[int] = Field(None, ge=1, le=5)


class CabinUpdate(ListingUpdate):
    """Schema para actualizar cabaña."""
    pass


class RentalUpdate(ListingUpdate):
    """Schema para actualizar renta."""
    min_nights: Optional[int] = Field(None, ge=1)

    @field_validator("min_nights")
    @classmethod
    def min_nights_not_null(cls, value):
        if value is None:
            raise ValueError("El campo no puede ser nulo")
        return value


class ListingFilters(BaseModel):
    """Filtros del listado público."""

    city: Optional[str] = None
    price_min: Optional[float] = Field(None, ge=0)
    price_max: Optional[float] = Field(None, ge=0)
    guests: Optional[int] = Field(None, ge=1)
    category: Optional[str] = None


class OwnerSummary(BaseModel):
    """Resumen del propietario."""

    id: UUID
    full_name: str
    email: str

    model_config = {"from_attributes": True}


class ModificationStamp(BaseModel):
    """Sello de la última modificación."""

    actor_id: Optional[UUID] = None
    timestamp: datetime
    action: str
    reason: Optional[str] = None
    fields: Optional[List[str]] = None


class ListingResponse(BaseModel):
    """Schema de respuesta de alojamiento."""

    id: UUID
    owner_id: UUID
    owner: Optional[OwnerSummary] = None
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: float
    location: dict
    contact: dict
    capacity: dict
    amenities: List[str] = []
    payment_methods: List[str] = []
    images: List[str] = []
    rating_average: Optional[float] = None
    rating_count: int = 0
    status: ListingStatus
    active: bool
    last_modification: Optional[ModificationStamp] = None

    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class HotelResponse(ListingResponse):
    """Schema de respuesta de hotel."""
    stars: Optional[int] = None


class CabinResponse(ListingResponse):
    """Schema de respuesta de cabaña."""
    pass


class RentalResponse(ListingResponse):
    """Schema de respuesta de renta."""
    min_nights: int = 1


class ToggleStatusRequest(BaseModel):
    """Motivo opcional del cambio de estado."""

    reason: Optional[str] = Field(None, max_length=500)


class SetMainImageRequest(BaseModel):
    """Índice de la imagen que pasa a ser principal."""

    image_index: int


class StatusEventResponse(BaseModel):
    """Evento del historial de estado."""

    from_status: Optional[ListingStatus] = None
    to_status: ListingStatus
    actor_id: Optional[UUID] = None
    action: str
    reason: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
