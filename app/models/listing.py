"""
Modelos ORM para Alojamientos (hoteles, cabañas y rentas).

Los tres tipos comparten la misma estructura de registro: propietario
inmutable, campos de contenido, lista ordenada de imágenes (la posición 0
es la imagen principal) y estado activo/inactivo con historial.
"""
from sqlalchemy import (
    Column, String, Integer, Text, DateTime, ForeignKey, Float, JSON, Uuid,
    CheckConstraint, Enum,
)
from sqlalchemy.orm import declared_attr, relationship
from sqlalchemy.sql import func
import enum
import uuid
from app.db.base import Base, SoftDeleteMixin, ListingStatus


class ListingType(str, enum.Enum):
    """Tipos de alojamiento."""
    hotel = "hotel"
    cabin = "cabin"
    rental = "rental"


class ListingMixin(SoftDeleteMixin):
    """Columnas comunes a todos los tipos de alojamiento."""

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    @declared_attr
    def owner_id(cls):
        return Column(Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    @declared_attr
    def owner(cls):
        return relationship("User", lazy="joined")

    name = Column(String(150), nullable=False)
    description = Column(Text)
    category = Column(String(100), index=True)
    price = Column(Float, nullable=False, default=0)

    # Sub-documentos estructurados (se reemplazan completos al actualizar)
    location = Column(JSON, nullable=False, default=dict)
    contact = Column(JSON, nullable=False, default=dict)
    capacity = Column(JSON, nullable=False, default=dict)
    amenities = Column(JSON, nullable=False, default=list)
    payment_methods = Column(JSON, nullable=False, default=list)

    # Referencias de imágenes (URLs); images[0] es la principal
    images = Column(JSON, nullable=False, default=list)

    # Calificación (se recalcula a partir de los cuestionarios)
    rating_average = Column(Float)
    rating_count = Column(Integer, nullable=False, default=0)

    # Sello de auditoría {actor_id, timestamp, action, reason, fields}
    last_modification = Column(JSON)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    # status viene del SoftDeleteMixin

    @property
    def main_image(self):
        """Imagen principal o None si no hay imágenes."""
        return self.images[0] if self.images else None

    def __repr__(self):
        return f"<{type(self).__name__} {self.name} by user {self.owner_id}>"


class Hotel(ListingMixin, Base):
    """Modelo de Hoteles."""

    __tablename__ = "hotels"
    listing_type = ListingType.hotel

    stars = Column(Integer)

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_hotel_price_positive'),
        CheckConstraint('stars IS NULL OR (stars >= 1 AND stars <= 5)', name='check_hotel_stars_range'),
    )


class Cabin(ListingMixin, Base):
    """Modelo de Cabañas."""

    __tablename__ = "cabins"
    listing_type = ListingType.cabin

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_cabin_price_positive'),
    )


class Rental(ListingMixin, Base):
    """Modelo de Rentas de corta estancia (tipo Airbnb)."""

    __tablename__ = "rentals"
    listing_type = ListingType.rental

    min_nights = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_rental_price_positive'),
        CheckConstraint('min_nights >= 1', name='check_rental_min_nights'),
    )


LISTING_MODELS = {
    ListingType.hotel: Hotel,
    ListingType.cabin: Cabin,
    ListingType.rental: Rental,
}


class ListingStatusEvent(Base):
    """Historial de transiciones de estado de un alojamiento."""

    __tablename__ = "listing_status_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    listing_type = Column(
        Enum(ListingType, name="listing_type", native_enum=False, length=20),
        nullable=False,
    )
    listing_id = Column(Uuid, nullable=False, index=True)
    from_status = Column(Enum(ListingStatus, name="listing_status", native_enum=False, length=20))
    to_status = Column(Enum(ListingStatus, name="listing_status", native_enum=False, length=20), nullable=False)
    actor_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"))
    action = Column(String(30), nullable=False)
    reason = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<ListingStatusEvent {self.listing_type} {self.listing_id} {self.from_status} -> {self.to_status}>"
