"""
Modelo ORM para Cuestionarios de visitantes.
"""
from sqlalchemy import Column, String, Integer, Text, Date, DateTime, ForeignKey, Enum, Uuid, CheckConstraint
from sqlalchemy.sql import func
import uuid
from app.db.base import Base
from app.models.listing import ListingType


class Questionnaire(Base):
    """Cuestionario de un visitante sobre un alojamiento (de cualquier tipo)."""

    __tablename__ = "questionnaires"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), index=True)
    listing_type = Column(
        Enum(ListingType, name="listing_type", native_enum=False, length=20),
        nullable=False,
        index=True,
    )
    listing_id = Column(Uuid, nullable=False, index=True)

    visit_date = Column(Date, nullable=False, index=True)
    nights = Column(Integer, nullable=False, default=0)
    visitors = Column(Integer, nullable=False, default=1)

    # Procedencia del visitante
    origin_city = Column(String(120))
    origin_state = Column(String(120))
    origin_country = Column(String(120))
    visit_reason = Column(String(120))

    # Calificaciones 1-5
    rating = Column(Integer, nullable=False)
    service_rating = Column(Integer)
    cleanliness_rating = Column(Integer)
    value_rating = Column(Integer)
    comments = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('rating >= 1 AND rating <= 5', name='check_questionnaire_rating_range'),
        CheckConstraint('visitors >= 1', name='check_questionnaire_visitors_positive'),
        CheckConstraint('nights >= 0', name='check_questionnaire_nights_positive'),
    )

    def __repr__(self):
        return f"<Questionnaire {self.listing_type} {self.listing_id} rating {self.rating}>"
