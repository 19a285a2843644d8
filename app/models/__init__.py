"""
Módulo de modelos ORM.
Importa todos los modelos para que SQLAlchemy los reconozca.
"""
from app.db.base import Base

# Usuarios
from app.models.user import User

# Alojamientos
from app.models.listing import Hotel, Cabin, Rental, ListingStatusEvent

# Cuestionarios
from app.models.questionnaire import Questionnaire

# Auditoría (Log de actividades)
from app.models.activity_log import ActivityLog

__all__ = [
    "Base",
    # Usuarios
    "User",
    # Alojamientos
    "Hotel",
    "Cabin",
    "Rental",
    "ListingStatusEvent",
    # Cuestionarios
    "Questionnaire",
    # Auditoría (Log de actividades)
    "ActivityLog",
]
