"""
Servicio de registro de actividad (auditoría).
"""
from sqlalchemy.orm import Session
from uuid import UUID
from typing import Optional
from fastapi import Request

from app.models.activity_log import ActivityLog


def log_activity(
    db: Session,
    action_type: str,
    user_id: Optional[UUID] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[UUID] = None,
    extra_data: Optional[dict] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> ActivityLog:
    """
    Registra una actividad en el log de auditoría.

    Args:
        db: Sesión de base de datos
        action_type: Tipo de acción (ej: 'CREATE_LISTING', 'TOGGLE_LISTING_STATUS')
        user_id: ID del usuario que realiza la acción
        entity_type: Tipo de entidad afectada (ej: 'hotel', 'cabin', 'questionnaire')
        entity_id: ID de la entidad afectada
        extra_data: Datos adicionales en formato JSON
        ip_address: Dirección IP del cliente
        user_agent: User-Agent del navegador/cliente

    Returns:
        ActivityLog: El registro de actividad creado
    """
    activity = ActivityLog(
        user_id=user_id,
        action_type=action_type,
        entity_type=entity_type,
        entity_id=entity_id,
        extra_data=extra_data,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.add(activity)
    db.commit()
    db.refresh(activity)
    return activity


def extract_client_info(request: Optional[Request]) -> tuple[Optional[str], Optional[str]]:
    """
    Extrae información del cliente desde la request.

    Args:
        request: Request de FastAPI

    Returns:
        Tupla con (ip_address, user_agent)
    """
    ip_address = None
    user_agent = None
    if request:
        # Verificar headers de proxy primero
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # Tomar la primera IP (cliente original)
            ip_address = forwarded_for.split(",")[0].strip()
        else:
            ip_address = request.client.host if request.client else None

        user_agent = request.headers.get("User-Agent")

    return ip_address, user_agent


# Constantes de tipos de acción para consistencia
class ActionTypes:
    """Tipos de acción para el log de actividad."""

    # Alojamientos
    CREATE_LISTING = "CREATE_LISTING"
    UPDATE_LISTING = "UPDATE_LISTING"
    DELETE_LISTING = "DELETE_LISTING"
    TOGGLE_LISTING_STATUS = "TOGGLE_LISTING_STATUS"

    # Imágenes
    UPLOAD_IMAGES = "UPLOAD_IMAGES"
    DELETE_IMAGE = "DELETE_IMAGE"
    SET_MAIN_IMAGE = "SET_MAIN_IMAGE"

    # Cuestionarios
    CREATE_QUESTIONNAIRE = "CREATE_QUESTIONNAIRE"
    UPDATE_QUESTIONNAIRE = "UPDATE_QUESTIONNAIRE"
    DELETE_QUESTIONNAIRE = "DELETE_QUESTIONNAIRE"


class EntityTypes:
    """Tipos de entidad para el log de actividad."""
    HOTEL = "hotel"
    CABIN = "cabin"
    RENTAL = "rental"
    QUESTIONNAIRE = "questionnaire"
