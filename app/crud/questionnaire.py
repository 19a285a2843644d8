"""
CRUD para cuestionarios de visitantes.
"""
from datetime import date
from typing import List, Optional
from uuid import UUID
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.listing import ListingType
from app.models.questionnaire import Questionnaire
from app.schemas.questionnaire import QuestionnaireCreate, QuestionnaireUpdate


class CRUDQuestionnaire(CRUDBase[Questionnaire, QuestionnaireCreate, QuestionnaireUpdate]):
    """CRUD específico para cuestionarios."""

    def get_by_user(self, db: Session, *, user_id: UUID) -> List[Questionnaire]:
        """Cuestionarios de un usuario, más recientes primero."""
        return self.find(
            db,
            Questionnaire.user_id == user_id,
            order_by=[Questionnaire.created_at.desc()],
        )

    def get_by_listing(
        self, db: Session, *, listing_type: ListingType, listing_id: UUID
    ) -> List[Questionnaire]:
        """Cuestionarios de un alojamiento, más recientes primero."""
        return self.find(
            db,
            Questionnaire.listing_type == listing_type,
            Questionnaire.listing_id == listing_id,
            order_by=[Questionnaire.created_at.desc()],
        )

    def get_in_window(
        self,
        db: Session,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        listing_type: Optional[ListingType] = None,
    ) -> List[Questionnaire]:
        """
        Cuestionarios con fecha de visita dentro de la ventana (inclusive).

        Args:
            db: Sesión de base de datos
            date_from: Fecha inicial
            date_to: Fecha final
            listing_type: Filtrar por tipo de alojamiento

        Returns:
            Lista de cuestionarios ordenados por fecha de visita
        """
        criteria = []
        if date_from:
            criteria.append(Questionnaire.visit_date >= date_from)
        if date_to:
            criteria.append(Questionnaire.visit_date <= date_to)
        if listing_type:
            criteria.append(Questionnaire.listing_type == listing_type)
        return self.find(db, *criteria, order_by=[Questionnaire.visit_date])

    def rating_stats(
        self, db: Session, *, listing_type: ListingType, listing_id: UUID
    ) -> tuple[Optional[float], int]:
        """
        Promedio y cantidad de calificaciones de un alojamiento.

        Returns:
            (promedio o None, cantidad)
        """
        average, count = (
            db.query(func.avg(Questionnaire.rating), func.count(Questionnaire.id))
            .filter(
                Questionnaire.listing_type == listing_type,
                Questionnaire.listing_id == listing_id,
            )
            .one()
        )
        return (round(float(average), 2) if average is not None else None), count

    def remove(self, db: Session, *, db_obj: Questionnaire) -> None:
        """Eliminar un cuestionario."""
        db.delete(db_obj)
        db.commit()


# Instancia global del CRUD
questionnaire = CRUDQuestionnaire(Questionnaire)
