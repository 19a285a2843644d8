"""
CRUD para alojamientos (un CRUD por tipo, misma implementación).
"""
from typing import List, Optional
from uuid import UUID
from sqlalchemy import update
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.db.base import ListingStatus
from app.models.listing import Hotel, Cabin, Rental, ListingStatusEvent
from app.schemas.listing import ListingFilters


class CRUDListing(CRUDBase):
    """CRUD específico para alojamientos."""

    def _public_order(self):
        """Mejor calificados primero, luego los modificados más recientemente."""
        return [
            self.model.rating_average.desc().nulls_last(),
            self.model.updated_at.desc(),
        ]

    def find_all(self, db: Session) -> List:
        """
        Obtener todos los alojamientos (activos e inactivos).

        Args:
            db: Sesión de base de datos

        Returns:
            Lista de alojamientos
        """
        return self.find(db, order_by=self._public_order())

    def find_public(self, db: Session, filters: Optional[ListingFilters] = None) -> List:
        """
        Obtener alojamientos activos aplicando los filtros públicos.

        Args:
            db: Sesión de base de datos
            filters: Ciudad (subcadena), rango de precio, huéspedes mínimos y categoría

        Returns:
            Lista de alojamientos activos
        """
        criteria = [self.model.status == ListingStatus.active]

        if filters:
            if filters.city:
                criteria.append(
                    self.model.location["city"].as_string().ilike(f"%{filters.city}%")
                )
            if filters.price_min is not None:
                criteria.append(self.model.price >= filters.price_min)
            if filters.price_max is not None:
                criteria.append(self.model.price <= filters.price_max)
            if filters.guests is not None:
                criteria.append(self.model.capacity["guests"].as_integer() >= filters.guests)
            if filters.category:
                criteria.append(self.model.category == filters.category)

        return self.find(db, *criteria, order_by=self._public_order())

    def find_by_owner(self, db: Session, *, owner_id: Optional[UUID] = None) -> List:
        """
        Obtener alojamientos de un propietario (o todos si owner_id es None).

        Args:
            db: Sesión de base de datos
            owner_id: ID del propietario

        Returns:
            Lista de alojamientos, más recientes primero
        """
        criteria = []
        if owner_id is not None:
            criteria.append(self.model.owner_id == owner_id)
        return self.find(db, *criteria, order_by=[self.model.created_at.desc()])

    def add_status_event(
        self,
        db: Session,
        *,
        db_obj,
        from_status: Optional[ListingStatus],
        actor_id: Optional[UUID],
        action: str,
        reason: Optional[str] = None,
    ) -> ListingStatusEvent:
        """
        Registrar una transición de estado en el historial.

        El evento se agrega a la sesión y se confirma con el próximo save().
        """
        event = ListingStatusEvent(
            listing_type=self.model.listing_type,
            listing_id=db_obj.id,
            from_status=from_status,
            to_status=db_obj.status,
            actor_id=actor_id,
            action=action,
            reason=reason,
        )
        db.add(event)
        return event

    def status_history(self, db: Session, *, listing_id: UUID) -> List[ListingStatusEvent]:
        """
        Obtener el historial de estados de un alojamiento.

        Args:
            db: Sesión de base de datos
            listing_id: ID del alojamiento

        Returns:
            Eventos ordenados del más antiguo al más reciente
        """
        return (
            db.query(ListingStatusEvent)
            .filter(
                ListingStatusEvent.listing_type == self.model.listing_type,
                ListingStatusEvent.listing_id == listing_id,
            )
            .order_by(ListingStatusEvent.created_at, ListingStatusEvent.id)
            .all()
        )

    def set_rating(self, db: Session, *, listing_id: UUID, average: Optional[float], count: int) -> None:
        """Guardar la calificación sin registrarla como modificación del alojamiento."""
        db.execute(
            update(self.model)
            .where(self.model.id == listing_id)
            .values(rating_average=average, rating_count=count, updated_at=self.model.updated_at)
            .execution_options(synchronize_session=False)
        )
        db.commit()


# Instancias globales del CRUD
hotel = CRUDListing(Hotel)
cabin = CRUDListing(Cabin)
rental = CRUDListing(Rental)
