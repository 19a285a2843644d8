"""
Servicio de cuestionarios de visitantes.

Registra cuestionarios ligados a un alojamiento (hotel, cabaña o renta),
mantiene la calificación promedio del alojamiento y genera los reportes
agregados para super administradores.
"""
import logging
from collections import Counter, defaultdict
from statistics import mean
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.core.permissions import authorize, is_elevated, require_elevated
from app.crud.listing import CRUDListing, hotel as crud_hotel, cabin as crud_cabin, rental as crud_rental
from app.crud.questionnaire import questionnaire as crud_questionnaire
from app.models.listing import ListingType
from app.models.questionnaire import Questionnaire
from app.models.user import User
from app.schemas.questionnaire import (
    BusyDates,
    DateWindow,
    GroupCount,
    ListingWeekReport,
    MonthlyTrend,
    OriginAnalysis,
    PeriodComparison,
    QuestionnaireCreate,
    QuestionnaireUpdate,
    RatingAverages,
    StatsSummary,
    TopListing,
)
from app.services.activity_log_service import log_activity, ActionTypes, EntityTypes

logger = logging.getLogger(__name__)

LISTING_CRUDS: Dict[ListingType, CRUDListing] = {
    ListingType.hotel: crud_hotel,
    ListingType.cabin: crud_cabin,
    ListingType.rental: crud_rental,
}

WEEKDAYS = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]

UNKNOWN = "Sin especificar"


def _avg(values: Iterable[Optional[int]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    return round(mean(present), 2) if present else None


def _pct_change(current: float, previous: float) -> Optional[float]:
    if not previous:
        return None
    return round((current - previous) * 100 / previous, 2)


def _group(rows: List[Questionnaire], key) -> List[GroupCount]:
    """Agrupar cuestionarios por una clave; mayor cantidad primero."""
    counts: Dict[str, List[int]] = defaultdict(lambda: [0, 0])
    for row in rows:
        name = key(row) or UNKNOWN
        counts[name][0] += 1
        counts[name][1] += row.visitors
    groups = [
        GroupCount(name=name, questionnaires=values[0], visitors=values[1])
        for name, values in counts.items()
    ]
    groups.sort(key=lambda g: (-g.questionnaires, -g.visitors, g.name))
    return groups


class QuestionnaireService:
    """Operaciones sobre cuestionarios y reportes."""

    # ------------------------------------------------------------------
    # Auxiliares
    # ------------------------------------------------------------------

    def _load_listing(self, db: Session, listing_type: ListingType, listing_id: UUID):
        record = LISTING_CRUDS[listing_type].load(db, listing_id)
        if record is None:
            raise NotFoundException("No se encontró el establecimiento")
        return record

    def _refresh_rating(self, db: Session, listing_type: ListingType, listing_id: UUID) -> None:
        """Recalcular la calificación promedio del alojamiento."""
        average, count = crud_questionnaire.rating_stats(
            db, listing_type=listing_type, listing_id=listing_id
        )
        # Sin tocar updated_at
        LISTING_CRUDS[listing_type].set_rating(db, listing_id=listing_id, average=average, count=count)

    def _get_owned(self, db: Session, questionnaire_id: UUID, user: User) -> Questionnaire:
        item = crud_questionnaire.load(db, questionnaire_id)
        if item is None:
            raise NotFoundException("Cuestionario no encontrado")
        if not is_elevated(user) and str(item.user_id) != str(user.id):
            raise ForbiddenException("No tienes permiso para modificar este cuestionario")
        return item

    def _listing_names(self, db: Session, keys: Iterable[Tuple[ListingType, UUID]]) -> Dict[Tuple[ListingType, UUID], str]:
        names = {}
        by_type: Dict[ListingType, set] = defaultdict(set)
        for listing_type, listing_id in keys:
            by_type[listing_type].add(listing_id)
        for listing_type, ids in by_type.items():
            crud_listing = LISTING_CRUDS[listing_type]
            for record in crud_listing.find(db, crud_listing.model.id.in_(ids)):
                names[(listing_type, record.id)] = record.name
        return names

    # ------------------------------------------------------------------
    # Cuestionarios
    # ------------------------------------------------------------------

    def submit(self, db: Session, data: QuestionnaireCreate, user: User) -> Questionnaire:
        """
        Registrar un cuestionario para un alojamiento activo.

        Raises:
            NotFoundException: Si el alojamiento no existe o está inactivo
        """
        listing = self._load_listing(db, data.listing_type, data.listing_id)
        if not listing.active:
            raise NotFoundException("No se encontró el establecimiento")

        item = crud_questionnaire.create(db, obj_in=data, user_id=user.id)
        self._refresh_rating(db, item.listing_type, item.listing_id)

        log_activity(
            db=db,
            action_type=ActionTypes.CREATE_QUESTIONNAIRE,
            user_id=user.id,
            entity_type=EntityTypes.QUESTIONNAIRE,
            entity_id=item.id,
            extra_data={"listing_type": item.listing_type.value, "listing_id": str(item.listing_id)},
        )
        return item

    def list_mine(self, db: Session, user: User) -> List[Questionnaire]:
        """Cuestionarios registrados por el usuario."""
        return crud_questionnaire.get_by_user(db, user_id=user.id)

    def list_for_listing(
        self, db: Session, listing_type: ListingType, listing_id: UUID, user: User
    ) -> List[Questionnaire]:
        """
        Cuestionarios de un alojamiento (propietario o super admin).

        Raises:
            NotFoundException: Si el alojamiento no existe
            ForbiddenException: Si no es propietario ni super admin
        """
        listing = self._load_listing(db, listing_type, listing_id)
        authorize(listing, user, "No tienes permiso para ver los cuestionarios de este establecimiento")
        return crud_questionnaire.get_by_listing(db, listing_type=listing_type, listing_id=listing_id)

    def update(self, db: Session, questionnaire_id: UUID, patch: QuestionnaireUpdate, user: User) -> Questionnaire:
        """
        Actualizar un cuestionario (autor o super admin).

        Raises:
            NotFoundException: Si no existe
            ForbiddenException: Si no es autor ni super admin
            ValidationException: Si no se envió ningún campo
        """
        item = self._get_owned(db, questionnaire_id, user)
        update_data = patch.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationException("No se enviaron campos para actualizar")
        if any(update_data.get(field) is None for field in ("visit_date", "rating", "nights", "visitors") if field in update_data):
            raise ValidationException("Los campos obligatorios no pueden ser nulos")

        item = crud_questionnaire.update(db, db_obj=item, obj_in=update_data)
        self._refresh_rating(db, item.listing_type, item.listing_id)

        log_activity(
            db=db,
            action_type=ActionTypes.UPDATE_QUESTIONNAIRE,
            user_id=user.id,
            entity_type=EntityTypes.QUESTIONNAIRE,
            entity_id=item.id,
            extra_data={"fields": sorted(update_data)},
        )
        return item

    def delete(self, db: Session, questionnaire_id: UUID, user: User) -> None:
        """
        Eliminar un cuestionario (autor o super admin).

        Raises:
            NotFoundException: Si no existe
            ForbiddenException: Si no es autor ni super admin
        """
        item = self._get_owned(db, questionnaire_id, user)
        listing_type, listing_id, item_id = item.listing_type, item.listing_id, item.id
        crud_questionnaire.remove(db, db_obj=item)
        self._refresh_rating(db, listing_type, listing_id)

        log_activity(
            db=db,
            action_type=ActionTypes.DELETE_QUESTIONNAIRE,
            user_id=user.id,
            entity_type=EntityTypes.QUESTIONNAIRE,
            entity_id=item_id,
            extra_data={"listing_type": listing_type.value, "listing_id": str(listing_id)},
        )

    # ------------------------------------------------------------------
    # Reportes (solo super administradores)
    # ------------------------------------------------------------------

    def _rows(
        self, db: Session, user: User, window: DateWindow, listing_type: Optional[ListingType] = None
    ) -> List[Questionnaire]:
        require_elevated(user, "Solo los super administradores pueden consultar reportes")
        return crud_questionnaire.get_in_window(
            db, date_from=window.date_from, date_to=window.date_to, listing_type=listing_type
        )

    def _summarize(self, rows: List[Questionnaire]) -> StatsSummary:
        distribution = Counter(str(row.rating) for row in rows)
        return StatsSummary(
            total_questionnaires=len(rows),
            total_visitors=sum(row.visitors for row in rows),
            total_nights=sum(row.nights for row in rows),
            average_visitors=_avg(row.visitors for row in rows),
            average_nights=_avg(row.nights for row in rows),
            averages=RatingAverages(
                rating=_avg(row.rating for row in rows),
                service=_avg(row.service_rating for row in rows),
                cleanliness=_avg(row.cleanliness_rating for row in rows),
                value=_avg(row.value_rating for row in rows),
            ),
            rating_distribution={str(stars): distribution.get(str(stars), 0) for stars in range(1, 6)},
            by_listing_type={
                listing_type.value: sum(1 for row in rows if row.listing_type == listing_type)
                for listing_type in ListingType
            },
        )

    def summary(self, db: Session, user: User, window: DateWindow) -> StatsSummary:
        """Conteos y promedios generales."""
        return self._summarize(self._rows(db, user, window))

    def stats_by_type(self, db: Session, user: User, listing_type: ListingType, window: DateWindow) -> StatsSummary:
        """Conteos y promedios de un tipo de alojamiento."""
        return self._summarize(self._rows(db, user, window, listing_type))

    def weekly_report(self, db: Session, user: User, window: DateWindow) -> List[ListingWeekReport]:
        """Cuestionarios por alojamiento y semana ISO, semanas recientes primero."""
        rows = self._rows(db, user, window)
        groups: Dict[Tuple[ListingType, UUID, str], List[Questionnaire]] = defaultdict(list)
        for row in rows:
            year, week, _ = row.visit_date.isocalendar()
            groups[(row.listing_type, row.listing_id, f"{year}-W{week:02d}")].append(row)

        names = self._listing_names(db, {(key[0], key[1]) for key in groups})
        report = [
            ListingWeekReport(
                listing_type=listing_type,
                listing_id=listing_id,
                listing_name=names.get((listing_type, listing_id)),
                week=week,
                questionnaires=len(items),
                visitors=sum(item.visitors for item in items),
                nights=sum(item.nights for item in items),
                average_rating=_avg(item.rating for item in items),
            )
            for (listing_type, listing_id, week), items in groups.items()
        ]
        report.sort(key=lambda r: (r.week, r.questionnaires), reverse=True)
        return report

    def monthly_trends(self, db: Session, user: User, window: DateWindow) -> List[MonthlyTrend]:
        """Cuestionarios por mes de visita en orden cronológico."""
        rows = self._rows(db, user, window)
        groups: Dict[str, List[Questionnaire]] = defaultdict(list)
        for row in rows:
            groups[row.visit_date.strftime("%Y-%m")].append(row)
        return [
            MonthlyTrend(
                month=month,
                questionnaires=len(items),
                visitors=sum(item.visitors for item in items),
                average_rating=_avg(item.rating for item in items),
            )
            for month, items in sorted(groups.items())
        ]

    def top_listings(
        self, db: Session, user: User, window: DateWindow, limit: int = 10, min_questionnaires: int = 1
    ) -> List[TopListing]:
        """Alojamientos con mejor calificación promedio."""
        rows = self._rows(db, user, window)
        groups: Dict[Tuple[ListingType, UUID], List[Questionnaire]] = defaultdict(list)
        for row in rows:
            groups[(row.listing_type, row.listing_id)].append(row)

        names = self._listing_names(db, groups.keys())
        top = [
            TopListing(
                listing_type=listing_type,
                listing_id=listing_id,
                listing_name=names.get((listing_type, listing_id)),
                questionnaires=len(items),
                visitors=sum(item.visitors for item in items),
                average_rating=_avg(item.rating for item in items),
            )
            for (listing_type, listing_id), items in groups.items()
            if len(items) >= min_questionnaires
        ]
        top.sort(key=lambda t: (t.average_rating, t.questionnaires), reverse=True)
        return top[:limit]

    def origin_analysis(self, db: Session, user: User, window: DateWindow) -> OriginAnalysis:
        """Procedencia de los visitantes por país, estado y ciudad."""
        rows = self._rows(db, user, window)
        return OriginAnalysis(
            by_country=_group(rows, lambda row: row.origin_country),
            by_state=_group(rows, lambda row: row.origin_state),
            by_city=_group(rows, lambda row: row.origin_city),
        )

    def busiest_dates(self, db: Session, user: User, window: DateWindow, limit: int = 10) -> BusyDates:
        """Fechas de visita con más cuestionarios y distribución por día de la semana."""
        rows = self._rows(db, user, window)
        weekdays = Counter(WEEKDAYS[row.visit_date.weekday()] for row in rows)
        return BusyDates(
            top_dates=_group(rows, lambda row: row.visit_date.isoformat())[:limit],
            by_weekday={day: weekdays.get(day, 0) for day in WEEKDAYS},
        )

    def compare_periods(
        self, db: Session, user: User, current: DateWindow, previous: DateWindow
    ) -> PeriodComparison:
        """Comparar dos ventanas de fechas."""
        current_stats = self._summarize(self._rows(db, user, current))
        previous_stats = self._summarize(self._rows(db, user, previous))

        rating_change = None
        if current_stats.averages.rating is not None and previous_stats.averages.rating is not None:
            rating_change = round(current_stats.averages.rating - previous_stats.averages.rating, 2)

        return PeriodComparison(
            current=current_stats,
            previous=previous_stats,
            questionnaires_change_pct=_pct_change(
                current_stats.total_questionnaires, previous_stats.total_questionnaires
            ),
            visitors_change_pct=_pct_change(current_stats.total_visitors, previous_stats.total_visitors),
            rating_change=rating_change,
        )

    def export_rows(self, db: Session, user: User, window: DateWindow) -> List[list]:
        """Filas para exportar a CSV (encabezado incluido)."""
        rows = self._rows(db, user, window)
        names = self._listing_names(db, {(row.listing_type, row.listing_id) for row in rows})
        table = [[
            "ID", "Tipo", "Establecimiento", "Fecha Visita", "Noches", "Visitantes",
            "Ciudad Origen", "Estado Origen", "Pais Origen", "Motivo", "Calificacion",
            "Servicio", "Limpieza", "Precio/Calidad", "Comentarios", "Fecha Registro",
        ]]
        for row in rows:
            table.append([
                str(row.id), row.listing_type.value, names.get((row.listing_type, row.listing_id), ""),
                row.visit_date.isoformat(), row.nights, row.visitors,
                row.origin_city or "", row.origin_state or "", row.origin_country or "",
                row.visit_reason or "", row.rating,
                row.service_rating or "", row.cleanliness_rating or "", row.value_rating or "",
                row.comments or "", row.created_at.isoformat() if row.created_at else "",
            ])
        return table


# Instancia global del servicio
questionnaire_service = QuestionnaireService()
