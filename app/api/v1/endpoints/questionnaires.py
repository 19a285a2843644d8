"""
Endpoints de cuestionarios de visitantes y reportes agregados.
"""
import csv
import io
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import StreamingResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_user, get_current_superadmin_user
from app.core.exceptions import ValidationException
from app.models.listing import ListingType
from app.models.user import User
from app.schemas.common import success
from app.schemas.questionnaire import (
    DateWindow,
    QuestionnaireCreate,
    QuestionnaireResponse,
    QuestionnaireUpdate,
)
from app.services.questionnaire_service import questionnaire_service

router = APIRouter()


def _window(date_from: Optional[date], date_to: Optional[date]) -> DateWindow:
    try:
        return DateWindow(date_from=date_from, date_to=date_to)
    except ValidationError:
        raise ValidationException("date_from debe ser anterior o igual a date_to")


def get_window(
    date_from: Optional[date] = Query(None, description="Fecha de visita inicial (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="Fecha de visita final (YYYY-MM-DD)"),
) -> DateWindow:
    """Ventana de fechas desde los parámetros de consulta."""
    return _window(date_from, date_to)


def _serialize(item) -> dict:
    return QuestionnaireResponse.model_validate(item).model_dump(mode="json")


# ================================================================
# CUESTIONARIOS
# ================================================================

@router.post("", status_code=status.HTTP_201_CREATED)
def submit_questionnaire(
    questionnaire_in: QuestionnaireCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Registrar un cuestionario de visita.

    El alojamiento debe existir y estar activo.
    """
    item = questionnaire_service.submit(db, questionnaire_in, current_user)
    return success(_serialize(item), message="Cuestionario registrado exitosamente")


@router.get("/mine")
def list_my_questionnaires(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Cuestionarios registrados por el usuario actual."""
    items = questionnaire_service.list_mine(db, current_user)
    return success([_serialize(item) for item in items], results=len(items))


@router.get("/listing/{listing_type}/{listing_id}")
def list_listing_questionnaires(
    listing_type: ListingType,
    listing_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Cuestionarios de un alojamiento.

    Solo el propietario o un super administrador.
    """
    items = questionnaire_service.list_for_listing(db, listing_type, listing_id, current_user)
    return success([_serialize(item) for item in items], results=len(items))


@router.patch("/{questionnaire_id}")
def update_questionnaire(
    questionnaire_id: UUID,
    questionnaire_update: QuestionnaireUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Actualizar un cuestionario (autor o super admin)."""
    item = questionnaire_service.update(db, questionnaire_id, questionnaire_update, current_user)
    return success(_serialize(item), message="Cuestionario actualizado exitosamente")


@router.delete("/{questionnaire_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_questionnaire(
    questionnaire_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Eliminar un cuestionario (autor o super admin)."""
    questionnaire_service.delete(db, questionnaire_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ================================================================
# REPORTES (solo super administradores)
# ================================================================

@router.get("/reports/summary")
def get_summary(
    window: DateWindow = Depends(get_window),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_superadmin_user),
):
    """Estadísticas generales de los cuestionarios en la ventana."""
    return success(questionnaire_service.summary(db, current_user, window).model_dump(mode="json"))


@router.get("/reports/by-type/{listing_type}")
def get_stats_by_type(
    listing_type: ListingType,
    window: DateWindow = Depends(get_window),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_superadmin_user),
):
    """Estadísticas de un tipo de alojamiento."""
    stats = questionnaire_service.stats_by_type(db, current_user, listing_type, window)
    return success(stats.model_dump(mode="json"))


@router.get("/reports/weekly")
def get_weekly_report(
    window: DateWindow = Depends(get_window),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_superadmin_user),
):
    """Reporte semanal por alojamiento."""
    report = questionnaire_service.weekly_report(db, current_user, window)
    return success([row.model_dump(mode="json") for row in report], results=len(report))


@router.get("/reports/monthly-trends")
def get_monthly_trends(
    window: DateWindow = Depends(get_window),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_superadmin_user),
):
    """Tendencia mensual de visitas y calificaciones."""
    trends = questionnaire_service.monthly_trends(db, current_user, window)
    return success([row.model_dump(mode="json") for row in trends], results=len(trends))


@router.get("/reports/top")
def get_top_listings(
    limit: int = Query(10, ge=1, le=100, description="Cantidad máxima de resultados"),
    min_questionnaires: int = Query(1, ge=1, description="Cuestionarios mínimos por alojamiento"),
    window: DateWindow = Depends(get_window),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_superadmin_user),
):
    """Alojamientos mejor calificados."""
    top = questionnaire_service.top_listings(
        db, current_user, window, limit=limit, min_questionnaires=min_questionnaires
    )
    return success([row.model_dump(mode="json") for row in top], results=len(top))


@router.get("/reports/origin")
def get_origin_analysis(
    window: DateWindow = Depends(get_window),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_superadmin_user),
):
    """Procedencia de los visitantes."""
    return success(questionnaire_service.origin_analysis(db, current_user, window).model_dump(mode="json"))


@router.get("/reports/busiest-dates")
def get_busiest_dates(
    limit: int = Query(10, ge=1, le=100),
    window: DateWindow = Depends(get_window),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_superadmin_user),
):
    """Fechas con más visitas y distribución por día de la semana."""
    busy = questionnaire_service.busiest_dates(db, current_user, window, limit=limit)
    return success(busy.model_dump(mode="json"))


@router.get("/reports/compare")
def compare_periods(
    current_from: date = Query(..., description="Inicio del periodo actual"),
    current_to: date = Query(..., description="Fin del periodo actual"),
    previous_from: date = Query(..., description="Inicio del periodo anterior"),
    previous_to: date = Query(..., description="Fin del periodo anterior"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_superadmin_user),
):
    """Comparar dos periodos de visitas."""
    comparison = questionnaire_service.compare_periods(
        db,
        current_user,
        _window(current_from, current_to),
        _window(previous_from, previous_to),
    )
    return success(comparison.model_dump(mode="json"))


@router.get("/reports/export")
def export_questionnaires(
    window: DateWindow = Depends(get_window),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_superadmin_user),
):
    """Exportar los cuestionarios de la ventana a CSV."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerows(questionnaire_service.export_rows(db, current_user, window))

    return StreamingResponse(
        io.BytesIO(output.getvalue().encode('utf-8-sig')),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=cuestionarios_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"}
    )
