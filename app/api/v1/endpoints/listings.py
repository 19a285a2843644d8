"""
Endpoints comunes de alojamientos.

build_listing_router() arma el mismo conjunto de rutas para hoteles,
cabañas y rentas a partir del servicio y los schemas de cada tipo.
"""
from typing import Dict, List, Optional, Type
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, Request, Response, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_user, get_current_admin_user, get_optional_user
from app.models.user import User
from app.schemas.common import success
from app.schemas.listing import (
    ListingFilters,
    SetMainImageRequest,
    StatusEventResponse,
    ToggleStatusRequest,
)
from app.services.activity_log_service import extract_client_info
from app.services.listing_service import ListingService


def build_listing_router(
    service: ListingService,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    response_schema: Type[BaseModel],
    messages: Dict[str, str],
) -> APIRouter:
    """
    Construir el router de un tipo de alojamiento.

    Args:
        service: Servicio del tipo de alojamiento
        create_schema: Schema de creación
        update_schema: Schema de actualización
        response_schema: Schema de respuesta
        messages: Mensajes de éxito (created, updated, activated, deactivated)
    """
    router = APIRouter()

    def serialize(record) -> dict:
        return response_schema.model_validate(record).model_dump(mode="json")

    # ================================================================
    # RUTAS PÚBLICAS
    # ================================================================

    @router.get("")
    def list_listings(
        city: Optional[str] = Query(None, description="Ciudad (coincidencia parcial)"),
        price_min: Optional[float] = Query(None, ge=0, description="Precio mínimo"),
        price_max: Optional[float] = Query(None, ge=0, description="Precio máximo"),
        guests: Optional[int] = Query(None, ge=1, description="Huéspedes mínimos"),
        category: Optional[str] = Query(None, description="Categoría / tipo de propiedad"),
        db: Session = Depends(get_db),
        current_user: Optional[User] = Depends(get_optional_user),
    ):
        """
        Listado de alojamientos.

        Público: solo activos, con filtros.
        Super admin: todos (activos e inactivos), sin filtros.
        Orden: mejor calificación primero, luego última modificación.
        """
        filters = ListingFilters(
            city=city, price_min=price_min, price_max=price_max, guests=guests, category=category
        )
        records = service.list(db, filters, current_user)
        return success([serialize(record) for record in records], results=len(records))

    @router.get("/mine")
    def list_my_listings(
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_admin_user),
    ):
        """
        Alojamientos del administrador actual (super admin: todos).

        Requiere rol de administrador.
        """
        records = service.list_mine(db, current_user)
        return success([serialize(record) for record in records], results=len(records))

    @router.get("/{listing_id}")
    def get_listing(listing_id: UUID, db: Session = Depends(get_db)):
        """
        Detalle de un alojamiento.

        No requiere autenticación.
        """
        return success(serialize(service.get(db, listing_id)))

    @router.get("/{listing_id}/main-image")
    def get_main_image(listing_id: UUID, db: Session = Depends(get_db)):
        """
        Imagen principal de un alojamiento activo.

        No requiere autenticación.
        """
        return success(service.get_main_image(db, listing_id))

    # ================================================================
    # RUTAS DE ADMINISTRACIÓN
    # ================================================================

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create_listing(
        listing_in: create_schema,
        request: Request,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_admin_user),
    ):
        """
        Registrar un alojamiento.

        Requiere rol de administrador; el usuario actual queda como propietario.
        """
        record = service.create(db, listing_in, current_user, extract_client_info(request))
        return success(serialize(record), message=messages["created"])

    @router.patch("/{listing_id}")
    def update_listing(
        listing_id: UUID,
        listing_update: update_schema,
        request: Request,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        """
        Actualizar un alojamiento.

        Solo el propietario o un super administrador.
        """
        record = service.update(db, listing_id, listing_update, current_user, extract_client_info(request))
        return success(serialize(record), message=messages["updated"])

    @router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_listing(
        listing_id: UUID,
        request: Request,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        """
        Eliminar un alojamiento (soft delete).

        Solo el propietario o un super administrador. El registro no se
        elimina físicamente: queda inactivo.
        """
        service.soft_delete(db, listing_id, current_user, extract_client_info(request))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.patch("/{listing_id}/toggle-status")
    def toggle_listing_status(
        listing_id: UUID,
        request: Request,
        toggle: Optional[ToggleStatusRequest] = None,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        """
        Activar o bloquear un alojamiento.

        Solo super administradores (ser propietario no es suficiente).
        """
        reason = toggle.reason if toggle else None
        record = service.toggle_active(db, listing_id, current_user, reason, extract_client_info(request))
        message = messages["activated"] if record.active else messages["deactivated"]
        return success(
            {"id": str(record.id), "name": record.name, "active": record.active, "status": record.status.value},
            message=message,
        )

    @router.get("/{listing_id}/status-history")
    def get_status_history(
        listing_id: UUID,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        """Historial de cambios de estado (propietario o super admin)."""
        events = service.status_history(db, listing_id, current_user)
        return success(
            [StatusEventResponse.model_validate(event).model_dump(mode="json") for event in events],
            results=len(events),
        )

    # ================================================================
    # GESTIÓN DE IMÁGENES
    # ================================================================

    @router.get("/{listing_id}/images")
    def get_images(
        listing_id: UUID,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_admin_user),
    ):
        """Imágenes del alojamiento en orden (la primera es la principal)."""
        images = service.get_images(db, listing_id, current_user)
        return success(images, message="Imágenes obtenidas correctamente", results=len(images))

    @router.post("/{listing_id}/images/upload")
    async def upload_images(
        listing_id: UUID,
        request: Request,
        images: List[UploadFile] = File(...),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_admin_user),
    ):
        """
        Subir imágenes al alojamiento.

        Formatos permitidos: JPG, JPEG, PNG, GIF, WEBP
        Tamaño máximo por archivo: 5MB, hasta 10 archivos por vez.
        """
        result = await service.upload_images(db, listing_id, images, current_user, extract_client_info(request))
        return success(result, message=f"{result['added']} imagen(es) subida(s) exitosamente")

    @router.delete("/{listing_id}/images/{image_index}")
    async def delete_image(
        listing_id: UUID,
        image_index: int,
        request: Request,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_admin_user),
    ):
        """
        Eliminar una imagen por posición.

        Las imágenes siguientes se recorren una posición.
        """
        result = await service.remove_image(db, listing_id, image_index, current_user, extract_client_info(request))
        return success(result, message="Imagen eliminada exitosamente")

    @router.patch("/{listing_id}/images/set-main")
    def set_main_image(
        listing_id: UUID,
        body: SetMainImageRequest,
        request: Request,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_admin_user),
    ):
        """Establecer una imagen como principal (posición 0)."""
        result, changed = service.set_primary_image(
            db, listing_id, body.image_index, current_user, extract_client_info(request)
        )
        message = "Imagen principal actualizada exitosamente" if changed else "Esta imagen ya es la principal"
        return success(result, message=message)

    return router
