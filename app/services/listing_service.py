"""
Servicio de alojamientos.

Una sola implementación para hoteles, cabañas y rentas: cada instancia
recibe el CRUD de su modelo, la carpeta de imágenes y sus mensajes.
Orquesta carga del registro, verificación de propiedad, cambios de campos
o de imágenes y persistencia.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.exceptions import (
    ExternalServiceException,
    NotFoundException,
    ValidationException,
)
from app.core.permissions import authorize, is_elevated, require_admin, require_elevated
from app.crud.listing import CRUDListing, hotel as crud_hotel, cabin as crud_cabin, rental as crud_rental
from app.db.base import ListingStatus
from app.models.user import User
from app.schemas.listing import ListingBase, ListingFilters, ListingUpdate
from app.services import image_list
from app.services.activity_log_service import log_activity, ActionTypes, EntityTypes
from app.services.storage_service import storage_service, StorageFolder

logger = logging.getLogger(__name__)

DEFAULT_TOGGLE_REASON = "Cambio de estado por super administrador"

ClientInfo = Tuple[Optional[str], Optional[str]]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _stamp(user: User, action: str, reason: Optional[str] = None, fields: Optional[List[str]] = None) -> dict:
    """Sello de auditoría para last_modification."""
    return {
        "actor_id": str(user.id),
        "timestamp": _now().isoformat(),
        "action": action,
        "reason": reason,
        "fields": fields,
    }


class ListingService:
    """Operaciones de alojamientos parametrizadas por tipo."""

    def __init__(
        self,
        crud: CRUDListing,
        folder: StorageFolder,
        entity_type: str,
        not_found_message: str,
    ):
        self.crud = crud
        self.folder = folder
        self.entity_type = entity_type
        self.not_found_message = not_found_message

    # ------------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------------

    def list(self, db: Session, filters: Optional[ListingFilters], user: Optional[User]) -> list:
        """
        Listado de alojamientos.

        Los super administradores ven todo (activos e inactivos) y los
        filtros se ignoran; el resto solo ve activos con filtros aplicados.
        """
        if is_elevated(user):
            return self.crud.find_all(db)
        return self.crud.find_public(db, filters)

    def get(self, db: Session, listing_id: UUID):
        """
        Obtener un alojamiento por ID (público).

        Raises:
            NotFoundException: Si no existe
        """
        record = self.crud.load(db, listing_id)
        if record is None:
            raise NotFoundException(self.not_found_message)
        return record

    def list_mine(self, db: Session, user: User) -> list:
        """
        Alojamientos del usuario, más recientes primero.
        Los super administradores reciben todos los alojamientos.
        """
        require_admin(user)
        if is_elevated(user):
            return self.crud.find_by_owner(db)
        return self.crud.find_by_owner(db, owner_id=user.id)

    def status_history(self, db: Session, listing_id: UUID, user: User) -> list:
        """Historial de cambios de estado (propietario o super admin)."""
        record = self.get(db, listing_id)
        authorize(record, user, "No tienes permiso para ver este alojamiento")
        return self.crud.status_history(db, listing_id=record.id)

    # ------------------------------------------------------------------
    # Mutaciones
    # ------------------------------------------------------------------

    def create(self, db: Session, data: ListingBase, user: User, client_info: ClientInfo = (None, None)):
        """
        Crear alojamiento con el usuario actual como propietario.

        Raises:
            ForbiddenException: Si el usuario no es administrador
        """
        require_admin(user, "Solo los administradores pueden registrar alojamientos")

        record = self.crud.create(db, obj_in=data, owner_id=user.id, status=ListingStatus.active)
        self.crud.add_status_event(
            db, db_obj=record, from_status=None, actor_id=user.id, action="created"
        )
        db.commit()

        log_activity(
            db=db,
            action_type=ActionTypes.CREATE_LISTING,
            user_id=user.id,
            entity_type=self.entity_type,
            entity_id=record.id,
            extra_data={"name": record.name},
            ip_address=client_info[0],
            user_agent=client_info[1],
        )
        return record

    def update(
        self,
        db: Session,
        listing_id: UUID,
        patch: ListingUpdate,
        user: User,
        client_info: ClientInfo = (None, None),
    ):
        """
        Actualizar campos de un alojamiento.

        Los sub-documentos presentes en el patch reemplazan a los actuales.

        Raises:
            NotFoundException: Si no existe
            ForbiddenException: Si el usuario no es propietario ni super admin
            ValidationException: Si no se envió ningún campo
        """
        record = self.get(db, listing_id)
        authorize(record, user, "No tienes permiso para actualizar este alojamiento")

        # Solo campos enviados; los sub-documentos se guardan con su forma completa
        update_data = patch.model_dump(include=patch.model_fields_set)
        if not update_data:
            raise ValidationException("No se enviaron campos para actualizar")

        fields = sorted(update_data)
        update_data["last_modification"] = _stamp(user, "updated", fields=fields)
        updated = self.crud.update(db, db_obj=record, obj_in=update_data)

        logger.info(f"{self.entity_type} {updated.id} actualizado por {user.id}: {fields}")
        log_activity(
            db=db,
            action_type=ActionTypes.UPDATE_LISTING,
            user_id=user.id,
            entity_type=self.entity_type,
            entity_id=updated.id,
            extra_data={"fields": fields},
            ip_address=client_info[0],
            user_agent=client_info[1],
        )
        return updated

    def soft_delete(self, db: Session, listing_id: UUID, user: User, client_info: ClientInfo = (None, None)) -> None:
        """
        Marcar un alojamiento como inactivo. Nunca se elimina físicamente.

        Raises:
            NotFoundException: Si no existe
            ForbiddenException: Si el usuario no es propietario ni super admin
        """
        record = self.get(db, listing_id)
        authorize(record, user, "No tienes permiso para eliminar este alojamiento")

        if not record.active:
            return

        record.deactivate()
        record.last_modification = _stamp(user, "deleted")
        self.crud.add_status_event(
            db, db_obj=record, from_status=ListingStatus.active, actor_id=user.id, action="deleted"
        )
        self.crud.save(db, record)

        log_activity(
            db=db,
            action_type=ActionTypes.DELETE_LISTING,
            user_id=user.id,
            entity_type=self.entity_type,
            entity_id=record.id,
            extra_data={"name": record.name},
            ip_address=client_info[0],
            user_agent=client_info[1],
        )

    def toggle_active(
        self,
        db: Session,
        listing_id: UUID,
        user: User,
        reason: Optional[str] = None,
        client_info: ClientInfo = (None, None),
    ):
        """
        Activar o bloquear un alojamiento. Solo super administradores;
        ser propietario no es suficiente.

        Raises:
            ForbiddenException: Si el usuario no es super admin
            NotFoundException: Si no existe
        """
        require_elevated(
            user,
            "No tienes permisos para realizar esta acción. "
            "Se requieren privilegios de super administrador.",
        )
        record = self.get(db, listing_id)

        previous = record.status
        if record.active:
            record.deactivate()
            action = "deactivated"
        else:
            record.activate()
            action = "activated"

        reason = reason or DEFAULT_TOGGLE_REASON
        record.last_modification = _stamp(user, action, reason=reason)
        self.crud.add_status_event(
            db, db_obj=record, from_status=previous, actor_id=user.id, action=action, reason=reason
        )
        record = self.crud.save(db, record)

        logger.info(f"{self.entity_type} {record.id} {action} por super admin {user.id}")
        log_activity(
            db=db,
            action_type=ActionTypes.TOGGLE_LISTING_STATUS,
            user_id=user.id,
            entity_type=self.entity_type,
            entity_id=record.id,
            extra_data={"old_status": previous.value, "new_status": record.status.value, "reason": reason},
            ip_address=client_info[0],
            user_agent=client_info[1],
        )
        return record

    # ------------------------------------------------------------------
    # Imágenes
    # ------------------------------------------------------------------

    def _load_for_images(self, db: Session, listing_id: UUID, user: User):
        """Cargar alojamiento para gestionar imágenes (propietario o super admin)."""
        record = self.crud.load(db, listing_id)
        if record is None or (not record.active and not is_elevated(user)):
            raise NotFoundException(f"{self.not_found_message} o no tienes permisos")
        authorize(record, user, "No tienes permiso para gestionar las imágenes de este alojamiento")
        return record

    def get_images(self, db: Session, listing_id: UUID, user: User) -> List[str]:
        """Imágenes del alojamiento en orden (la primera es la principal)."""
        record = self._load_for_images(db, listing_id, user)
        return list(record.images or [])

    def get_main_image(self, db: Session, listing_id: UUID) -> dict:
        """
        Imagen principal de un alojamiento activo (público).

        Raises:
            NotFoundException: Si no existe o está inactivo
        """
        record = self.crud.load(db, listing_id)
        if record is None or not record.active:
            raise NotFoundException(self.not_found_message)
        images = record.images or []
        return {
            "main_image": images[0] if images else None,
            "total_images": len(images),
        }

    async def upload_images(
        self,
        db: Session,
        listing_id: UUID,
        files: Sequence[UploadFile],
        user: User,
        client_info: ClientInfo = (None, None),
    ) -> dict:
        """
        Subir imágenes al servicio externo y agregarlas al final de la lista.

        Raises:
            ValidationException: Sin archivos, demasiados archivos o archivo inválido
            ExternalServiceException: Si falla la subida
        """
        settings = get_settings()
        if not files:
            raise ValidationException("No se enviaron archivos")
        if len(files) > settings.MAX_FILES_PER_UPLOAD:
            raise ValidationException(
                f"Demasiados archivos. Máximo {settings.MAX_FILES_PER_UPLOAD} imágenes por vez."
            )

        record = self._load_for_images(db, listing_id, user)

        # Validar todo antes de subir cualquier archivo
        contents = []
        for file in files:
            if not file or not file.filename:
                raise ValidationException("No se recibió ningún archivo")
            content = await file.read()
            is_valid, error_msg = storage_service.validate_image(
                file.filename, len(content), file.content_type
            )
            if not is_valid:
                raise ValidationException(error_msg)
            contents.append((file.filename, content))

        new_urls = []
        for filename, content in contents:
            result = await storage_service.upload_file(
                content=content,
                folder=self.folder,
                filename=filename,
                prefix=str(record.id),
            )
            new_urls.append(result["url"])

        record.images = image_list.append_images(record.images or [], new_urls)
        record.updated_at = _now()
        record = self.crud.save(db, record)

        logger.info(f"{len(new_urls)} imágenes subidas para {self.entity_type} {record.id}")
        log_activity(
            db=db,
            action_type=ActionTypes.UPLOAD_IMAGES,
            user_id=user.id,
            entity_type=self.entity_type,
            entity_id=record.id,
            extra_data={"images": new_urls},
            ip_address=client_info[0],
            user_agent=client_info[1],
        )
        return {
            "added": len(new_urls),
            "total_images": len(record.images),
            "new_images": new_urls,
        }

    async def remove_image(
        self,
        db: Session,
        listing_id: UUID,
        index: int,
        user: User,
        client_info: ClientInfo = (None, None),
    ) -> dict:
        """
        Quitar una imagen por posición.

        La lista del registro es la fuente de verdad: la eliminación del
        archivo en el servicio externo es de mejor esfuerzo y su falla solo
        se registra en el log.

        Raises:
            ImageIndexException: Si no hay imágenes o el índice es inválido
        """
        record = self._load_for_images(db, listing_id, user)

        remaining, removed = image_list.remove_image_at(record.images or [], index)
        record.images = remaining
        record.updated_at = _now()
        record = self.crud.save(db, record)

        object_key = storage_service.extract_object_key_from_url(removed)
        if object_key:
            try:
                await storage_service.delete_file(object_key)
            except ExternalServiceException as e:
                logger.warning(f"No se pudo eliminar {object_key} del almacenamiento (continuando): {e.message}")
        else:
            logger.warning(f"Imagen externa no gestionada por el almacenamiento: {removed}")

        log_activity(
            db=db,
            action_type=ActionTypes.DELETE_IMAGE,
            user_id=user.id,
            entity_type=self.entity_type,
            entity_id=record.id,
            extra_data={"url": removed, "index": index},
            ip_address=client_info[0],
            user_agent=client_info[1],
        )
        return {
            "total_images": len(record.images),
            "removed_image": {"url": removed, "index": index},
        }

    def set_primary_image(
        self,
        db: Session,
        listing_id: UUID,
        index: int,
        user: User,
        client_info: ClientInfo = (None, None),
    ) -> Tuple[dict, bool]:
        """
        Mover una imagen a la posición principal.

        Returns:
            (datos de respuesta, True si la lista cambió)

        Raises:
            ImageIndexException: Si no hay imágenes o el índice es inválido
        """
        record = self._load_for_images(db, listing_id, user)

        reordered, primary = image_list.set_primary_image(record.images or [], index)
        if index == 0:
            return {"main_image": primary, "total_images": len(reordered)}, False

        record.images = reordered
        record.updated_at = _now()
        record = self.crud.save(db, record)

        log_activity(
            db=db,
            action_type=ActionTypes.SET_MAIN_IMAGE,
            user_id=user.id,
            entity_type=self.entity_type,
            entity_id=record.id,
            extra_data={"url": primary, "index": index},
            ip_address=client_info[0],
            user_agent=client_info[1],
        )
        return {"main_image": primary, "total_images": len(record.images)}, True


# Instancias por tipo de alojamiento
hotel_service = ListingService(
    crud=crud_hotel,
    folder=StorageFolder.HOTELS,
    entity_type=EntityTypes.HOTEL,
    not_found_message="No se encontró el hotel",
)
cabin_service = ListingService(
    crud=crud_cabin,
    folder=StorageFolder.CABINS,
    entity_type=EntityTypes.CABIN,
    not_found_message="No se encontró la cabaña",
)
rental_service = ListingService(
    crud=crud_rental,
    folder=StorageFolder.RENTALS,
    entity_type=EntityTypes.RENTAL,
    not_found_message="No se encontró el alojamiento",
)
