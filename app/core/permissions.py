"""
Verificación de privilegios y propiedad de alojamientos.

Un único predicado is_elevated() decide quién es super administrador para
todos los tipos de alojamiento: rol super_admin, marca is_super_admin o
email presente en SUPER_ADMIN_EMAILS.
"""
from typing import Optional

from app.config import get_settings
from app.core.exceptions import ForbiddenException
from app.models.user import User, UserRole


def is_elevated(user: Optional[User]) -> bool:
    """Verificar si el usuario es super administrador."""
    if user is None:
        return False
    if user.role == UserRole.super_admin or user.is_super_admin:
        return True
    email = (user.email or "").strip().lower()
    return email in get_settings().super_admin_emails_list


def can_administer(user: Optional[User]) -> bool:
    """Verificar si el usuario puede crear y gestionar alojamientos."""
    return user is not None and (user.role == UserRole.admin or is_elevated(user))


def authorize(record, user: User, message: str = "No tienes permiso para modificar este alojamiento") -> None:
    """
    Autorizar una mutación sobre un registro con propietario.

    Permite a super administradores y al propietario del registro.

    Raises:
        ForbiddenException: Si el usuario no es propietario ni super admin
    """
    if is_elevated(user):
        return
    if str(record.owner_id) != str(user.id):
        raise ForbiddenException(message)


def require_elevated(
    user: Optional[User],
    message: str = "Se requieren privilegios de super administrador",
) -> None:
    """
    Exigir privilegios de super administrador.

    Raises:
        ForbiddenException: Si el usuario no es super admin
    """
    if not is_elevated(user):
        raise ForbiddenException(message)


def require_admin(
    user: Optional[User],
    message: str = "Solo los administradores pueden realizar esta acción",
) -> None:
    """
    Exigir rol de administrador (o super administrador).

    Raises:
        ForbiddenException: Si el usuario no es administrador
    """
    if not can_administer(user):
        raise ForbiddenException(message)
