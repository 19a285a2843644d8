"""
Base declarativa de SQLAlchemy.
Todos los modelos heredan de esta clase base.
"""
import enum

from sqlalchemy import Column, Enum
from sqlalchemy.orm import declarative_base


class ListingStatus(str, enum.Enum):
    """Estados posibles de un alojamiento (borrado suave)."""
    active = "active"
    inactive = "inactive"


class SoftDeleteMixin:
    """
    Mixin que agrega soporte para borrado suave a los modelos.

    El registro nunca se elimina físicamente: el campo status pasa a
    'inactive' y el registro deja de aparecer en las consultas públicas.
    - Método deactivate() para desactivar
    - Método activate() para reactivar
    - Propiedad active para verificar estado
    """

    status = Column(
        Enum(ListingStatus, name="listing_status", native_enum=False, length=20),
        nullable=False,
        default=ListingStatus.active,
        index=True,
    )

    def deactivate(self) -> None:
        """Marca el registro como inactivo (soft delete)."""
        self.status = ListingStatus.inactive

    def activate(self) -> None:
        """Restaura un registro inactivo."""
        self.status = ListingStatus.active

    @property
    def active(self) -> bool:
        """Verifica si el registro está activo."""
        return self.status == ListingStatus.active


# Base declarativa de SQLAlchemy
Base = declarative_base()
