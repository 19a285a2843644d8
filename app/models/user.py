"""
Modelo ORM para Usuarios.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Enum, Uuid
from sqlalchemy.sql import func
import enum
import uuid
from app.db.base import Base


class UserRole(str, enum.Enum):
    """Roles de usuario."""
    visitor = "visitor"
    admin = "admin"
    super_admin = "super_admin"


class User(Base):
    """
    Modelo de Usuarios del sistema.

    Las cuentas se dan de alta en el servicio de autenticación; esta API solo
    necesita la identidad, el rol y la marca de super administrador.
    """

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(200), nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", native_enum=False, length=20),
        nullable=False,
        default=UserRole.visitor,
    )
    is_super_admin = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User {self.email}>"
