"""
Dependencias comunes de FastAPI.
"""
from typing import Generator, Optional
from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError

from app.db.session import SessionLocal
from app.core.security import decode_token
from app.core.permissions import can_administer, is_elevated
from app.models.user import User

security = HTTPBearer(auto_error=False)


def get_db() -> Generator:
    """
    Dependencia que proporciona una sesión de base de datos.

    Yields:
        Session: Sesión de SQLAlchemy
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _user_id_from_token(credentials: Optional[HTTPAuthorizationCredentials]) -> UUID:
    """
    Obtener el ID del usuario desde el JWT.

    Raises:
        HTTPException: Si falta el token o es inválido
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudieron validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    try:
        payload = decode_token(credentials.credentials)
        user_id: Optional[str] = payload.get("sub")
        token_type: Optional[str] = payload.get("type")

        if user_id is None or token_type != "access":
            raise credentials_exception

        return UUID(user_id)

    except (JWTError, ValueError):
        raise credentials_exception


async def get_current_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """
    Obtener el usuario actual completo desde la base de datos.

    Raises:
        HTTPException: Si el token es inválido, el usuario no existe o está inactivo
    """
    user_id = _user_id_from_token(credentials)
    user = db.get(User, user_id)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario no encontrado"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Usuario inactivo"
        )

    return user


async def get_optional_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[User]:
    """
    Usuario actual si se envió un token válido; None en rutas públicas.
    """
    if credentials is None:
        return None
    try:
        return await get_current_user(db=db, credentials=credentials)
    except HTTPException:
        return None


async def get_current_admin_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Verificar que el usuario actual sea administrador o super administrador.

    Raises:
        HTTPException: Si el usuario no es administrador
    """
    if not can_administer(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No tiene permisos de administrador"
        )

    return current_user


async def get_current_superadmin_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Verificar que el usuario actual sea super administrador.

    Raises:
        HTTPException: Si el usuario no es super administrador
    """
    if not is_elevated(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Se requieren privilegios de super administrador"
        )

    return current_user
