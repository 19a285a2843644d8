"""
Servicio de inicialización de la aplicación.
Crea las tablas y el super administrador inicial al arrancar.
"""
import logging
import time
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.config import get_settings
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.models.user import User, UserRole
import app.models  # noqa: F401  registra todos los modelos en Base.metadata

logger = logging.getLogger(__name__)


def wait_for_db(max_retries: int = 10, delay: int = 2) -> bool:
    """
    Esperar a que la base de datos esté lista.

    Args:
        max_retries: Número máximo de reintentos
        delay: Segundos entre reintentos

    Returns:
        True si la BD está lista, False si falló
    """
    for attempt in range(max_retries):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            if attempt < max_retries - 1:
                logger.info(f"Esperando base de datos... intento {attempt + 1}/{max_retries}")
                time.sleep(delay)
            else:
                logger.error(f"Base de datos no disponible después de {max_retries} intentos: {e}")
                return False
    return False


def init_db() -> None:
    """Crear las tablas que falten."""
    Base.metadata.create_all(bind=engine)


def init_super_admin() -> bool:
    """
    Crear el super administrador inicial si no existe.

    Usa las variables de entorno SUPER_ADMIN_EMAIL y SUPER_ADMIN_NAME.

    Returns:
        True si se creó el usuario, False si ya existía o hubo error
    """
    settings = get_settings()

    if not settings.SUPER_ADMIN_EMAIL:
        logger.warning("SUPER_ADMIN_EMAIL no configurado")
        return False

    db: Session = SessionLocal()

    try:
        existing = db.query(User).filter(
            User.email == settings.SUPER_ADMIN_EMAIL
        ).first()

        if existing:
            logger.info(f"Super administrador ya existe: {settings.SUPER_ADMIN_EMAIL}")
            return False

        db.add(User(
            email=settings.SUPER_ADMIN_EMAIL,
            full_name=settings.SUPER_ADMIN_NAME,
            role=UserRole.super_admin,
            is_super_admin=True,
        ))
        db.commit()

        logger.info(f"Super administrador creado: {settings.SUPER_ADMIN_EMAIL}")
        return True

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error al crear super administrador")
        return False

    finally:
        db.close()


def run_initialization():
    """
    Ejecutar todas las tareas de inicialización.
    Llamar desde el evento startup de FastAPI.
    """
    logger.info("Ejecutando inicialización...")

    if not wait_for_db():
        return

    init_db()
    init_super_admin()

    logger.info("Inicialización completada")
