"""
Fixtures compartidas de la suite de pruebas.

Base de datos SQLite en memoria (StaticPool) compartida por la sesión de la
prueba y por la app vía override de get_db; tokens firmados con la misma
SECRET_KEY que valida la API.
"""
import os
import tempfile

# Configuración de pruebas ANTES de importar la app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-not-real"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="turismo_test_")
os.environ["SUPER_ADMIN_EMAILS"] = "direccion@turismo.test"
os.environ["SUPER_ADMIN_EMAIL"] = ""
os.environ["R2_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.deps import get_db
from app.core.security import create_access_token
from app.db.base import Base
from app.main import app
from app.models.user import User, UserRole
from app.schemas.listing import HotelCreate
from app.services.listing_service import hotel_service

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Sesión sobre un esquema recién creado para cada prueba."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """TestClient que usa la misma sesión que la prueba."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _user(db, email: str, role: UserRole, **extra) -> User:
    user = User(email=email, full_name=email.split("@")[0], role=role, **extra)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def owner(db):
    return _user(db, "propietario@hotel.test", UserRole.admin)


@pytest.fixture
def other_admin(db):
    return _user(db, "otro@hotel.test", UserRole.admin)


@pytest.fixture
def super_admin(db):
    return _user(db, "super@turismo.test", UserRole.super_admin)


@pytest.fixture
def email_super_admin(db):
    """Administrador elevado por estar en SUPER_ADMIN_EMAILS."""
    return _user(db, "Direccion@Turismo.test", UserRole.admin)


@pytest.fixture
def visitor(db):
    return _user(db, "visitante@correo.test", UserRole.visitor)


def auth(user: User) -> dict:
    """Headers Authorization para el usuario."""
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


def hotel_payload(**overrides) -> dict:
    payload = {
        "name": "Hotel Mirador",
        "description": "Vista al lago",
        "category": "boutique",
        "price": 1200.0,
        "location": {"city": "Valle de Bravo", "region": "Estado de México"},
        "contact": {"phone": "7221234567"},
        "capacity": {"guests": 4, "rooms": 2},
        "amenities": ["wifi", "alberca"],
        "payment_methods": ["efectivo", "tarjeta"],
        "stars": 4,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_hotel(db, owner):
    """Fábrica de hoteles registrados por el servicio."""
    def _make(user=None, **overrides):
        return hotel_service.create(db, HotelCreate(**hotel_payload(**overrides)), user or owner)
    return _make


@pytest.fixture
def hotel(make_hotel):
    return make_hotel()
