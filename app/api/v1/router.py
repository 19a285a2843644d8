"""
Router principal de la API v1.
Incluye todos los endpoints de la aplicación.
"""
from fastapi import APIRouter

from app.api.v1.endpoints import (
    hotels,
    cabins,
    rentals,
    questionnaires,
)

api_router = APIRouter()

# ============================================================================
# ALOJAMIENTOS
# ============================================================================
api_router.include_router(
    hotels.router,
    prefix="/hotels",
    tags=["Hoteles"]
)

api_router.include_router(
    cabins.router,
    prefix="/cabins",
    tags=["Cabañas"]
)

api_router.include_router(
    rentals.router,
    prefix="/rentals",
    tags=["Rentas"]
)

# ============================================================================
# CUESTIONARIOS Y REPORTES
# ============================================================================
api_router.include_router(
    questionnaires.router,
    prefix="/questionnaires",
    tags=["Cuestionarios"]
)
