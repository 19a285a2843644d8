"""
Endpoints de cabañas.
"""
from app.api.v1.endpoints.listings import build_listing_router
from app.schemas.listing import CabinCreate, CabinUpdate, CabinResponse
from app.services.listing_service import cabin_service

router = build_listing_router(
    cabin_service,
    CabinCreate,
    CabinUpdate,
    CabinResponse,
    messages={
        "created": "Cabaña creada exitosamente",
        "updated": "Cabaña actualizada exitosamente",
        "activated": "Cabaña activada exitosamente",
        "deactivated": "Cabaña bloqueada exitosamente",
    },
)
