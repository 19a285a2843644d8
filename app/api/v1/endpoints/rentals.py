"""
Endpoints de rentas vacacionales.
"""
from app.api.v1.endpoints.listings import build_listing_router
from app.schemas.listing import RentalCreate, RentalUpdate, RentalResponse
from app.services.listing_service import rental_service

router = build_listing_router(
    rental_service,
    RentalCreate,
    RentalUpdate,
    RentalResponse,
    messages={
        "created": "Alojamiento creado exitosamente",
        "updated": "Alojamiento actualizado exitosamente",
        "activated": "Alojamiento activado exitosamente",
        "deactivated": "Alojamiento bloqueado exitosamente",
    },
)
