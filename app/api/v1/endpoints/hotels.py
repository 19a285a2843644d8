"""
Endpoints de hoteles.
"""
from app.api.v1.endpoints.listings import build_listing_router
from app.schemas.listing import HotelCreate, HotelUpdate, HotelResponse
from app.services.listing_service import hotel_service

router = build_listing_router(
    hotel_service,
    HotelCreate,
    HotelUpdate,
    HotelResponse,
    messages={
        "created": "Hotel creado exitosamente",
        "updated": "Hotel actualizado exitosamente",
        "activated": "Hotel activado exitosamente",
        "deactivated": "Hotel bloqueado exitosamente",
    },
)
