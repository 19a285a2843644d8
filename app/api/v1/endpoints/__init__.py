"""
Endpoints de la API v1.
"""
from app.api.v1.endpoints import (
    hotels,
    cabins,
    rentals,
    questionnaires,
)

__all__ = [
    "hotels",
    "cabins",
    "rentals",
    "questionnaires",
]
