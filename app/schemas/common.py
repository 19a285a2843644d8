"""
Schemas comunes reutilizables.

Todas las respuestas siguen el mismo sobre:
- éxito: {"status": "success", "data": ..., "message"?, "results"?}
- error: {"status": "error", "message": "..."}
"""
from pydantic import BaseModel
from typing import Any, Generic, TypeVar, Optional, Literal


T = TypeVar('T')


class SuccessResponse(BaseModel, Generic[T]):
    """Sobre de respuesta exitosa."""

    status: Literal["success"] = "success"
    message: Optional[str] = None
    results: Optional[int] = None
    data: Optional[T] = None

    model_config = {"from_attributes": True}


class ErrorResponse(BaseModel):
    """Sobre de respuesta de error."""

    status: Literal["error"] = "error"
    message: str

    model_config = {"from_attributes": True}


def success(data: Any = None, message: Optional[str] = None, results: Optional[int] = None) -> dict:
    """Construir el sobre de éxito omitiendo los campos vacíos."""
    envelope = {"status": "success"}
    if message is not None:
        envelope["message"] = message
    if results is not None:
        envelope["results"] = results
    envelope["data"] = data
    return envelope
