"""
Gestión de la lista ordenada de imágenes de un alojamiento.

Funciones puras sobre listas de referencias (URLs): nunca modifican la
lista recibida y devuelven una nueva. La posición 0 es la imagen principal.
La autorización ya debe haberse verificado antes de llamarlas.
"""
from typing import List, Sequence, Tuple

from app.core.exceptions import ImageIndexException, ValidationException


def _check_index(images: Sequence[str], index: int) -> None:
    """Validar que el índice apunte a una imagen existente."""
    if not images:
        raise ImageIndexException("No hay imágenes disponibles")
    if index < 0 or index >= len(images):
        raise ImageIndexException("Índice de imagen inválido")


def append_images(images: Sequence[str], new_refs: Sequence[str]) -> List[str]:
    """
    Agregar referencias al final respetando el orden existente.

    Raises:
        ValidationException: Si no hay referencias o alguna está vacía
    """
    if not new_refs:
        raise ValidationException("No se enviaron imágenes")
    if any(not ref or not ref.strip() for ref in new_refs):
        raise ValidationException("Las referencias de imagen no pueden estar vacías")
    return list(images) + list(new_refs)


def remove_image_at(images: Sequence[str], index: int) -> Tuple[List[str], str]:
    """
    Quitar la imagen en la posición indicada.

    Las imágenes posteriores se desplazan una posición a la izquierda.

    Returns:
        (nueva lista, referencia eliminada)

    Raises:
        ImageIndexException: Si la lista está vacía o el índice está fuera de rango
    """
    _check_index(images, index)
    remaining = list(images)
    removed = remaining.pop(index)
    return remaining, removed


def set_primary_image(images: Sequence[str], index: int) -> Tuple[List[str], str]:
    """
    Mover una imagen a la posición 0.

    Con index == 0 la lista queda igual (no es un error).

    Returns:
        (nueva lista, imagen principal)

    Raises:
        ImageIndexException: Si la lista está vacía o el índice está fuera de rango
    """
    _check_index(images, index)
    reordered = list(images)
    if index == 0:
        return reordered, reordered[0]
    primary = reordered.pop(index)
    reordered.insert(0, primary)
    return reordered, primary
