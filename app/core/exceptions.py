"""
Excepciones personalizadas para la aplicación Turismo.

Cada excepción conoce su código HTTP; los handlers de app.main las
convierten en el sobre de error {"status": "error", "message": ...}.
"""


class TurismoException(Exception):
    """Excepción base para todas las excepciones de Turismo."""

    status_code: int = 400

    def __init__(self, message: str = "Error en la aplicación"):
        self.message = message
        super().__init__(self.message)


class ValidationException(TurismoException):
    """Excepción cuando falla la validación de datos."""

    status_code = 400

    def __init__(self, message: str = "Error de validación"):
        super().__init__(message)


class UnauthorizedException(TurismoException):
    """Excepción cuando el usuario no está autenticado."""

    status_code = 401

    def __init__(self, message: str = "No autorizado"):
        super().__init__(message)


class ForbiddenException(TurismoException):
    """Excepción cuando el usuario no tiene permisos."""

    status_code = 403

    def __init__(self, message: str = "Acceso prohibido"):
        super().__init__(message)


class NotFoundException(TurismoException):
    """Excepción cuando un recurso no se encuentra."""

    status_code = 404

    def __init__(self, message: str = "Recurso no encontrado"):
        super().__init__(message)


class ImageIndexException(NotFoundException, IndexError):
    """Índice de imagen fuera de rango o lista de imágenes vacía."""

    def __init__(self, message: str = "Índice de imagen inválido"):
        super().__init__(message)


class ExternalServiceException(TurismoException):
    """Falla del servicio externo de imágenes (R2 / almacenamiento)."""

    status_code = 502

    def __init__(self, message: str = "Error en el servicio de imágenes"):
        super().__init__(message)
