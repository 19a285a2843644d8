"""
Configuración de la aplicación Turismo.
Maneja variables de entorno y settings globales.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Configuración de la aplicación usando Pydantic Settings v2."""

    # Database (REQUERIDO - debe estar en .env)
    DATABASE_URL: str

    # Security (REQUERIDO - debe estar en .env)
    # Los tokens se emiten en el servicio de autenticación; aquí solo se validan
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Application
    APP_NAME: str = "Turismo API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Super administradores
    # Lista separada por comas; se combina con el rol super_admin del usuario
    SUPER_ADMIN_EMAILS: str = ""
    # Super admin inicial (opcional, se crea al arrancar si no existe)
    SUPER_ADMIN_EMAIL: str = ""
    SUPER_ADMIN_NAME: str = "Dirección de Turismo"

    # File Upload
    UPLOAD_DIR: str = "./uploads"
    MAX_FILE_SIZE: int = 5242880  # 5MB
    MAX_FILES_PER_UPLOAD: int = 10

    # API Base URL (para generar URLs de archivos en almacenamiento local)
    API_BASE_URL: str = "http://localhost:8000"

    # Cloudflare R2 Storage
    R2_ENABLED: bool = False  # False = almacenamiento local, True = Cloudflare R2
    R2_ACCOUNT_ID: str = ""
    R2_ACCESS_KEY_ID: str = ""
    R2_SECRET_ACCESS_KEY: str = ""
    R2_BUCKET_NAME: str = ""
    R2_PUBLIC_URL: str = ""  # URL pública del bucket (ej: https://cdn.tudominio.com)

    # Computed properties
    @property
    def allowed_origins_list(self) -> List[str]:
        """Convierte ALLOWED_ORIGINS string a lista."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def super_admin_emails_list(self) -> List[str]:
        """Emails con privilegios de super administrador (en minúsculas)."""
        emails = [email.strip().lower() for email in self.SUPER_ADMIN_EMAILS.split(",")]
        if self.SUPER_ADMIN_EMAIL:
            emails.append(self.SUPER_ADMIN_EMAIL.strip().lower())
        return [email for email in emails if email]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Instancia Singleton de settings
_settings_instance = None


def get_settings() -> Settings:
    """
    Obtener instancia Singleton de configuración.
    Se carga una sola vez y se reutiliza.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


# Instancia global de settings (Singleton)
settings = get_settings()
