"""
Configuración centralizada del sistema

Carga variables de entorno y proporciona acceso a configuración
en todo el proyecto.

Uso:
    from config.settings import settings

    url = settings.get_async_database_url()
    delay = settings.REVENUE_FETCH_DELAY_SECONDS
"""

from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import Optional

from config.environments import Environment, get_config


class Settings(BaseSettings):
    """
    Configuración del sistema con soporte multi-entorno.

    Todas las configuraciones se cargan desde variables de entorno
    o archivo .env, con valores por defecto sensatos para desarrollo.
    """

    # =========================================================================
    # ENTORNO
    # =========================================================================
    ENVIRONMENT: Environment = Environment.DEVELOPMENT
    DEBUG: bool = False

    # =========================================================================
    # INFORMACIÓN DEL PROYECTO
    # =========================================================================
    PROJECT_NAME: str = "Dashboard Query Layer"
    VERSION: str = "1.0.0"

    # =========================================================================
    # BASE DE DATOS
    # =========================================================================
    DATABASE_URL: str = "sqlite+aiosqlite:///dashboard.db"
    DATABASE_ECHO: bool = False

    # Pool de conexiones (solo PostgreSQL)
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 1800  # Reciclar conexiones cada 30 min

    # =========================================================================
    # DASHBOARD
    # =========================================================================
    REVENUE_FETCH_DELAY_SECONDS: Optional[float] = None  # None = valor del entorno
    CURRENCY_SYMBOL: str = "$"

    # =========================================================================
    # LOGGING
    # =========================================================================
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str, info) -> str:
        """Valida que no se use SQLite en producción"""
        values = info.data
        if values.get("ENVIRONMENT") == Environment.PRODUCTION:
            if "sqlite" in v.lower():
                raise ValueError("SQLite no está permitido en producción. Use PostgreSQL.")
        return v

    @field_validator("REVENUE_FETCH_DELAY_SECONDS")
    @classmethod
    def validate_revenue_delay(cls, v: Optional[float]) -> Optional[float]:
        """La demora artificial no puede ser negativa"""
        if v is not None and v < 0:
            raise ValueError("REVENUE_FETCH_DELAY_SECONDS no puede ser negativo")
        return v

    def get_async_database_url(self) -> str:
        """Retorna la URL de base de datos para async"""
        url = self.DATABASE_URL

        # Convertir URL sync a async si es necesario
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif url.startswith("sqlite:///"):
            return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)

        return url

    def get_revenue_delay(self) -> float:
        """Demora efectiva de la lectura de ingresos en segundos."""
        if self.REVENUE_FETCH_DELAY_SECONDS is not None:
            return self.REVENUE_FETCH_DELAY_SECONDS
        return get_config(self.ENVIRONMENT).REVENUE_FETCH_DELAY_SECONDS

    def is_production(self) -> bool:
        """Verifica si está en producción."""
        return self.ENVIRONMENT == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Verifica si está en desarrollo."""
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Instancia única de configuración
settings = Settings()

# Aplicar configuración del entorno
env_config = get_config(settings.ENVIRONMENT)
if not settings.DEBUG:
    settings.DEBUG = env_config.DEBUG
