"""
Conexión a Base de Datos

Gestiona el engine async hacia SQLite (desarrollo) o PostgreSQL (producción)
y construye el cliente de consultas preconfigurado que usa el dashboard.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import declarative_base
from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from src.database.query_client import SQLAlchemyQueryClient

# Base para los modelos
Base = declarative_base()

# Variables globales - Async
async_engine: Optional[AsyncEngine] = None
_query_client: Optional["SQLAlchemyQueryClient"] = None


def init_async_db(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Inicializa la conexión asincrónica a la base de datos.

    Args:
        database_url: URL explícita; por defecto la de settings

    Returns:
        Engine async inicializado
    """
    global async_engine

    from config.settings import settings

    database_url = database_url or settings.get_async_database_url()

    if "aiosqlite" in database_url:
        db_path = database_url.replace("sqlite+aiosqlite:///", "")
        if db_path and not db_path.startswith(":memory:"):
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        async_engine = create_async_engine(
            database_url,
            echo=settings.DATABASE_ECHO,
            connect_args={"check_same_thread": False}
        )
    else:
        # PostgreSQL async con connection pooling
        async_engine = create_async_engine(
            database_url,
            echo=settings.DATABASE_ECHO,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_recycle=settings.DATABASE_POOL_RECYCLE,
            pool_pre_ping=True
        )

    return async_engine


async def create_tables_async(engine: Optional[AsyncEngine] = None) -> None:
    """Crea todas las tablas en la base de datos (async)."""
    if engine is None:
        engine = async_engine or init_async_db()

    # Importar modelos para registrarlos
    from src.database import models  # noqa

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def get_query_client() -> "SQLAlchemyQueryClient":
    """
    Cliente de consultas compartido y preconfigurado.

    Las funciones del dashboard lo reciben como argumento; este helper
    solo existe para el código de aplicación que necesita la instancia
    por defecto.
    """
    global _query_client

    if _query_client is None:
        from src.database.query_client import SQLAlchemyQueryClient

        engine = async_engine or init_async_db()
        _query_client = SQLAlchemyQueryClient(engine)

    return _query_client


async def close_async_db() -> None:
    """Cierra las conexiones async de la base de datos."""
    global async_engine, _query_client

    if async_engine is not None:
        await async_engine.dispose()
        async_engine = None
    _query_client = None
