"""
Pytest Configuration and Fixtures

Configuración global de pytest y fixtures compartidos.
"""

import os
import sys
from datetime import date
from pathlib import Path

# Entorno de test: debe quedar fijado antes de importar config.settings
os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_TO_FILE"] = "false"
os.environ["REVENUE_FETCH_DELAY_SECONDS"] = "0"

import pytest
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

# Agregar el directorio raíz al path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.database.connection import Base
from src.database import models  # noqa
from src.database.query_client import SQLAlchemyQueryClient
from tests.factories import CustomerFactory, InvoiceFactory, FakeQueryClient


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

@pytest.fixture
async def async_engine():
    """Crea un engine async de base de datos en memoria."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def query_client(async_engine) -> SQLAlchemyQueryClient:
    """Cliente de consultas real sobre la base en memoria."""
    return SQLAlchemyQueryClient(async_engine)


@pytest.fixture
def insert_rows(async_engine):
    """Inserta filas (dicts) en la tabla de un modelo."""
    async def _insert(model, rows):
        rows = list(rows)
        if rows:
            async with async_engine.begin() as conn:
                await conn.execute(insert(model.__table__), rows)
        return rows

    return _insert


# ============================================================================
# SAMPLE DATA FIXTURES
# ============================================================================

@pytest.fixture
async def sample_data(insert_rows) -> dict:
    """
    Cuatro clientes y seis facturas con montos conocidos.

    Orden por fecha descendente:
        lee 2023-04-20, balazs 2023-03-05, amy 2023-03-01,
        lee 2023-02-15, amy 2023-01-10, amy 2022-12-01
    """
    customers = {
        "amy": CustomerFactory(name="Amy Burns", email="amy@burns.com"),
        "lee": CustomerFactory(name="Lee Robinson", email="lee@robinson.com"),
        "balazs": CustomerFactory(name="Balazs Orban", email="balazs@orban.com"),
        "hector": CustomerFactory(name="Hector Simpson", email="hector@simpson.com"),
    }
    amy, lee, balazs = customers["amy"]["id"], customers["lee"]["id"], customers["balazs"]["id"]

    invoices = {
        "amy_paid": InvoiceFactory(customer_id=amy, amount=100, pagada=True, date=date(2023, 1, 10)),
        "amy_pending": InvoiceFactory(customer_id=amy, amount=50, date=date(2023, 3, 1)),
        "amy_old": InvoiceFactory(customer_id=amy, amount=25, pagada=True, date=date(2022, 12, 1)),
        "lee_pending": InvoiceFactory(customer_id=lee, amount=20000, date=date(2023, 2, 15)),
        "lee_paid": InvoiceFactory(customer_id=lee, amount=15795, pagada=True, date=date(2023, 4, 20)),
        "balazs_pending": InvoiceFactory(customer_id=balazs, amount=666, date=date(2023, 3, 5)),
    }

    await insert_rows(models.Customer, customers.values())
    await insert_rows(models.Invoice, invoices.values())

    return {"customers": customers, "invoices": invoices}


# ============================================================================
# MOCK FIXTURES
# ============================================================================

@pytest.fixture
def fake_client() -> FakeQueryClient:
    """Cliente de consultas fake sin respuestas programadas."""
    return FakeQueryClient()
