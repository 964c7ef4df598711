"""
Datos de ejemplo para desarrollo

Carga clientes, facturas e ingresos de prueba en una base vacía.
"""

from datetime import date
from typing import Dict

from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncEngine

from src.database.models import Customer, Invoice, Revenue
from src.utils.logger import get_logger, with_context

logger = get_logger(__name__)


CUSTOMERS = [
    {
        "id": "d6e15727-9fe1-4961-8c5b-ea44a9bd81aa",
        "name": "Evil Rabbit",
        "email": "evil@rabbit.com",
        "image_url": "/customers/evil-rabbit.png",
    },
    {
        "id": "3958dc9e-712f-4377-85e9-fec4b6a6442a",
        "name": "Delba de Oliveira",
        "email": "delba@oliveira.com",
        "image_url": "/customers/delba-de-oliveira.png",
    },
    {
        "id": "3958dc9e-742f-4377-85e9-fec4b6a6442a",
        "name": "Lee Robinson",
        "email": "lee@robinson.com",
        "image_url": "/customers/lee-robinson.png",
    },
    {
        "id": "76d65c26-f784-44a2-ac19-586678f7c2f2",
        "name": "Michael Novotny",
        "email": "michael@novotny.com",
        "image_url": "/customers/michael-novotny.png",
    },
    {
        "id": "cc27c14a-0acf-4f4a-a6c9-d45682c144b9",
        "name": "Amy Burns",
        "email": "amy@burns.com",
        "image_url": "/customers/amy-burns.png",
    },
    {
        "id": "13d07535-c59e-4157-a011-f8d2ef4e0cbb",
        "name": "Balazs Orban",
        "email": "balazs@orban.com",
        "image_url": "/customers/balazs-orban.png",
    },
]

INVOICES = [
    {"customer_id": CUSTOMERS[0]["id"], "amount": 15795, "status": "pending", "date": date(2022, 12, 6)},
    {"customer_id": CUSTOMERS[1]["id"], "amount": 20348, "status": "pending", "date": date(2022, 11, 14)},
    {"customer_id": CUSTOMERS[4]["id"], "amount": 3040, "status": "paid", "date": date(2022, 10, 29)},
    {"customer_id": CUSTOMERS[3]["id"], "amount": 44800, "status": "paid", "date": date(2023, 9, 10)},
    {"customer_id": CUSTOMERS[5]["id"], "amount": 34577, "status": "pending", "date": date(2023, 8, 5)},
    {"customer_id": CUSTOMERS[2]["id"], "amount": 54246, "status": "pending", "date": date(2023, 7, 16)},
    {"customer_id": CUSTOMERS[0]["id"], "amount": 666, "status": "pending", "date": date(2023, 6, 27)},
    {"customer_id": CUSTOMERS[3]["id"], "amount": 32545, "status": "paid", "date": date(2023, 6, 9)},
    {"customer_id": CUSTOMERS[4]["id"], "amount": 1250, "status": "paid", "date": date(2023, 6, 17)},
    {"customer_id": CUSTOMERS[5]["id"], "amount": 8546, "status": "paid", "date": date(2023, 6, 7)},
    {"customer_id": CUSTOMERS[1]["id"], "amount": 500, "status": "paid", "date": date(2023, 8, 19)},
    {"customer_id": CUSTOMERS[5]["id"], "amount": 8945, "status": "paid", "date": date(2023, 6, 3)},
    {"customer_id": CUSTOMERS[2]["id"], "amount": 1000, "status": "paid", "date": date(2022, 6, 5)},
]

REVENUE = [
    {"month": "Jan", "revenue": 2000},
    {"month": "Feb", "revenue": 1800},
    {"month": "Mar", "revenue": 2200},
    {"month": "Apr", "revenue": 2500},
    {"month": "May", "revenue": 2300},
    {"month": "Jun", "revenue": 3200},
    {"month": "Jul", "revenue": 3500},
    {"month": "Aug", "revenue": 3700},
    {"month": "Sep", "revenue": 2500},
    {"month": "Oct", "revenue": 2800},
    {"month": "Nov", "revenue": 3000},
    {"month": "Dec", "revenue": 4800},
]


@with_context(action="seed_database")
async def seed_dashboard_data(engine: AsyncEngine) -> Dict[str, int]:
    """
    Inserta los datos de ejemplo si la base está vacía.

    Args:
        engine: Engine async con las tablas ya creadas

    Returns:
        Filas insertadas por tabla (todo en 0 si ya había clientes)
    """
    async with engine.begin() as conn:
        existing = (await conn.execute(select(func.count()).select_from(Customer.__table__))).scalar_one()
        if existing:
            logger.info(f"Seed omitido: ya existen {existing} clientes")
            return {"customers": 0, "invoices": 0, "revenue": 0}

        await conn.execute(insert(Customer.__table__), CUSTOMERS)
        await conn.execute(insert(Invoice.__table__), INVOICES)
        await conn.execute(insert(Revenue.__table__), REVENUE)

    inserted = {
        "customers": len(CUSTOMERS),
        "invoices": len(INVOICES),
        "revenue": len(REVENUE),
    }
    logger.info(f"Seed completado: {inserted}")
    return inserted
