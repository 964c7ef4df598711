#!/usr/bin/env python3
"""
Script para cargar datos de ejemplo del dashboard

Crea las tablas y carga clientes, facturas e ingresos de prueba
si la base está vacía.

Uso:
    python scripts/seed_database.py

Opciones:
    --database-url URL   Base de datos destino (default: settings.DATABASE_URL)
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Agregar el directorio raíz al path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.database.connection import init_async_db, create_tables_async, close_async_db
from src.database.seed import seed_dashboard_data


async def run(database_url: str = None) -> None:
    engine = init_async_db(database_url)
    try:
        print("Creando tablas...")
        await create_tables_async(engine)

        inserted = await seed_dashboard_data(engine)
        if any(inserted.values()):
            print(f"✅ Datos cargados: {inserted}")
        else:
            print("ℹ️  La base ya tenía datos, no se cargó nada")
    finally:
        await close_async_db()


def main():
    parser = argparse.ArgumentParser(description="Cargar datos de ejemplo del dashboard")
    parser.add_argument("--database-url", type=str, default=None, help="URL async de la base de datos")
    args = parser.parse_args()

    asyncio.run(run(args.database_url))


if __name__ == "__main__":
    main()
