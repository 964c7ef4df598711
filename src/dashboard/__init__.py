"""
Capa de Consultas del Dashboard

Funciones de lectura que alimentan las vistas del dashboard: ingresos,
últimas facturas, tarjetas de totales, tabla paginada de facturas,
edición de factura y tabla de clientes.

Uso:
    from src.database.connection import get_query_client
    from src.dashboard import fetch_card_data

    card = await fetch_card_data(get_query_client())
"""

from .queries import (
    fetch_revenue,
    fetch_latest_invoices,
    fetch_card_data,
    fetch_filtered_invoices,
    fetch_invoices_pages,
    fetch_invoice_by_id,
    fetch_customers,
    fetch_filtered_customers,
)

__all__ = [
    "fetch_revenue",
    "fetch_latest_invoices",
    "fetch_card_data",
    "fetch_filtered_invoices",
    "fetch_invoices_pages",
    "fetch_invoice_by_id",
    "fetch_customers",
    "fetch_filtered_customers",
]
