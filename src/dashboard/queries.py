"""
Consultas del Dashboard

Funciones de lectura para las vistas del dashboard. Cada función recibe
el cliente de consultas como primer argumento, lee, transforma las filas
en registros de presentación y calcula agregados simples.

Política de errores: la causa original se loggea donde ocurre y al
llamador solo llega un DataAccessError con mensaje genérico.
"""

import asyncio
from typing import Any, List, Mapping, Optional

from config.constants import (
    ITEMS_PER_PAGE,
    LATEST_INVOICES_SCAN_LIMIT,
    MINOR_UNITS_PER_MAJOR,
    TABLE_CUSTOMERS,
    TABLE_INVOICES,
    TABLE_REVENUE,
)
from config.settings import settings
from src.dashboard.aggregations import (
    coerce_related,
    latest_per_customer,
    matches_invoice_query,
    page_range,
    sum_by_status,
    total_pages,
    totals_by_customer,
)
from src.dashboard.definitions import (
    CardData,
    CustomerField,
    FormattedCustomersTable,
    InvoiceForm,
    InvoicesTableRow,
    LatestInvoice,
    Revenue,
)
from src.dashboard.formatting import format_currency
from src.database.query_client import QueryClientProtocol, QueryResult, contains_pattern
from src.utils.errors import DataAccessError, ValidationError, handle_data_errors
from src.utils.logger import get_logger

logger = get_logger(__name__)


def _ensure_ok(result: QueryResult, user_message: str) -> QueryResult:
    """Loggea el error del backend y lo reemplaza por uno genérico."""
    if result.error is not None:
        logger.error(
            f"Database Error: {result.error}",
            extra={
                "extra_data": {
                    "code": result.error.code,
                    "details": result.error.details,
                }
            }
        )
        raise DataAccessError(user_message)
    return result


def _to_table_row(invoice: Mapping[str, Any]) -> InvoicesTableRow:
    customer = coerce_related(invoice.get(TABLE_CUSTOMERS)) or {}
    return InvoicesTableRow(
        id=invoice["id"],
        amount=invoice["amount"],
        date=invoice["date"],
        status=invoice["status"],
        name=customer.get("name") or "",
        email=customer.get("email") or "",
        image_url=customer.get("image_url") or "",
    )


# ============================================================================
# INGRESOS Y TARJETAS
# ============================================================================

@handle_data_errors("Error al obtener los datos de ingresos.")
async def fetch_revenue(
    client: QueryClientProtocol,
    delay_seconds: Optional[float] = None
) -> List[Revenue]:
    """
    Lee la tabla de ingresos tal como está guardada.

    Simula una lectura lenta con una demora artificial antes de consultar
    (settings.REVENUE_FETCH_DELAY_SECONDS si no se indica).
    """
    if delay_seconds is None:
        delay_seconds = settings.get_revenue_delay()

    logger.info("Obteniendo datos de ingresos...")
    await asyncio.sleep(delay_seconds)

    result = _ensure_ok(
        await client.table(TABLE_REVENUE).select("*"),
        "Error al obtener los datos de ingresos."
    )

    logger.info(f"Ingresos obtenidos tras {delay_seconds:g} segundos")
    return [Revenue.model_validate(row) for row in result.data or []]


@handle_data_errors("Error al obtener las últimas facturas.")
async def fetch_latest_invoices(client: QueryClientProtocol) -> List[LatestInvoice]:
    """
    Última factura de cada cliente, de la más reciente a la más antigua.

    Revisa las LATEST_INVOICES_SCAN_LIMIT facturas más recientes y se queda
    con la primera de cada cliente.
    """
    result = _ensure_ok(
        await (
            client.table(TABLE_INVOICES)
            .select("id, amount, date")
            .embed(TABLE_CUSTOMERS, "id, name, image_url, email")
            .order("date", desc=True)
            .order("id")
            .limit(LATEST_INVOICES_SCAN_LIMIT)
        ),
        "Error al obtener las últimas facturas."
    )

    latest = [
        LatestInvoice(
            id=invoice["id"],
            amount=format_currency(invoice["amount"]),
            name=customer.get("name") or "",
            image_url=customer.get("image_url") or "",
            email=customer.get("email") or "",
        )
        for invoice, customer in latest_per_customer(result.data or [])
    ]

    logger.debug(f"Últimas facturas: {len(latest)} clientes")
    return latest


@handle_data_errors("Error al obtener los datos de las tarjetas.")
async def fetch_card_data(client: QueryClientProtocol) -> CardData:
    """Totales pagado/pendiente, cantidad de facturas y de clientes."""
    invoices = _ensure_ok(
        await client.table(TABLE_INVOICES).select("amount, status"),
        "Error al obtener los datos de las tarjetas."
    )
    totals = sum_by_status(invoices.data or [])

    customers = _ensure_ok(
        await client.table(TABLE_CUSTOMERS).select("id", count="exact", head=True),
        "Error al obtener el conteo de clientes."
    )

    return CardData(
        total_paid_invoices=totals.paid,
        total_pending_invoices=totals.pending,
        number_of_invoices=totals.count,
        number_of_customers=customers.count or 0,
    )


# ============================================================================
# TABLA DE FACTURAS
# ============================================================================

@handle_data_errors("Error al obtener las facturas.")
async def fetch_filtered_invoices(
    client: QueryClientProtocol,
    query: str,
    current_page: int
) -> List[InvoicesTableRow]:
    """
    Página de la tabla de facturas filtrada por texto.

    El servidor filtra por nombre de cliente y pagina; luego se filtra
    en memoria por email, monto, fecha, estado o nombre.

    Raises:
        ValidationError: si current_page es menor que 1
        DataAccessError: si la lectura falla
    """
    if current_page < 1:
        raise ValidationError(
            f"Página inválida: {current_page}",
            field="current_page",
            user_message="La página debe ser mayor o igual a 1."
        )

    start, end = page_range(current_page, ITEMS_PER_PAGE)
    result = _ensure_ok(
        await (
            client.table(TABLE_INVOICES)
            .select("id, amount, date, status")
            .embed(TABLE_CUSTOMERS, "name, email, image_url")
            .ilike(f"{TABLE_CUSTOMERS}.name", contains_pattern(query))
            .order("date", desc=True)
            .order("id")
            .range(start, end)
        ),
        "Error al obtener las facturas."
    )

    # Solo ve filas cuyo nombre ya coincidió en el servidor: una búsqueda
    # que solo coincide por email o monto no trae esas facturas.
    rows = [_to_table_row(invoice) for invoice in result.data or []]
    return [row for row in rows if matches_invoice_query(row, query)]


@handle_data_errors("Error al obtener el número total de facturas.")
async def fetch_invoices_pages(client: QueryClientProtocol, query: str) -> int:
    """Cantidad de páginas de la tabla de facturas para la búsqueda."""
    result = _ensure_ok(
        await (
            client.table(TABLE_INVOICES)
            .select("id", count="exact", head=True)
            .embed(TABLE_CUSTOMERS, "name")
            .ilike(f"{TABLE_CUSTOMERS}.name", contains_pattern(query))
        ),
        "Error al obtener el número total de facturas."
    )
    return total_pages(result.count, ITEMS_PER_PAGE)


@handle_data_errors("Error al obtener la factura.")
async def fetch_invoice_by_id(
    client: QueryClientProtocol,
    invoice_id: str
) -> Optional[InvoiceForm]:
    """
    Factura para edición con el monto en unidades mayores.

    Returns:
        InvoiceForm o None si la factura no existe
    """
    result = _ensure_ok(
        await (
            client.table(TABLE_INVOICES)
            .select("id, customer_id, amount, status")
            .eq("id", invoice_id)
            .maybe_single()
        ),
        "Error al obtener la factura."
    )

    invoice = coerce_related(result.data)
    if not invoice:
        logger.debug(f"Factura no encontrada: {invoice_id}")
        return None

    return InvoiceForm(
        id=invoice["id"],
        customer_id=invoice["customer_id"],
        amount=invoice["amount"] / MINOR_UNITS_PER_MAJOR,
        status=invoice["status"],
    )


# ============================================================================
# CLIENTES
# ============================================================================

@handle_data_errors("Error al obtener los clientes.")
async def fetch_customers(client: QueryClientProtocol) -> List[CustomerField]:
    """Todos los clientes (id, nombre) ordenados por nombre."""
    result = _ensure_ok(
        await client.table(TABLE_CUSTOMERS).select("id, name").order("name"),
        "Error al obtener los clientes."
    )
    return [CustomerField(id=row["id"], name=row["name"]) for row in result.data or []]


@handle_data_errors("Error al obtener la tabla de clientes.")
async def fetch_filtered_customers(
    client: QueryClientProtocol,
    query: str
) -> List[FormattedCustomersTable]:
    """
    Clientes cuyo nombre o email contiene el texto, con totales de facturas.

    Hace dos lecturas (clientes, luego sus facturas) y agrupa en memoria
    por customer_id.
    """
    customers_result = _ensure_ok(
        await (
            client.table(TABLE_CUSTOMERS)
            .select("id, name, email, image_url")
            .or_ilike(("name", "email"), contains_pattern(query))
            .order("name")
        ),
        "Error al obtener la tabla de clientes."
    )
    customers = customers_result.data or []
    if not customers:
        return []

    customer_ids = [customer["id"] for customer in customers]
    invoices_result = _ensure_ok(
        await (
            client.table(TABLE_INVOICES)
            .select("customer_id, amount, status")
            .in_("customer_id", customer_ids)
        ),
        "Error al obtener las facturas de los clientes."
    )
    totals = totals_by_customer(customer_ids, invoices_result.data or [])

    return [
        FormattedCustomersTable(
            id=customer["id"],
            name=customer["name"],
            email=customer.get("email") or "",
            image_url=customer.get("image_url") or "",
            total_invoices=totals[customer["id"]].count,
            total_pending=format_currency(totals[customer["id"]].pending),
            total_paid=format_currency(totals[customer["id"]].paid),
        )
        for customer in customers
    ]
