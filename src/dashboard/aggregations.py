"""
Agregaciones en memoria del Dashboard

Funciones puras sobre las filas ya leídas: paginación, deduplicación
por cliente, sumas por estado, búsqueda de texto y totales por cliente.
No hacen I/O ni mutan las filas recibidas.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from config.constants import ITEMS_PER_PAGE, InvoiceStatus
from src.dashboard.definitions import InvoicesTableRow


@dataclass
class StatusTotals:
    """Montos en centavos agrupados por estado"""
    paid: int = 0
    pending: int = 0
    count: int = 0

    def add(self, amount: int, status: Optional[str]) -> None:
        self.count += 1
        if status == InvoiceStatus.PAID.value:
            self.paid += amount
        elif status == InvoiceStatus.PENDING.value:
            self.pending += amount


# ============================================================================
# PAGINACIÓN
# ============================================================================

def page_range(current_page: int, per_page: int = ITEMS_PER_PAGE) -> Tuple[int, int]:
    """
    Rango de filas (inclusive, base 0) de una página base 1.

    page_range(1) -> (0, 5); page_range(3) -> (12, 17)
    """
    start = (current_page - 1) * per_page
    return start, start + per_page - 1


def total_pages(count: Optional[int], per_page: int = ITEMS_PER_PAGE) -> int:
    """Número de páginas para count filas (división entera hacia arriba)."""
    return -(-(count or 0) // per_page)


# ============================================================================
# RELACIONES EMBEBIDAS
# ============================================================================

def coerce_related(value: Any) -> Optional[Mapping[str, Any]]:
    """
    Normaliza una relación embebida a un solo registro.

    Según el backend, la relación llega como dict, como lista de dicts
    o como None; siempre se toma el primer registro.
    """
    if value is None:
        return None
    if isinstance(value, Mapping):
        return value
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        first = value[0]
        if first is not None and not isinstance(first, Mapping):
            raise TypeError(f"Relación embebida con forma inesperada: {type(first).__name__}")
        return first
    raise TypeError(f"Relación embebida con forma inesperada: {type(value).__name__}")


# ============================================================================
# FACTURAS
# ============================================================================

def latest_per_customer(
    invoices: Iterable[Mapping[str, Any]],
    relation: str = "customers"
) -> List[Tuple[Mapping[str, Any], Mapping[str, Any]]]:
    """
    Conserva solo la primera factura de cada cliente.

    Las facturas deben venir ordenadas de la más reciente a la más antigua;
    el orden se preserva. Las filas sin cliente resoluble se descartan.

    Returns:
        Lista de pares (factura, cliente)
    """
    seen = set()
    latest = []
    for invoice in invoices:
        customer = coerce_related(invoice.get(relation))
        customer_id = customer.get("id") if customer else None
        if not customer_id or customer_id in seen:
            continue
        seen.add(customer_id)
        latest.append((invoice, customer))
    return latest


def sum_by_status(invoices: Iterable[Mapping[str, Any]]) -> StatusTotals:
    """Suma montos pagados y pendientes y cuenta todas las facturas."""
    totals = StatusTotals()
    for invoice in invoices:
        totals.add(invoice.get("amount") or 0, invoice.get("status"))
    return totals


def matches_invoice_query(row: InvoicesTableRow, query: str) -> bool:
    """
    Búsqueda de subcadena sin distinguir mayúsculas.

    Coincide si el texto aparece en email, monto, fecha, estado o
    nombre del cliente.
    """
    needle = query.lower()
    haystack = (
        row.email,
        str(row.amount),
        row.date.isoformat(),
        row.status,
        row.name,
    )
    return any(needle in field.lower() for field in haystack)


# ============================================================================
# CLIENTES
# ============================================================================

def totals_by_customer(
    customer_ids: Sequence[str],
    invoices: Iterable[Mapping[str, Any]]
) -> Dict[str, StatusTotals]:
    """
    Agrupa facturas por customer_id y acumula totales.

    Todos los clientes pedidos aparecen en el resultado, aun sin facturas.
    Las facturas de clientes no pedidos se ignoran.
    """
    grouped: Dict[str, StatusTotals] = defaultdict(StatusTotals)
    wanted = set(customer_ids)
    for invoice in invoices:
        customer_id = invoice.get("customer_id")
        if customer_id in wanted:
            grouped[customer_id].add(invoice.get("amount") or 0, invoice.get("status"))
    return {customer_id: grouped.get(customer_id, StatusTotals()) for customer_id in customer_ids}
