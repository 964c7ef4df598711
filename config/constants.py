"""
Constantes del sistema

Define valores que no cambian durante la ejecución.
"""

from enum import Enum


class InvoiceStatus(str, Enum):
    """Estados posibles de una factura"""
    PENDING = "pending"
    PAID = "paid"


# Tablas consultadas por el dashboard
TABLE_CUSTOMERS = "customers"
TABLE_INVOICES = "invoices"
TABLE_REVENUE = "revenue"

# Paginación de la tabla de facturas
ITEMS_PER_PAGE = 6

# Facturas recientes revisadas para armar "últimas facturas por cliente"
LATEST_INVOICES_SCAN_LIMIT = 100

# Conversión de unidades menores (centavos) a unidades mayores
MINOR_UNITS_PER_MAJOR = 100
