"""
Modelos Pydantic del Dashboard

Registros que devuelven las consultas del dashboard. Se crean en cada
llamada y no se persisten.
"""

import datetime
from decimal import Decimal
from typing import Union

from pydantic import BaseModel, ConfigDict


class Revenue(BaseModel):
    """Ingresos de un periodo tal como están guardados"""
    model_config = ConfigDict(extra="allow")

    month: str
    revenue: Union[int, float, Decimal]


class LatestInvoice(BaseModel):
    """Última factura de un cliente, con monto ya formateado"""
    id: str
    name: str
    image_url: str
    email: str
    amount: str


class CardData(BaseModel):
    """Totales de las tarjetas del dashboard (montos en centavos)"""
    total_paid_invoices: int
    total_pending_invoices: int
    number_of_invoices: int
    number_of_customers: int


class InvoicesTableRow(BaseModel):
    """Fila aplanada de la tabla de facturas"""
    id: str
    amount: int
    date: datetime.date
    status: str
    name: str
    email: str
    image_url: str


class InvoiceForm(BaseModel):
    """Factura para el formulario de edición (monto en unidades mayores)"""
    id: str
    customer_id: str
    amount: float
    status: str


class CustomerField(BaseModel):
    """Opción de cliente para selects"""
    id: str
    name: str


class FormattedCustomersTable(BaseModel):
    """Fila de la tabla de clientes con totales agregados"""
    id: str
    name: str
    email: str
    image_url: str
    total_invoices: int
    total_pending: str
    total_paid: str
