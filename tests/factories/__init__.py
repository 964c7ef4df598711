"""
Factories para Tests

Proporciona factories para crear filas de prueba de forma limpia y reutilizable.
Sigue el patrón Factory de factory-boy para testing.

Uso:
    from tests.factories import CustomerFactory, InvoiceFactory

    customer = CustomerFactory(name="Amy Burns")
    invoices = InvoiceFactory.create_batch(3, customer_id=customer["id"])
"""

from tests.factories.customer import CustomerFactory
from tests.factories.invoice import InvoiceFactory
from tests.factories.revenue import RevenueFactory
from tests.factories.client import FakeQueryClient

__all__ = [
    "CustomerFactory",
    "InvoiceFactory",
    "RevenueFactory",
    "FakeQueryClient",
]
