"""
Modelos de Base de Datos

Define las tablas que lee el dashboard usando SQLAlchemy.
Los montos se guardan como enteros en unidades menores (centavos).
"""

from sqlalchemy import (
    Column, Integer, String, Date, ForeignKey, Index, CheckConstraint
)
from sqlalchemy.orm import relationship
import uuid

from src.database.connection import Base
from config.constants import InvoiceStatus


def _new_id() -> str:
    return str(uuid.uuid4())


class Customer(Base):
    """Modelo de Cliente"""
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=_new_id, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    image_url = Column(String(255), nullable=False)

    invoices = relationship("Invoice", back_populates="customer")

    __table_args__ = (
        Index('ix_customers_name', 'name'),
    )

    def __repr__(self):
        return f"<Customer {self.name}>"


class Invoice(Base):
    """
    Modelo de Factura.

    Cada factura pertenece a lo sumo a un cliente (customer_id).
    """
    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True, default=_new_id, index=True)
    customer_id = Column(
        String(36),
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    amount = Column(Integer, nullable=False)  # Centavos
    status = Column(String(20), nullable=False, default=InvoiceStatus.PENDING.value)
    date = Column(Date, nullable=False)

    customer = relationship("Customer", back_populates="invoices")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'paid')",
            name='ck_invoices_status'
        ),
        Index('ix_invoices_date', 'date'),
    )

    def __repr__(self):
        return f"<Invoice {self.id} {self.status}>"


class Revenue(Base):
    """Ingresos por periodo (solo lectura para el dashboard)"""
    __tablename__ = "revenue"

    month = Column(String(4), primary_key=True)
    revenue = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<Revenue {self.month}={self.revenue}>"
