"""
Tests para las agregaciones en memoria del dashboard.

Paginación, normalización de relaciones, deduplicación por cliente,
sumas por estado, búsqueda de texto y totales por cliente.
"""

import pytest
from datetime import date

from src.dashboard.aggregations import (
    StatusTotals,
    coerce_related,
    latest_per_customer,
    matches_invoice_query,
    page_range,
    sum_by_status,
    total_pages,
    totals_by_customer,
)
from src.dashboard.definitions import InvoicesTableRow
from tests.factories import InvoiceFactory


# ============================================================================
# TESTS: Paginación
# ============================================================================

class TestPagination:
    """Tests para page_range y total_pages."""

    @pytest.mark.parametrize("page,expected", [
        (1, (0, 5)),
        (2, (6, 11)),
        (3, (12, 17)),
    ])
    def test_page_range(self, page, expected):
        """Test rango inclusivo de seis filas por página."""
        assert page_range(page) == expected

    def test_page_range_custom_size(self):
        """Test tamaño de página distinto."""
        assert page_range(2, per_page=10) == (10, 19)

    @pytest.mark.parametrize("count,expected", [
        (0, 0),
        (1, 1),
        (6, 1),
        (7, 2),
        (12, 2),
        (13, 3),
    ])
    def test_total_pages(self, count, expected):
        """Test división entera hacia arriba."""
        assert total_pages(count) == expected

    def test_total_pages_without_count(self):
        """Test conteo ausente equivale a cero."""
        assert total_pages(None) == 0


# ============================================================================
# TESTS: coerce_related
# ============================================================================

class TestCoerceRelated:
    """Tests para la normalización de relaciones embebidas."""

    def test_mapping(self):
        customer = {"id": "c1", "name": "Lee"}
        assert coerce_related(customer) is customer

    def test_list_takes_first(self):
        """Test lista de registros: se toma el primero."""
        related = [{"id": "c1"}, {"id": "c2"}]
        assert coerce_related(related) == {"id": "c1"}

    def test_empty_list(self):
        assert coerce_related([]) is None

    def test_none(self):
        assert coerce_related(None) is None

    def test_unexpected_shape(self):
        """Test forma desconocida lanza TypeError."""
        with pytest.raises(TypeError):
            coerce_related("c1")

        with pytest.raises(TypeError):
            coerce_related(["c1"])


# ============================================================================
# TESTS: latest_per_customer
# ============================================================================

class TestLatestPerCustomer:
    """Tests para la deduplicación de últimas facturas."""

    def test_keeps_first_invoice_per_customer(self):
        """Test C1 aparece una vez con su factura más reciente."""
        invoices = [
            {"id": "i1", "amount": 100, "customers": {"id": "C1", "name": "Uno"}},
            {"id": "i2", "amount": 200, "customers": {"id": "C2", "name": "Dos"}},
            {"id": "i3", "amount": 300, "customers": {"id": "C1", "name": "Uno"}},
        ]

        latest = latest_per_customer(invoices)

        assert [invoice["id"] for invoice, _ in latest] == ["i1", "i2"]
        assert [customer["id"] for _, customer in latest] == ["C1", "C2"]

    def test_list_shaped_relation(self):
        """Test relación como lista se trata igual que como dict."""
        invoices = [
            {"id": "i1", "customers": [{"id": "C1"}]},
            {"id": "i2", "customers": {"id": "C1"}},
        ]

        latest = latest_per_customer(invoices)

        assert len(latest) == 1
        assert latest[0][1] == {"id": "C1"}

    def test_skips_rows_without_customer(self):
        """Test filas sin cliente resoluble se descartan."""
        invoices = [
            {"id": "i1", "customers": None},
            {"id": "i2", "customers": []},
            {"id": "i3", "customers": {"name": "Sin id"}},
            {"id": "i4", "customers": {"id": "C9"}},
        ]

        latest = latest_per_customer(invoices)

        assert [invoice["id"] for invoice, _ in latest] == ["i4"]

    def test_empty(self):
        assert latest_per_customer([]) == []


# ============================================================================
# TESTS: sum_by_status
# ============================================================================

class TestSumByStatus:
    """Tests para las sumas por estado."""

    def test_sums_and_counts(self):
        """Test pagadas y pendientes por separado, conteo total."""
        invoices = [
            {"amount": 100, "status": "paid"},
            {"amount": 50, "status": "pending"},
            {"amount": 25, "status": "paid"},
        ]

        totals = sum_by_status(invoices)

        assert totals == StatusTotals(paid=125, pending=50, count=3)

    def test_unknown_status_counted_not_summed(self):
        """Test estado desconocido cuenta pero no suma."""
        totals = sum_by_status([{"amount": 10, "status": "void"}])

        assert totals.count == 1
        assert totals.paid == 0
        assert totals.pending == 0

    def test_empty(self):
        assert sum_by_status([]) == StatusTotals()

    def test_random_invoices(self):
        """Test con facturas generadas."""
        invoices = InvoiceFactory.build_batch(5) + InvoiceFactory.build_batch(4, pagada=True)

        totals = sum_by_status(invoices)

        assert totals.count == 9
        assert totals.paid == sum(i["amount"] for i in invoices if i["status"] == "paid")
        assert totals.pending == sum(i["amount"] for i in invoices if i["status"] == "pending")


# ============================================================================
# TESTS: matches_invoice_query
# ============================================================================

class TestMatchesInvoiceQuery:
    """Tests para la búsqueda de texto en filas de facturas."""

    @pytest.fixture
    def row(self) -> InvoicesTableRow:
        return InvoicesTableRow(
            id="i1",
            amount=15795,
            date=date(2023, 4, 20),
            status="pending",
            name="Lee Robinson",
            email="lee@robinson.com",
            image_url="/customers/lee-robinson.png",
        )

    @pytest.mark.parametrize("query", [
        "robinson.com",
        "1579",
        "2023-04",
        "pend",
        "Lee",
        "",
    ])
    def test_matches(self, row, query):
        assert matches_invoice_query(row, query)

    @pytest.mark.parametrize("query", ["LEE", "PENDING", "ROBINSON.COM"])
    def test_case_insensitive(self, row, query):
        """Test mayúsculas en el texto no afectan ningún campo."""
        assert matches_invoice_query(row, query)

    def test_no_match(self, row):
        assert not matches_invoice_query(row, "paid")


# ============================================================================
# TESTS: totals_by_customer
# ============================================================================

class TestTotalsByCustomer:
    """Tests para los totales por cliente."""

    def test_groups_by_customer(self):
        invoices = [
            {"customer_id": "A", "amount": 100, "status": "paid"},
            {"customer_id": "A", "amount": 50, "status": "pending"},
            {"customer_id": "A", "amount": 25, "status": "paid"},
            {"customer_id": "B", "amount": 10, "status": "pending"},
        ]

        totals = totals_by_customer(["A", "B"], invoices)

        assert totals["A"] == StatusTotals(paid=125, pending=50, count=3)
        assert totals["B"] == StatusTotals(paid=0, pending=10, count=1)

    def test_customer_without_invoices(self):
        """Test cliente sin facturas aparece con totales en cero."""
        totals = totals_by_customer(["A", "Z"], [
            {"customer_id": "A", "amount": 1, "status": "paid"},
        ])

        assert totals["Z"] == StatusTotals()
        assert list(totals) == ["A", "Z"]

    def test_ignores_other_customers(self):
        totals = totals_by_customer(["A"], [
            {"customer_id": "X", "amount": 999, "status": "paid"},
        ])

        assert totals == {"A": StatusTotals()}
