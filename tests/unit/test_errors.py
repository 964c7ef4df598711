"""
Tests para el manejo de errores de la capa de consultas.
"""

import logging

import pytest

from src.utils.errors import (
    DashboardError,
    DataAccessError,
    ErrorCategory,
    ErrorSeverity,
    ValidationError,
    handle_data_errors,
)
from src.utils.logger import LogContext, action_var, correlation_id_var


# ============================================================================
# TESTS: Excepciones
# ============================================================================

class TestDataAccessError:
    """Tests para DataAccessError."""

    def test_generic_message(self):
        error = DataAccessError("Error al obtener la factura.", operation="fetch_invoice_by_id")

        assert str(error) == "Error al obtener la factura."
        assert error.category == ErrorCategory.DATABASE
        assert error.severity == ErrorSeverity.HIGH
        assert error.context.operation == "fetch_invoice_by_id"
        assert isinstance(error, DashboardError)

    def test_user_message_includes_reference(self):
        """Test severidad alta agrega referencia al correlation id."""
        with LogContext(correlation_id="abcdef12-0000-0000-0000-000000000000"):
            error = DataAccessError("Error al obtener los clientes.")

        assert error.get_user_message() == "Error al obtener los clientes. (Referencia: abcdef12)"
        assert error.get_user_message(include_reference=False) == "Error al obtener los clientes."

    def test_to_dict(self):
        data = DataAccessError("Error al obtener las facturas.", operation="fetch_filtered_invoices").to_dict()

        assert data["category"] == "database"
        assert data["severity"] == "high"
        assert data["context"]["operation"] == "fetch_filtered_invoices"
        assert data["correlation_id"]


class TestValidationError:
    """Tests para ValidationError."""

    def test_field_and_category(self):
        error = ValidationError("Página inválida: 0", field="current_page")

        assert error.field == "current_page"
        assert error.category == ErrorCategory.VALIDATION
        assert error.severity == ErrorSeverity.LOW
        assert error.get_user_message() == error.user_message


# ============================================================================
# TESTS: handle_data_errors
# ============================================================================

class TestHandleDataErrors:
    """Tests para el decorador de operaciones de lectura."""

    async def test_returns_value(self):
        @handle_data_errors("Error al leer.")
        async def read():
            return [1, 2, 3]

        assert await read() == [1, 2, 3]

    async def test_unexpected_error_becomes_generic(self, caplog):
        """Test la causa se loggea y no viaja en la excepción."""
        @handle_data_errors("Error al leer.")
        async def read():
            raise KeyError("secret_column")

        with caplog.at_level(logging.ERROR):
            with pytest.raises(DataAccessError) as exc_info:
                await read()

        error = exc_info.value
        assert str(error) == "Error al leer."
        assert "secret_column" not in str(error)
        assert error.__cause__ is None
        assert error.__suppress_context__ is True
        assert error.context.operation == "read"
        assert "secret_column" in caplog.text

    async def test_dashboard_errors_pass_through(self):
        """Test errores propios se propagan sin envolver."""
        @handle_data_errors("Error al leer.")
        async def read():
            raise ValidationError("Página inválida: 0", field="current_page")

        with pytest.raises(ValidationError):
            await read()

    async def test_binds_action_context(self):
        """Test la acción y el correlation id quedan fijados durante la llamada."""
        @handle_data_errors("Error al leer.", operation="read_panel")
        async def read():
            return action_var.get(), correlation_id_var.get()

        action, correlation_id = await read()

        assert action == "read_panel"
        assert correlation_id
        assert action_var.get() is None

    def test_rejects_sync_functions(self):
        with pytest.raises(TypeError):
            @handle_data_errors("Error al leer.")
            def read():
                return None
