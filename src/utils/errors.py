"""
Sistema Centralizado de Manejo de Errores

Proporciona:
- Tipos de error categorizados (DashboardError, DataAccessError, etc.)
- Mensajes genéricos y seguros para mostrar al usuario
- Correlation IDs para soporte técnico
- Decorador para convertir fallas inesperadas en DataAccessError
"""

import asyncio
from enum import Enum
from functools import wraps
from typing import Optional, Callable, Any, Dict
from dataclasses import dataclass

from src.utils.logger import (
    get_logger,
    new_correlation_id,
    get_correlation_id,
    log_exception,
    LogContext,
)

logger = get_logger(__name__)


# ============================================================================
# ERROR CATEGORIES
# ============================================================================

class ErrorCategory(str, Enum):
    """Categorías de error para clasificación."""
    VALIDATION = "VALIDATION"
    DATABASE = "DATABASE"
    INTERNAL = "INTERNAL"


class ErrorSeverity(str, Enum):
    """Severidad del error para priorización."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


# ============================================================================
# USER-FRIENDLY MESSAGES
# ============================================================================

USER_MESSAGES = {
    ErrorCategory.VALIDATION: (
        "Los datos ingresados no son válidos."
    ),
    ErrorCategory.DATABASE: (
        "No se pudo obtener la información del panel."
    ),
    ErrorCategory.INTERNAL: (
        "Ocurrió un error inesperado."
    ),
}


# ============================================================================
# ERROR CONTEXT
# ============================================================================

@dataclass
class ErrorContext:
    """Contexto adicional para un error."""
    operation: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None


# ============================================================================
# CUSTOM EXCEPTIONS
# ============================================================================

class DashboardError(Exception):
    """
    Excepción base para errores de la capa de consultas del dashboard.

    Incluye categoría, severidad y mensaje amigable.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        user_message: Optional[str] = None,
        context: Optional[ErrorContext] = None
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.user_message = user_message or USER_MESSAGES.get(
            category, USER_MESSAGES[ErrorCategory.INTERNAL]
        )
        self.context = context or ErrorContext()
        self.correlation_id = get_correlation_id() or new_correlation_id()

    def get_user_message(self, include_reference: bool = True) -> str:
        """Obtiene el mensaje para mostrar al usuario."""
        if include_reference and self.severity in (
            ErrorSeverity.HIGH, ErrorSeverity.CRITICAL
        ):
            return f"{self.user_message} (Referencia: {self.correlation_id[:8]})"
        return self.user_message

    def to_dict(self) -> Dict[str, Any]:
        """Convierte el error a diccionario para logging."""
        return {
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "correlation_id": self.correlation_id,
            "context": {
                "operation": self.context.operation,
                "entity_type": self.context.entity_type,
                "entity_id": self.context.entity_id,
                "extra": self.context.extra,
            },
        }


class DataAccessError(DashboardError):
    """
    Falla de lectura o conteo contra la base de datos.

    El mensaje es siempre genérico: el detalle del backend se loggea
    donde ocurre y nunca viaja en la excepción.
    """

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            category=ErrorCategory.DATABASE,
            severity=ErrorSeverity.HIGH,
            user_message=message,
            context=ErrorContext(operation=operation),
            **kwargs
        )


class ValidationError(DashboardError):
    """Error de validación de datos de entrada."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        user_message: Optional[str] = None,
        **kwargs
    ):
        self.field = field
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            user_message=user_message,
            **kwargs
        )


# ============================================================================
# ERROR HANDLER DECORATOR
# ============================================================================

def handle_data_errors(
    user_message: str,
    operation: Optional[str] = None
) -> Callable:
    """
    Decorador para operaciones de lectura del dashboard.

    - Ejecuta la corutina dentro de un LogContext (correlation id + acción)
    - Los DashboardError se propagan sin cambios (ya fueron loggeados)
    - Cualquier otra excepción se loggea con su causa y se relanza como
      DataAccessError con el mensaje genérico

    Args:
        user_message: Mensaje genérico para el llamador
        operation: Nombre de la operación (default: nombre de la función)

    Usage:
        @handle_data_errors("Error al obtener la factura.")
        async def fetch_invoice_by_id(client, invoice_id):
            ...
    """
    def decorator(func: Callable) -> Callable:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError("handle_data_errors solo admite funciones async")

        action = operation or func.__name__

        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            with LogContext(action=action):
                try:
                    return await func(*args, **kwargs)
                except DashboardError:
                    raise
                except Exception as e:
                    log_exception(logger, f"Error inesperado en {action}", e)
                    raise DataAccessError(user_message, operation=action) from None

        return wrapper

    return decorator


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ErrorCategory",
    "ErrorSeverity",
    "ErrorContext",
    "DashboardError",
    "DataAccessError",
    "ValidationError",
    "handle_data_errors",
    "USER_MESSAGES",
]
