"""
Utilidades del Sistema

Módulo que exporta las utilidades compartidas:
- Logger: Logging estructurado con contexto
- Errors: Errores de la capa de consultas y decorador de lectura
"""

# Logger
from src.utils.logger import (
    get_logger,
    setup_logging,
    new_correlation_id,
    get_correlation_id,
    LogContext,
    with_context,
    log_exception,
    log_performance,
)

# Errors
from src.utils.errors import (
    ErrorCategory,
    ErrorSeverity,
    ErrorContext,
    DashboardError,
    DataAccessError,
    ValidationError,
    handle_data_errors,
)

__all__ = [
    # Logger
    "get_logger",
    "setup_logging",
    "new_correlation_id",
    "get_correlation_id",
    "LogContext",
    "with_context",
    "log_exception",
    "log_performance",
    # Errors
    "ErrorCategory",
    "ErrorSeverity",
    "ErrorContext",
    "DashboardError",
    "DataAccessError",
    "ValidationError",
    "handle_data_errors",
]
