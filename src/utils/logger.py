"""
Sistema de Logging Estructurado

Configura el logging para toda la aplicación con:
- Salida a consola (colores en desarrollo, JSON en producción)
- Archivo rotativo dashboard.log (JSON, nivel DEBUG)
- Archivo rotativo errors.log (JSON, solo errores)
- Soporte para contexto (correlation ID, acción en curso)
"""

import asyncio
import logging
import json
import uuid
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional
from contextvars import ContextVar
from functools import wraps

# Context variables para información de contexto
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)
action_var: ContextVar[Optional[str]] = ContextVar('action', default=None)


# ============================================================================
# FORMATTERS
# ============================================================================

class ColoredFormatter(logging.Formatter):
    """
    Formatter con colores para desarrollo.
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # Copia para no alterar el record que ven otros handlers
        record = logging.makeLogRecord(record.__dict__)
        record.correlation_id = correlation_id_var.get() or '-'
        record.action = action_var.get() or '-'

        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{record.levelname}{self.RESET}"

        return super().format(record)


class JSONFormatter(logging.Formatter):
    """
    Formatter JSON para producción.

    Una línea JSON por registro, con el servicio, el correlation id y la
    acción en curso cuando existen.
    """

    def __init__(self, service: Optional[str] = None):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        correlation_id = correlation_id_var.get()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        action = action_var.get()
        if action:
            log_data["action"] = action

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        if hasattr(record, 'extra_data'):
            log_data["extra"] = record.extra_data

        return json.dumps(log_data, ensure_ascii=False, default=str)


# ============================================================================
# LOGGER CONFIGURATION
# ============================================================================

_configured = False
_log_level = logging.INFO

CONSOLE_FORMAT = '%(asctime)s | %(levelname)-8s | %(action)s | %(name)s:%(lineno)d | %(message)s'
MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUPS = 5


def _rotating_handler(path: Path, level: int, service: Optional[str]) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter(service=service))
    return handler


def setup_logging(
    environment: str = "development",
    log_level: str = "INFO",
    log_dir: str = "logs",
    log_to_file: bool = True,
    service: Optional[str] = None
) -> None:
    """
    Configura el sistema de logging según el entorno.

    Args:
        environment: Entorno (development, staging, production)
        log_level: Nivel de log de consola (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directorio para archivos de log
        log_to_file: Si escribir dashboard.log y errors.log además de la consola
        service: Nombre del servicio en los registros JSON
    """
    global _configured, _log_level

    if _configured:
        return

    _log_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Limpiar handlers existentes
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(_log_level)

    if environment == "production":
        console_handler.setFormatter(JSONFormatter(service=service))
    else:
        console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))

    root_logger.addHandler(console_handler)

    if log_to_file:
        logs_path = Path(log_dir)
        logs_path.mkdir(parents=True, exist_ok=True)

        # Archivos siempre en JSON, sin importar el entorno
        root_logger.addHandler(_rotating_handler(logs_path / "dashboard.log", logging.DEBUG, service))
        root_logger.addHandler(_rotating_handler(logs_path / "errors.log", logging.ERROR, service))

    _configured = True

    root_logger.debug(
        f"Logging configurado: environment={environment}, level={log_level}, archivos={log_to_file}"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Obtiene un logger del módulo; la primera llamada configura el
    logging desde settings.
    """
    if not _configured:
        try:
            from config.settings import settings
        except (ImportError, ValueError) as e:
            # Settings inválidos: consola con valores por defecto
            setup_logging(log_to_file=False)
            logging.getLogger(__name__).warning(f"Logging sin settings: {e}")
        else:
            setup_logging(
                environment=settings.ENVIRONMENT.value,
                log_level=settings.LOG_LEVEL,
                log_dir=settings.LOG_DIR,
                log_to_file=settings.LOG_TO_FILE,
                service=settings.PROJECT_NAME
            )

    return logging.getLogger(name)


# ============================================================================
# CONTEXT MANAGEMENT
# ============================================================================

def new_correlation_id() -> str:
    """
    Genera y establece un nuevo correlation ID.

    Returns:
        El correlation ID generado
    """
    cid = str(uuid.uuid4())
    correlation_id_var.set(cid)
    return cid


def get_correlation_id() -> Optional[str]:
    """Obtiene el correlation ID actual."""
    return correlation_id_var.get()


class LogContext:
    """
    Context manager para establecer contexto de logging temporalmente.

    Uso:
        with LogContext(action="fetch_card_data"):
            logger.info("Este log incluirá el contexto")
    """

    def __init__(
        self,
        correlation_id: str = None,
        action: str = None,
        auto_correlation: bool = True
    ):
        self.correlation_id = correlation_id
        self.action = action
        self.auto_correlation = auto_correlation

        self._prev_correlation = None
        self._prev_action = None

    def __enter__(self):
        self._prev_correlation = correlation_id_var.get()
        self._prev_action = action_var.get()

        if self.correlation_id:
            correlation_id_var.set(self.correlation_id)
        elif self.auto_correlation and not self._prev_correlation:
            correlation_id_var.set(str(uuid.uuid4()))

        if self.action:
            action_var.set(self.action)

        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Restaurar estado anterior
        correlation_id_var.set(self._prev_correlation)
        action_var.set(self._prev_action)
        return False


def with_context(**context_kwargs):
    """
    Decorador para establecer contexto de logging en una función.

    Uso:
        @with_context(action="seed_database")
        async def seed(engine):
            ...
    """
    def decorator(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            with LogContext(**context_kwargs):
                return await func(*args, **kwargs)

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            with LogContext(**context_kwargs):
                return func(*args, **kwargs)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def log_exception(logger: logging.Logger, message: str, exc: BaseException) -> None:
    """
    Loggea una excepción con contexto completo.

    Args:
        logger: Logger a usar
        message: Mensaje descriptivo
        exc: Excepción a loggear
    """
    logger.error(
        f"{message}: {type(exc).__name__}: {str(exc)}",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={
            "extra_data": {
                "exception_type": type(exc).__name__,
                "exception_message": str(exc),
            }
        }
    )


def log_performance(logger: logging.Logger, operation: str, duration_ms: float) -> None:
    """
    Loggea métricas de rendimiento (nivel DEBUG).

    Args:
        logger: Logger a usar
        operation: Nombre de la operación
        duration_ms: Duración en milisegundos
    """
    logger.debug(
        f"Performance: {operation} completed in {duration_ms:.2f}ms",
        extra={
            "extra_data": {
                "metric_type": "performance",
                "operation": operation,
                "duration_ms": duration_ms,
            }
        }
    )
