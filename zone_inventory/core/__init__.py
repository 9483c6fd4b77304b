"""
Core модули Zone Inventory.

- Device, Inventory: модель инвентаря
- RunContext: контекст выполнения
- Structured Logging: JSON/Human-readable логирование
- exceptions: типизированные ошибки
- constants: LOC, порты, приватные зоны
"""

from .exceptions import (
    ZoneInventoryError,
    DirectoryError,
    TransportError,
    NotFoundError,
    ProtocolError,
    AuthError,
    TransferError,
    CorrelationError,
    UnsupportedRecordError,
    FetchError,
    ConfigError,
    format_error_for_log,
    is_retryable,
)
from .logging import (
    get_logger,
    setup_logging,
    setup_logging_from_config,
    StructuredLogger,
    JSONFormatter,
    HumanFormatter,
    LogContext,
    OperationLog,
    LogConfig,
    RotationType,
)
from .context import RunContext, get_current_context, set_current_context
from .models import Device, Inventory

__all__ = [
    "ZoneInventoryError",
    "DirectoryError",
    "TransportError",
    "NotFoundError",
    "ProtocolError",
    "AuthError",
    "TransferError",
    "CorrelationError",
    "UnsupportedRecordError",
    "FetchError",
    "ConfigError",
    "format_error_for_log",
    "is_retryable",
    "get_logger",
    "setup_logging",
    "setup_logging_from_config",
    "StructuredLogger",
    "JSONFormatter",
    "HumanFormatter",
    "LogContext",
    "OperationLog",
    "LogConfig",
    "RotationType",
    "RunContext",
    "get_current_context",
    "set_current_context",
    "Device",
    "Inventory",
]
