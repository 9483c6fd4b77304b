"""
Типизированные исключения для Zone Inventory.

Иерархия:
    ZoneInventoryError (базовый)
    ├── DirectoryError (операции с DNS сервером)
    │   ├── TransportError (сеть, резолвинг)
    │   │   └── NotFoundError (хост не найден)
    │   ├── ProtocolError (rcode != NOERROR)
    │   └── AuthError (TSIG ключ/подпись отклонены)
    ├── TransferError (AXFR прерван)
    ├── CorrelationError (битый граф записей)
    │   └── UnsupportedRecordError (неизвестный тип записи)
    ├── FetchError (загрузка удалённого снимка)
    └── ConfigError (конфигурация)

Пример использования:
    from zone_inventory.core.exceptions import TransferError, AuthError

    try:
        inventory = builder.build(["example.org."], ["168.192.in-addr.arpa."])
    except TransferError as e:
        logger.error(f"AXFR ошибка: {e.zone} - {e.message}")
"""

from typing import Optional, Any


class ZoneInventoryError(Exception):
    """
    Базовое исключение для всех ошибок Zone Inventory.

    Attributes:
        message: Описание ошибки
        details: Дополнительные детали (dict)
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_dict(self) -> dict:
        """Сериализация для логов/отчётов."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# === Directory Errors ===

class DirectoryError(ZoneInventoryError):
    """
    Ошибка при работе с DNS сервером.

    Attributes:
        zone: Зона в которой выполнялась операция
        name: Имя записи (если есть)
        operation: Операция (insert, remove_rrset, lookup, ...)
    """

    def __init__(
        self,
        message: str,
        zone: Optional[str] = None,
        name: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.zone = zone
        self.name = name
        self.operation = operation
        details = details or {}
        if zone:
            details["zone"] = zone
        if name:
            details["name"] = name
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class TransportError(DirectoryError):
    """
    Ошибка сети или резолвинга.

    Никогда не повторяется внутри движка.

    Пример:
        raise TransportError("Connection refused", zone="example.org.", operation="insert")
    """
    pass


class NotFoundError(TransportError):
    """
    Хост сервера не резолвится.

    Attributes:
        host: Имя хоста

    Пример:
        raise NotFoundError("Host not found", host="ns1.example.org")
    """

    def __init__(
        self,
        message: str,
        host: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.host = host
        details = details or {}
        if host:
            details["host"] = host
        super().__init__(message, operation="resolve", details=details)


class ProtocolError(DirectoryError):
    """
    Сервер вернул не-успешный статус.

    Attributes:
        rcode: Текстовый код ответа (REFUSED, SERVFAIL, ...)

    Пример:
        raise ProtocolError("Update refused", zone="example.org.", rcode="REFUSED")
    """

    def __init__(
        self,
        message: str,
        zone: Optional[str] = None,
        name: Optional[str] = None,
        operation: Optional[str] = None,
        rcode: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.rcode = rcode
        details = details or {}
        if rcode:
            details["rcode"] = rcode
        super().__init__(message, zone, name, operation, details)


class AuthError(DirectoryError):
    """
    TSIG ключ или подпись отклонены сервером.

    Фатальная ошибка: с теми же credentials повторять нельзя.

    Attributes:
        key: Имя TSIG ключа
    """

    def __init__(
        self,
        message: str,
        zone: Optional[str] = None,
        operation: Optional[str] = None,
        key: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.key = key
        details = details or {}
        if key:
            details["key"] = key
        super().__init__(message, zone=zone, operation=operation, details=details)


# === Transfer / Correlation Errors ===

class TransferError(ZoneInventoryError):
    """
    Zone transfer прерван. Частичный результат не используется.

    Attributes:
        zone: Зона

    Пример:
        raise TransferError("Transfer refused", zone="example.org.")
    """

    def __init__(
        self,
        message: str,
        zone: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.zone = zone
        details = details or {}
        if zone:
            details["zone"] = zone
        super().__init__(message, details)


class CorrelationError(ZoneInventoryError):
    """
    Некорректная или самоссылающаяся запись.

    Сборщик инвентаря пропускает такую запись и продолжает работу.

    Attributes:
        name: Имя записи
        record: Текстовое представление записи/значения
    """

    def __init__(
        self,
        message: str,
        name: Optional[str] = None,
        record: Optional[Any] = None,
        details: Optional[dict] = None,
    ):
        self.name = name
        self.record = record
        details = details or {}
        if name:
            details["name"] = name
        if record is not None:
            details["record"] = str(record)[:100]  # Ограничиваем размер
        super().__init__(message, details)


class UnsupportedRecordError(CorrelationError):
    """
    Тип DNS записи вне закрытого набора (A, PTR, CNAME, TXT, HINFO, LOC, OPT).

    Attributes:
        rdtype: Тип записи (SOA, NS, MX, ...)
    """

    def __init__(
        self,
        message: str,
        name: Optional[str] = None,
        rdtype: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.rdtype = rdtype
        details = details or {}
        if rdtype:
            details["rdtype"] = rdtype
        super().__init__(message, name=name, details=details)


# === Remote Errors ===

class FetchError(ZoneInventoryError):
    """
    Ошибка загрузки удалённого снимка инвентаря.

    Attributes:
        url: URL снимка
        status_code: HTTP код ответа
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ):
        self.url = url
        self.status_code = status_code
        details = details or {}
        if url:
            details["url"] = url
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, details)


# === Config Errors ===

class ConfigError(ZoneInventoryError):
    """
    Ошибка конфигурации.

    Attributes:
        config_file: Путь к файлу конфигурации
        key: Ключ конфигурации с ошибкой

    Пример:
        raise ConfigError("Missing required field", config_file="config.yaml", key="directory.server")
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        key: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.config_file = config_file
        self.key = key
        details = details or {}
        if config_file:
            details["config_file"] = config_file
        if key:
            details["key"] = key
        super().__init__(message, details)


# === Utility Functions ===

def format_error_for_log(error: Exception) -> str:
    """
    Форматирует ошибку для вывода в лог.

    Args:
        error: Исключение

    Returns:
        str: Отформатированная строка ошибки
    """
    if isinstance(error, ZoneInventoryError):
        return str(error)
    return f"{error.__class__.__name__}: {error}"


def is_retryable(error: Exception) -> bool:
    """
    Проверяет, может ли вызывающий код повторить операцию после ошибки.

    Сам движок ничего не повторяет.

    Args:
        error: Исключение

    Returns:
        bool: True если можно retry
    """
    if isinstance(error, AuthError):
        return False
    retryable_types = (
        TransportError,
        TransferError,
    )
    return isinstance(error, retryable_types)
