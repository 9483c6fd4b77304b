"""
Pydantic схемы для валидации config.yaml.

Валидация происходит при загрузке конфигурации.
Ошибки валидации выбрасывают ConfigError.

Пример использования:
    from zone_inventory.core.config_schema import validate_config

    config_dict = yaml.safe_load(open("config.yaml"))
    validated = validate_config(config_dict)  # raises ConfigError on failure
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from .constants import DEFAULT_DNS_PORT, DEFAULT_REMOTE_PORT, DEFAULT_TSIG_ALGORITHM, DEFAULT_TTL
from .exceptions import ConfigError


class DirectoryConfig(BaseModel):
    """Настройки DNS сервера."""
    server: str = "localhost"
    port: int = Field(default=DEFAULT_DNS_PORT, ge=1, le=65535)
    timeout: float = Field(default=10.0, gt=0, le=300)
    tsig_key: str = ""
    tsig_secret: str = ""
    tsig_algorithm: str = Field(
        default=DEFAULT_TSIG_ALGORITHM,
        pattern="^hmac-(md5|sha1|sha224|sha256|sha384|sha512)$",
    )

    @field_validator("server")
    @classmethod
    def validate_server(cls, v: str) -> str:
        """Сервер задаётся как host или host:port."""
        if not v.strip():
            raise PydanticCustomError("empty_server", "Адрес DNS сервера не может быть пустым")
        return v.strip()


class ZonesConfig(BaseModel):
    """Зоны для сборки инвентаря."""
    forward: List[str] = Field(default_factory=list)
    reverse: List[str] = Field(default_factory=list)
    ttl: int = Field(default=DEFAULT_TTL, ge=0)

    @field_validator("forward", "reverse")
    @classmethod
    def validate_zones(cls, v: List[str]) -> List[str]:
        """Имена зон приводятся к полной форме."""
        return [zone if zone.endswith(".") else zone + "." for zone in v]


class RemoteConfig(BaseModel):
    """Настройки удалённого снимка инвентаря."""
    url: str = ""
    port: int = Field(default=DEFAULT_REMOTE_PORT, ge=1, le=65535)
    timeout: int = Field(default=30, ge=1, le=300)
    verify_ssl: bool = True

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Проверяет что URL валидный."""
        if v and not v.startswith(("http://", "https://")):
            raise PydanticCustomError(
                "invalid_url",
                "URL снимка должен начинаться с http:// или https://",
            )
        return v


class LoggingConfig(BaseModel):
    """Настройки логирования."""
    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    json_format: bool = False
    console: bool = True
    file_path: Optional[str] = None
    rotation: str = Field(default="size", pattern="^(size|time|none)$")
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)  # min 1KB
    backup_count: int = Field(default=5, ge=1, le=100)
    when: str = "midnight"
    interval: int = Field(default=1, ge=1)


class AppConfig(BaseModel):
    """Полная конфигурация приложения."""
    directory: DirectoryConfig = Field(default_factory=DirectoryConfig)
    zones: ZonesConfig = Field(default_factory=ZonesConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    debug: bool = False


def validate_config(config_dict: dict, config_file: str = "config.yaml") -> AppConfig:
    """
    Валидирует словарь конфигурации.

    Args:
        config_dict: Словарь из YAML
        config_file: Имя файла для сообщения об ошибке

    Returns:
        AppConfig: Валидированная конфигурация

    Raises:
        ConfigError: При ошибке валидации
    """
    try:
        return AppConfig(**config_dict)
    except Exception as e:
        # Форматируем ошибку Pydantic в читаемый вид
        error_msg = str(e)
        key = None
        if hasattr(e, "errors"):
            errors = e.errors()
            if errors:
                first_error = errors[0]
                key = ".".join(str(x) for x in first_error.get("loc", []))
                msg = first_error.get("msg", "Unknown error")
                error_msg = f"{key}: {msg}"

        raise ConfigError(
            message=f"Ошибка валидации конфигурации: {error_msg}",
            config_file=config_file,
            key=key,
        ) from e


def get_default_config() -> AppConfig:
    """Возвращает конфигурацию по умолчанию."""
    return AppConfig()
