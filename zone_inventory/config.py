"""
Загрузчик конфигурации из config.yaml.

Предоставляет доступ к настройкам через точку:
    config.directory.server
    config.zones.forward
    config.remote.url

Порядок: значения по умолчанию -> config.yaml -> переменные окружения.
Итоговый словарь проверяется схемой из core.config_schema.
"""

import os
import logging
from typing import Any, Optional

import yaml

from .core.config_schema import AppConfig, validate_config
from .core.exceptions import ConfigError
from .core.logging import LogConfig, setup_logging_from_config

logger = logging.getLogger(__name__)

# Путь к файлу конфигурации
CONFIG_FILE = os.path.join(os.path.dirname(__file__), "config.yaml")

# Переменная окружения -> (секция, ключ, тип)
ENV_OVERRIDES = {
    "ZONE_SERVER": ("directory", "server", str),
    "ZONE_PORT": ("directory", "port", int),
    "ZONE_TSIG_KEY": ("directory", "tsig_key", str),
    "ZONE_TSIG_SECRET": ("directory", "tsig_secret", str),
    "ZONE_REMOTE_URL": ("remote", "url", str),
}


class ConfigSection:
    """Секция конфигурации с доступом через точку."""

    def __init__(self, data: dict = None):
        self._data = data or {}

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return super().__getattribute__(name)
        value = self._data.get(name)
        if isinstance(value, dict):
            return ConfigSection(value)
        return value

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            super().__setattr__(name, value)
        else:
            self._data[name] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Получить значение с дефолтом."""
        return self._data.get(key, default)

    def __repr__(self) -> str:
        return f"ConfigSection({self._data})"


class Config:
    """
    Главный класс конфигурации.

    Пример:
        config.directory.server   # "ns1.example.org:53"
        config.zones.reverse      # ["168.192.in-addr.arpa."]
        config.logging.level      # "INFO"
    """

    def __init__(self, config_file: Optional[str] = None):
        self._data = self._get_defaults()
        self._load_yaml(config_file)
        self._load_env()
        self._validated = self._validate()

    def _get_defaults(self) -> dict:
        """Значения по умолчанию."""
        return AppConfig().model_dump()

    def _load_yaml(self, config_file: Optional[str] = None) -> None:
        """Загружает настройки из YAML файла."""
        explicit = bool(config_file)
        if not config_file:
            # Ищем config.yaml
            search_paths = [
                CONFIG_FILE,
                "config.yaml",
                "config.yml",
                ".zone_inventory.yaml",
            ]
            for path in search_paths:
                if os.path.exists(path):
                    config_file = path
                    break

        if not config_file:
            return
        if not os.path.exists(config_file):
            if explicit:
                raise ConfigError("Файл конфигурации не найден", config_file=config_file)
            return

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Ошибка чтения конфигурации: {e}", config_file=config_file) from e

        if not isinstance(yaml_data, dict):
            raise ConfigError("Корень конфигурации должен быть словарём", config_file=config_file)

        # Мержим с дефолтами
        self._merge_dict(self._data, yaml_data)
        self._config_file = config_file
        logger.debug(f"Конфигурация загружена из {config_file}")

    def _load_env(self) -> None:
        """Загружает настройки из переменных окружения."""
        for env_name, (section, key, cast) in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if not value:
                continue
            try:
                self._data.setdefault(section, {})[key] = cast(value)
            except ValueError as e:
                raise ConfigError(
                    f"Некорректное значение {env_name}: {value!r}",
                    key=f"{section}.{key}",
                ) from e

    def _validate(self) -> AppConfig:
        config_file = self.__dict__.get("_config_file", "config.yaml")
        return validate_config(self._data, config_file=config_file)

    def _merge_dict(self, base: dict, override: dict) -> None:
        """Рекурсивно мержит словари."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_dict(base[key], value)
            else:
                base[key] = value

    @property
    def validated(self) -> AppConfig:
        """Проверенная схемой конфигурация."""
        return self._validated

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return super().__getattribute__(name)
        value = self._data.get(name)
        if isinstance(value, dict):
            return ConfigSection(value)
        return value

    def reload(self, config_file: Optional[str] = None) -> None:
        """Перезагружает конфигурацию."""
        self.__dict__.pop("_config_file", None)
        self._data = self._get_defaults()
        self._load_yaml(config_file)
        self._load_env()
        self._validated = self._validate()


def load_config(config_file: Optional[str] = None) -> Config:
    """
    Загружает конфигурацию из файла.

    Args:
        config_file: Путь к YAML файлу (опционально)

    Returns:
        Config: Объект конфигурации

    Raises:
        ConfigError: Файл не читается или не проходит валидацию
    """
    return Config(config_file)


def configure_logging(config: Optional[Config] = None) -> LogConfig:
    """
    Настраивает логирование по секции logging.

    Args:
        config: Конфигурация (None: load_config())

    Returns:
        LogConfig: Применённые настройки
    """
    if config is None:
        config = load_config()
    log_config = LogConfig.from_dict(config.validated.logging.model_dump())
    setup_logging_from_config(log_config)
    return log_config
