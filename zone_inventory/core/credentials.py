"""
Модуль управления TSIG ключом.

Источники ключа для подписи dynamic update и zone transfer:
- Явная передача
- Переменные окружения (ZONE_TSIG_KEY, ZONE_TSIG_SECRET)
- config.yaml (секция directory)
- Интерактивный ввод (getpass)

Пример использования:
    manager = CredentialsManager()
    creds = manager.get_credentials()
    keyring = creds.keyring()
"""

import os
import logging
from getpass import getpass
from dataclasses import dataclass
from typing import Any, Dict, Optional

import dns.name
import dns.tsig
import dns.tsigkeyring

from .constants import DEFAULT_TSIG_ALGORITHM
from .exceptions import ConfigError

logger = logging.getLogger(__name__)

# Имена алгоритмов в config.yaml -> имена алгоритмов TSIG
TSIG_ALGORITHMS = {
    "hmac-md5": dns.tsig.HMAC_MD5,
    "hmac-sha1": dns.tsig.HMAC_SHA1,
    "hmac-sha224": dns.tsig.HMAC_SHA224,
    "hmac-sha256": dns.tsig.HMAC_SHA256,
    "hmac-sha384": dns.tsig.HMAC_SHA384,
    "hmac-sha512": dns.tsig.HMAC_SHA512,
}


@dataclass
class TsigCredentials:
    """
    TSIG ключ.

    Attributes:
        key_name: Имя ключа (как на сервере)
        secret: Секрет в base64
        algorithm: Алгоритм HMAC
    """
    key_name: str
    secret: str
    algorithm: str = DEFAULT_TSIG_ALGORITHM

    def keyring(self) -> Dict[dns.name.Name, Any]:
        """
        Keyring для dnspython.

        Raises:
            ConfigError: Неизвестный алгоритм или секрет не base64
        """
        algorithm = TSIG_ALGORITHMS.get(self.algorithm.lower())
        if algorithm is None:
            raise ConfigError(
                f"Неизвестный TSIG алгоритм: {self.algorithm}",
                key="directory.tsig_algorithm",
            )
        try:
            return dns.tsigkeyring.from_text({self.key_name: (algorithm.to_text(), self.secret)})
        except (ValueError, TypeError) as e:
            raise ConfigError(
                f"Некорректный TSIG ключ {self.key_name}: {e}",
                key="directory.tsig_secret",
            ) from e

    @property
    def keyname(self) -> dns.name.Name:
        return dns.name.from_text(self.key_name)

    def to_dict(self) -> dict:
        """Безопасное представление для логов (без секрета)."""
        return {"key_name": self.key_name, "algorithm": self.algorithm}


class CredentialsManager:
    """
    Менеджер TSIG ключа.

    Example:
        # Автоматический выбор источника
        manager = CredentialsManager()
        creds = manager.get_credentials()

        # Явная передача
        manager = CredentialsManager(key_name="update-key", secret="c2VjcmV0")
    """

    # Имена переменных окружения
    ENV_KEY = "ZONE_TSIG_KEY"
    ENV_SECRET = "ZONE_TSIG_SECRET"

    def __init__(
        self,
        key_name: Optional[str] = None,
        secret: Optional[str] = None,
        algorithm: str = DEFAULT_TSIG_ALGORITHM,
    ):
        self._algorithm = algorithm
        self._credentials: Optional[TsigCredentials] = None

        if key_name and secret:
            self._credentials = TsigCredentials(key_name, secret, algorithm)

    def get_credentials(
        self,
        interactive: bool = True,
        config_key: Optional[str] = None,
        config_secret: Optional[str] = None,
    ) -> TsigCredentials:
        """
        Получает TSIG ключ.

        Порядок проверки:
        1. Уже закэшированный (в т.ч. переданный явно)
        2. Переменные окружения
        3. Значения из config.yaml
        4. Интерактивный ввод (если interactive=True)

        Raises:
            ConfigError: Если не удалось получить ключ
        """
        if self._credentials:
            return self._credentials

        env_key = os.getenv(self.ENV_KEY)
        env_secret = os.getenv(self.ENV_SECRET)
        if env_key and env_secret:
            logger.info("Используем TSIG ключ из переменных окружения")
            self._credentials = TsigCredentials(env_key, env_secret, self._algorithm)
            return self._credentials

        if config_key and config_secret:
            logger.debug("TSIG ключ получен из config.yaml")
            self._credentials = TsigCredentials(config_key, config_secret, self._algorithm)
            return self._credentials

        if interactive:
            logger.info("Запрос TSIG ключа интерактивно")
            self._credentials = self._prompt_credentials(env_key or config_key)
            return self._credentials

        raise ConfigError(
            "Не удалось получить TSIG ключ. "
            f"Установите {self.ENV_KEY} и {self.ENV_SECRET} "
            "или включите интерактивный режим.",
            key="directory.tsig_key",
        )

    def _prompt_credentials(self, key_name: Optional[str] = None) -> TsigCredentials:
        """Запрашивает ключ интерактивно."""
        if not key_name:
            key_name = input("Имя TSIG ключа: ").strip()
        secret = getpass(f"Секрет ключа {key_name}: ").strip()
        if not key_name or not secret:
            raise ConfigError("TSIG ключ не введён", key="directory.tsig_key")
        return TsigCredentials(key_name, secret, self._algorithm)
