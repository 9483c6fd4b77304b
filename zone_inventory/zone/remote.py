"""
Загрузка снимка инвентаря по HTTP.

Снимок: JSON список устройств с ключами Device.to_dict()
(name, ip, reverse, mapping, aliases, place, model, code,
latitude, longitude, height).

Пример использования:
    fetch = RemoteFetch(timeout=10)
    inventory = fetch.fetch("inventory.example.org")  # http://inventory.example.org:9001/
"""

from typing import TYPE_CHECKING, Optional, Union
from urllib.parse import urlsplit, urlunsplit

import requests

from ..core.constants import DEFAULT_REMOTE_PORT
from ..core.exceptions import FetchError
from ..core.logging import get_logger
from ..core.models import Inventory

if TYPE_CHECKING:
    from ..config import Config

logger = get_logger(__name__)


def build_url(server: str, port: int = DEFAULT_REMOTE_PORT) -> str:
    """
    URL снимка.

    "host"                  -> http://host:9001/
    "host:8080/devices"     -> http://host:8080/devices
    "https://host/list"     -> https://host:9001/list
    """
    if "://" not in server:
        server = "http://" + server
    parts = urlsplit(server)
    if not parts.hostname:
        raise FetchError("В адресе снимка нет хоста", url=server)
    try:
        explicit_port = parts.port
    except ValueError as e:
        raise FetchError(f"Некорректный порт: {e}", url=server) from e

    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    netloc = f"{host}:{explicit_port or port}"
    return urlunsplit((parts.scheme, netloc, parts.path or "/", parts.query, ""))


class RemoteFetch:
    """
    HTTP клиент для снимка инвентаря.

    Attributes:
        timeout: Таймаут запроса в секундах
        verify_ssl: True, False или путь к CA bundle
    """

    def __init__(
        self,
        timeout: int = 30,
        verify_ssl: Union[bool, str] = True,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        self._session.verify = verify_ssl

    @classmethod
    def from_config(cls, config: Optional["Config"] = None, **kwargs) -> "RemoteFetch":
        """Создаёт клиент по секции remote."""
        if config is None:
            from ..config import load_config
            config = load_config()

        settings = config.validated.remote
        kwargs.setdefault("timeout", settings.timeout)
        kwargs.setdefault("verify_ssl", settings.verify_ssl)
        return cls(**kwargs)

    def fetch(self, server: str, port: int = DEFAULT_REMOTE_PORT) -> Inventory:
        """
        Загружает и разбирает снимок.

        Raises:
            FetchError: Сеть, HTTP статус, некорректный JSON
        """
        url = build_url(server, port)
        try:
            resp = self._session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FetchError(f"HTTP ошибка: {e}", url=url, status_code=status) from e
        except requests.RequestException as e:
            raise FetchError(f"Ошибка загрузки снимка: {e}", url=url) from e

        try:
            data = resp.json()
        except ValueError as e:
            raise FetchError(f"Некорректный JSON: {e}", url=url, status_code=resp.status_code) from e

        if not isinstance(data, list):
            raise FetchError("Снимок должен быть JSON списком", url=url, status_code=resp.status_code)

        try:
            inventory = Inventory.from_dicts(data)
        except (ValueError, TypeError, AttributeError) as e:
            raise FetchError(f"Некорректное устройство в снимке: {e}", url=url) from e

        logger.info(f"Снимок загружен: {len(inventory)} устройств", server=url)
        return inventory
