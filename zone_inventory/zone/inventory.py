"""
InventoryBuilder: сборка инвентаря из zone transfer.

Сначала передаются обратные зоны (PTR), затем прямые. Сопоставление
записей делает InventoryCorrelator, сюда вынесена только работа с сетью.
Ошибка любой передачи прерывает сборку целиком.

Пример использования:
    inventory = load_local("ns1.example.org", ["example.org."], ["168.192.in-addr.arpa."])
    inventory = load_remote("inventory.example.org")
    inventory = load_configured()  # секции directory, zones, remote из config.yaml
"""

from typing import TYPE_CHECKING, Dict, List, Optional

from ..core.constants import DEFAULT_DNS_PORT, DEFAULT_REMOTE_PORT
from ..core.context import RunContext, get_current_context
from ..core.domain.correlation import InventoryCorrelator
from ..core.domain.records import ZoneRecord
from ..core.exceptions import ZoneInventoryError
from ..core.logging import OperationLog, get_logger
from ..core.models import Inventory
from .directory import DirectoryService
from .remote import RemoteFetch

if TYPE_CHECKING:
    from ..config import Config

logger = get_logger(__name__)


class InventoryBuilder:
    """
    Сборщик инвентаря поверх DirectoryService.

    Attributes:
        directory: DirectoryService
        zones: Прямые зоны по умолчанию
        reverse: Обратные зоны по умолчанию
        ctx: Контекст выполнения, его run_id попадает в лог сборки

    Example:
        builder = InventoryBuilder(directory)
        inventory = builder.build(["example.org."], ["10.in-addr.arpa."])
    """

    def __init__(
        self,
        directory: DirectoryService,
        context: Optional[RunContext] = None,
        zones: Optional[List[str]] = None,
        reverse: Optional[List[str]] = None,
    ):
        """
        Args:
            directory: Сервис для zone transfer
            context: Контекст выполнения (None: глобальный)
            zones: Прямые зоны для build() без аргументов
            reverse: Обратные зоны для build() без аргументов
        """
        self.directory = directory
        self.ctx = context or get_current_context()
        self.zones = list(zones or [])
        self.reverse = list(reverse or [])
        self._correlator = InventoryCorrelator()

    @classmethod
    def from_config(
        cls,
        config: Optional["Config"] = None,
        context: Optional[RunContext] = None,
        **kwargs,
    ) -> "InventoryBuilder":
        """Сборщик по секциям directory и zones."""
        if config is None:
            from ..config import load_config
            config = load_config()

        settings = config.validated.zones
        directory = kwargs.pop("directory", None) or DirectoryService.from_config(config, **kwargs)
        return cls(directory, context=context, zones=settings.forward, reverse=settings.reverse)

    def build(
        self,
        zones: Optional[List[str]] = None,
        reverse: Optional[List[str]] = None,
    ) -> Inventory:
        """
        Собирает инвентарь.

        Args:
            zones: Прямые зоны (None: self.zones)
            reverse: Обратные зоны (None: self.reverse)

        Returns:
            Inventory: Отсортированный по имени инвентарь

        Raises:
            TransferError: Передача любой зоны прервана
        """
        zones = self.zones if zones is None else zones
        reverse = self.reverse if reverse is None else reverse

        build_logger = logger.bind(run_id=self.ctx.run_id) if self.ctx else logger
        op = OperationLog(operation="build").start()
        try:
            pointers: Dict[str, str] = {}
            for zone in reverse:
                records = self.directory.transfer(zone)
                pointers.update(self._correlator.collect_pointers(zone, records))

            forward: List[ZoneRecord] = []
            for zone in zones:
                forward.extend(self.directory.transfer(zone))

            inventory = self._correlator.correlate(forward, pointers)
            op.success(devices=len(inventory), pointers=len(pointers), records=len(forward))
            return inventory
        except ZoneInventoryError as e:
            op.failure(str(e))
            raise
        finally:
            op.log(build_logger)


def load_local(
    server: str,
    zones: List[str],
    reverse: List[str],
    port: int = DEFAULT_DNS_PORT,
) -> Inventory:
    """Инвентарь напрямую с DNS сервера (только чтение, ключ не нужен)."""
    return InventoryBuilder(DirectoryService(server, port=port)).build(zones, reverse)


def load_remote(server: str, port: int = DEFAULT_REMOTE_PORT, timeout: int = 30) -> Inventory:
    """Инвентарь из JSON снимка по HTTP."""
    return RemoteFetch(timeout=timeout).fetch(server, port)


def load_configured(config: Optional["Config"] = None) -> Inventory:
    """
    Инвентарь по config.yaml.

    Если задан remote.url, загружается снимок по HTTP, иначе
    инвентарь собирается с directory.server по зонам из секции zones.
    """
    if config is None:
        from ..config import load_config
        config = load_config()

    remote = config.validated.remote
    if remote.url:
        return RemoteFetch.from_config(config).fetch(remote.url, remote.port)
    return InventoryBuilder.from_config(config).build()
