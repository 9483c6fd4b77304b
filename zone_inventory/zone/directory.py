"""
DirectoryService: доступ к авторитетному DNS серверу.

Чтение:
    transfer(zone)          AXFR зоны -> List[ZoneRecord]
    lookup(name, rdtype)    обычный запрос
    find(name)              Device по имени (A + TXT/HINFO/LOC)
    find_by_ip(address)     Device по адресу (PTR + find)
    list(zones, reverse)    полный инвентарь

Изменения (каждое одной TSIG-подписанной транзакцией):
    insert(zone, records)
    remove_rrset(zone, records)
    remove_name(zone, records)
    update_info / remove_info / remove_all

Пример использования:
    directory = DirectoryService("ns1.example.org", credentials=CredentialsManager())
    directory.update_info("example.org.", device)
"""

from typing import Callable, Iterable, List, Optional, Tuple, TYPE_CHECKING

import dns.message
import dns.name
import dns.rcode
import dns.rdatatype
import dns.update

from ..core.constants import DEFAULT_DNS_PORT, EDNS_PAYLOAD
from ..core.credentials import CredentialsManager, TsigCredentials
from ..core.domain.addressing import fqdn, reverse_name
from ..core.domain.records import RecordKind, RecordProjector, ZoneRecord, text_value
from ..core.exceptions import DirectoryError
from ..core.logging import get_logger
from ..core.models import Device, Inventory
from .transport import Transport, raise_for_rcode
from .wire import rdtype_of, record_to_rdata, records_from_rrsets

if TYPE_CHECKING:
    from ..config import Config

logger = get_logger(__name__)

UpdateAction = Callable[[dns.update.UpdateMessage, ZoneRecord], None]


class DirectoryService:
    """
    Клиент DNS сервера для чтения и изменения инвентаря.

    Attributes:
        server: Сервер в виде host или host:port
        port: Порт по умолчанию, если в server его нет
    """

    def __init__(
        self,
        server: str,
        port: int = DEFAULT_DNS_PORT,
        credentials: Optional[CredentialsManager] = None,
        transport: Optional[Transport] = None,
        interactive: bool = False,
    ):
        """
        Args:
            server: host или host:port
            port: Порт по умолчанию
            credentials: Источник TSIG ключа (нужен только для изменений)
            transport: Транспорт (для тестов подменяется)
            interactive: Разрешить запрос ключа с терминала
        """
        self.server = server
        self.port = port or DEFAULT_DNS_PORT
        self._credentials = credentials or CredentialsManager()
        self._transport = transport or Transport()
        self._interactive = interactive
        self._tsig_config: Tuple[Optional[str], Optional[str]] = (None, None)

    @classmethod
    def from_config(cls, config: Optional["Config"] = None, **kwargs) -> "DirectoryService":
        """Создаёт сервис из config.yaml."""
        if config is None:
            from ..config import load_config
            config = load_config()

        settings = config.validated.directory
        service = cls(
            server=settings.server,
            port=settings.port,
            credentials=kwargs.pop("credentials", None) or CredentialsManager(algorithm=settings.tsig_algorithm),
            transport=kwargs.pop("transport", None) or Transport(timeout=settings.timeout),
            **kwargs,
        )
        service._tsig_config = (settings.tsig_key or None, settings.tsig_secret or None)
        return service

    # ==================== ЧТЕНИЕ ====================

    def server_port(self) -> Tuple[str, int]:
        """
        Адрес и порт сервера.

        Raises:
            NotFoundError: Имя сервера не резолвится
        """
        return self._transport.resolve(self.server, self.port)

    def transfer(self, zone: str) -> List[ZoneRecord]:
        """
        Все поддерживаемые записи зоны.

        Raises:
            TransferError: AXFR прерван
            NotFoundError: Сервер не резолвится
        """
        zone = fqdn(zone)
        address, port = self.server_port()
        rrsets = self._transport.transfer_zone(address, port, zone)
        records = records_from_rrsets(rrsets, zone=zone)
        logger.info(f"AXFR: {len(records)} записей", zone=zone, server=self.server)
        return records

    def lookup(self, name: str, rdtype: str) -> List[ZoneRecord]:
        """
        Обычный запрос записи.

        NXDOMAIN возвращает пустой список.

        Raises:
            ProtocolError: Код ответа кроме NOERROR/NXDOMAIN
            TransportError: Ошибка сети
        """
        query = dns.message.make_query(fqdn(name), dns.rdatatype.from_text(rdtype))
        address, port = self.server_port()
        response = self._transport.exchange(query, address, port)
        if response.rcode() == dns.rcode.NXDOMAIN:
            return []
        raise_for_rcode(response, name=name, operation="lookup")
        return records_from_rrsets(response.answer)

    def find(self, name: str) -> Optional[Device]:
        """
        Устройство по имени.

        Нужна A запись; TXT, HINFO и LOC необязательны и
        их ошибки только логируются.
        """
        addresses = [r for r in self.lookup(name, "A") if r.kind == RecordKind.ADDRESS]
        if not addresses:
            return None

        records = list(addresses)
        for rdtype in ("TXT", "HINFO", "LOC"):
            try:
                records.extend(self.lookup(name, rdtype))
            except DirectoryError as e:
                logger.debug(f"{rdtype} недоступна: {e}", device=name)

        return self.decode(records)

    def find_by_ip(self, address: str) -> Optional[Device]:
        """Устройство по адресу через PTR запись."""
        pointers = [r for r in self.lookup(reverse_name(address), "PTR") if r.kind == RecordKind.POINTER]
        if not pointers:
            return None
        return self.find(pointers[0].value)

    @staticmethod
    def decode(records: Iterable[ZoneRecord]) -> Optional[Device]:
        """Device из записей одного имени (первая A запись задаёт адрес)."""
        records = list(records)
        device: Optional[Device] = None
        for record in records:
            if record.kind == RecordKind.ADDRESS and device is None:
                device = Device(name=record.name, ip=record.value)
        if device is None:
            return None

        for record in records:
            if record.kind == RecordKind.TEXT:
                device.place = text_value(record.value)
            elif record.kind == RecordKind.CLASSIFICATION:
                device.model = record.value.model
                device.code = record.value.code
            elif record.kind == RecordKind.LOCATION:
                loc = record.value
                device.set_location(loc.latitude, loc.longitude, loc.altitude)
        return device

    def list(self, zones: List[str], reverse: List[str]) -> Inventory:
        """Полный инвентарь из прямых и обратных зон."""
        from .inventory import InventoryBuilder
        return InventoryBuilder(self).build(zones, reverse)

    # ==================== ИЗМЕНЕНИЯ ====================

    def insert(self, zone: str, records: List[ZoneRecord]) -> None:
        """Добавляет записи одной транзакцией."""
        self._update(zone, "insert", records, _add_record)

    def remove_rrset(self, zone: str, records: List[ZoneRecord]) -> None:
        """Удаляет RRset (имя + тип) каждой записи одной транзакцией."""
        self._update(zone, "remove_rrset", records, _delete_rrset)

    def remove_name(self, zone: str, records: List[ZoneRecord]) -> None:
        """Удаляет все записи на именах записей одной транзакцией."""
        self._update(zone, "remove_name", records, _delete_name)

    def update_info(self, zone: str, device: Device) -> None:
        """Публикует TXT, HINFO и LOC устройства."""
        self.insert(zone, RecordProjector().project(device))

    def remove_info(self, zone: str, device: Device) -> None:
        """Удаляет TXT, HINFO и LOC устройства (обычно перед update_info)."""
        self.remove_rrset(zone, RecordProjector().project(device))

    def remove_all(self, zone: str, device: Device) -> None:
        """Удаляет все записи на имени устройства."""
        self.remove_name(zone, [ZoneRecord(fqdn(device.name), RecordKind.ADDRESS)])

    def _tsig(self) -> TsigCredentials:
        config_key, config_secret = self._tsig_config
        return self._credentials.get_credentials(
            interactive=self._interactive,
            config_key=config_key,
            config_secret=config_secret,
        )

    def _update(
        self,
        zone: str,
        operation: str,
        records: List[ZoneRecord],
        action: UpdateAction,
    ) -> None:
        """
        Одна подписанная update транзакция.

        Raises:
            AuthError: Ключ или подпись отклонены
            ProtocolError: Код ответа не NOERROR
            TransportError: Ошибка сети или резолвинга
        """
        zone = fqdn(zone)
        credentials = self._tsig()
        message = dns.update.UpdateMessage(zone)

        names = []
        for record in records:
            if record.kind == RecordKind.EXTENSION:
                message.use_edns(0, payload=EDNS_PAYLOAD)
                continue
            action(message, record)
            names.append(record.name)

        address, port = self.server_port()
        logger.debug(
            f"{operation}: {len(names)} записей {', '.join(names)}",
            zone=zone,
            operation=operation,
        )
        response = self._transport.authenticated_exchange(
            message, credentials, address, port, zone=zone, operation=operation
        )
        raise_for_rcode(
            response,
            zone=zone,
            name=names[0] if names else None,
            operation=operation,
            key=credentials.key_name,
        )


def _add_record(message: dns.update.UpdateMessage, record: ZoneRecord) -> None:
    message.add(dns.name.from_text(fqdn(record.name)), record.ttl, record_to_rdata(record))


def _delete_rrset(message: dns.update.UpdateMessage, record: ZoneRecord) -> None:
    message.delete(dns.name.from_text(fqdn(record.name)), rdtype_of(record))


def _delete_name(message: dns.update.UpdateMessage, record: ZoneRecord) -> None:
    message.delete(dns.name.from_text(fqdn(record.name)))
