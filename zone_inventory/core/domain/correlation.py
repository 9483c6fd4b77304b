"""
Domain Layer для сборки инвентаря.

Сопоставление записей из zone transfer в список Device.
Не зависит от сети: принимает уже полученные записи.

Алгоритм:
    1. PTR записи обратных зон -> {адрес: имя}
    2. A записи -> Device по имени (только адреса, один проход)
    3. CNAME записи -> {alias: имя}; имя-устройство алиасом не бывает
    4. PTR на устройство -> Device.reverse
    5. PTR на alias устройства -> Device.mapping
    6. TXT/HINFO/LOC -> place, model/code, координаты
    7. Сортировка по имени

Пример использования:
    correlator = InventoryCorrelator()
    pointers = correlator.collect_pointers("168.192.in-addr.arpa.", reverse_records)
    inventory = correlator.correlate(forward_records, pointers)
"""

from typing import Dict, Iterable, List, Tuple

from ..exceptions import CorrelationError, format_error_for_log
from ..logging import get_logger
from ..models import Device, Inventory
from .addressing import address_from_reverse, fqdn
from .records import RecordKind, ZoneRecord, text_value

logger = get_logger(__name__)


class InventoryCorrelator:
    """
    Сборщик Device из записей зоны.

    Устройства хранятся в словаре по имени в нижнем регистре,
    каждый этап сборки работает с этим словарём по ключу.
    """

    def collect_pointers(self, zone: str, records: Iterable[ZoneRecord]) -> Dict[str, str]:
        """
        Собирает PTR записи обратной зоны.

        Args:
            zone: Обратная зона (для логов)
            records: Записи зоны

        Returns:
            Dict[str, str]: адрес -> целевое имя
        """
        pointers: Dict[str, str] = {}
        for record in records:
            if record.kind != RecordKind.POINTER:
                continue
            try:
                address = address_from_reverse(record.name)
            except CorrelationError as e:
                logger.warning(
                    f"PTR пропущен: {format_error_for_log(e)}",
                    zone=zone,
                )
                continue
            pointers[address] = fqdn(record.value)
        return pointers

    def correlate(
        self,
        records: List[ZoneRecord],
        pointers: Dict[str, str],
    ) -> Inventory:
        """
        Собирает инвентарь из записей прямых зон и PTR.

        Args:
            records: Записи всех прямых зон
            pointers: Результат collect_pointers по всем обратным зонам

        Returns:
            Inventory: Отсортированный по имени инвентарь
        """
        devices = self._collect_devices(records)
        aliases = self._collect_aliases(records, devices)

        for alias_name, device_key in aliases.values():
            device = devices.get(device_key)
            if device is not None:
                device.aliases.append(alias_name)

        for address, target in pointers.items():
            device = devices.get(target.lower())
            if device is not None:
                device.reverse.append(address)

        for address, target in pointers.items():
            entry = aliases.get(target.lower())
            if entry is None:
                continue
            alias_name, device_key = entry
            device = devices.get(device_key)
            if device is not None:
                device.mapping[alias_name] = address

        self._enrich(records, devices)

        return Inventory(devices.values())

    def _collect_devices(self, records: List[ZoneRecord]) -> Dict[str, Device]:
        """Проход только по A записям: задаёт имя и основной адрес."""
        devices: Dict[str, Device] = {}
        for record in records:
            if record.kind != RecordKind.ADDRESS:
                continue
            key = record.name.lower()
            if key in devices:
                logger.debug(
                    f"Дополнительный адрес {record.value} для {record.name} пропущен",
                )
                continue
            try:
                devices[key] = Device(name=record.name, ip=record.value)
            except ValueError as e:
                error = CorrelationError("Некорректная A запись", name=record.name, record=e)
                logger.warning(f"Запись пропущена: {format_error_for_log(error)}")
        return devices

    def _collect_aliases(
        self,
        records: List[ZoneRecord],
        devices: Dict[str, Device],
    ) -> Dict[str, Tuple[str, str]]:
        """
        Таблица CNAME: alias (нижний регистр) -> (alias, ключ устройства).

        Имя, у которого есть своя A запись, алиасом не считается.
        """
        aliases: Dict[str, Tuple[str, str]] = {}
        for record in records:
            if record.kind != RecordKind.ALIAS:
                continue
            alias_key = record.name.lower()
            target_key = fqdn(record.value).lower()
            try:
                self._check_alias(record, alias_key, target_key)
            except CorrelationError as e:
                logger.warning(f"CNAME пропущен: {format_error_for_log(e)}")
                continue
            if alias_key in devices:
                continue
            aliases[alias_key] = (record.name, target_key)
        return aliases

    @staticmethod
    def _check_alias(record: ZoneRecord, alias_key: str, target_key: str) -> None:
        if alias_key == target_key:
            raise CorrelationError("CNAME указывает сам на себя", name=record.name, record=record)

    def _enrich(self, records: List[ZoneRecord], devices: Dict[str, Device]) -> None:
        """Последний проход: TXT, HINFO, LOC известных устройств."""
        for record in records:
            device = devices.get(record.name.lower())
            if device is None:
                continue
            if record.kind == RecordKind.TEXT:
                device.place = text_value(record.value)
            elif record.kind == RecordKind.CLASSIFICATION:
                device.model = record.value.model
                device.code = record.value.code
            elif record.kind == RecordKind.LOCATION:
                loc = record.value
                device.set_location(loc.latitude, loc.longitude, loc.altitude)
