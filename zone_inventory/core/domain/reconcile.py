"""
Domain Layer для reconcile операций.

Чистые функции сравнения двух состояний устройства: что удалить и что
добавить в DNS, чтобы опубликованное состояние "from" стало "to".

Три независимых сравнения:
    reverse: PTR записи основных адресов
    alias: CNAME записи
    mapping: PTR записи вторичных адресов (на alias)

Пример использования:
    from zone_inventory.core.domain.reconcile import ReconcileComparator

    comparator = ReconcileComparator()
    for diff in comparator.compare("example.org.", 3600, current, desired):
        print(diff.format_detailed())
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from ..models import Device
from .addressing import find_private_zone, fqdn, reverse_name
from .records import RecordKind, ZoneRecord


class ChangeType(str, Enum):
    """Тип изменения."""
    CREATE = "create"
    DELETE = "delete"
    SKIP = "skip"


@dataclass
class ZoneChange:
    """
    Одно изменение записи.

    Attributes:
        name: Идентификатор (адрес, alias)
        change_type: Тип изменения
        zone: Зона, в которую уходит update
        record: Запись для вставки (CREATE) или удаления (DELETE)
        reason: Причина пропуска (для SKIP)
    """
    name: str
    change_type: ChangeType
    zone: str
    record: ZoneRecord
    reason: str = ""

    def __str__(self) -> str:
        if self.change_type == ChangeType.CREATE:
            return f"+ {self.name} [{self.zone}]"
        elif self.change_type == ChangeType.DELETE:
            return f"- {self.name} [{self.zone}]"
        else:
            return f"  {self.name} (skip: {self.reason})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "change_type": self.change_type.value,
            "zone": self.zone,
            "record": str(self.record),
            "reason": self.reason,
        }


@dataclass
class ReconcileDiff:
    """
    Результат сравнения для одного вида записей.

    Attributes:
        object_type: reverse, alias, mapping
        target: Имя устройства
        to_create: Записи для вставки
        to_delete: Записи для удаления
        to_skip: Пропущенные изменения
    """
    object_type: str
    target: str = ""
    to_create: List[ZoneChange] = field(default_factory=list)
    to_delete: List[ZoneChange] = field(default_factory=list)
    to_skip: List[ZoneChange] = field(default_factory=list)

    @property
    def total_changes(self) -> int:
        return len(self.to_create) + len(self.to_delete)

    @property
    def has_changes(self) -> bool:
        return self.total_changes > 0

    def summary(self) -> str:
        """Краткая сводка изменений."""
        parts = []
        if self.to_create:
            parts.append(f"+{len(self.to_create)} create")
        if self.to_delete:
            parts.append(f"-{len(self.to_delete)} delete")
        if self.to_skip:
            parts.append(f"={len(self.to_skip)} skip")

        if not parts:
            return f"{self.object_type}: no changes"

        return f"{self.object_type}: {', '.join(parts)}"

    def format_detailed(self, show_skips: bool = False) -> str:
        """Детальный вывод изменений."""
        lines = [self.summary(), ""]

        if self.to_delete:
            lines.append("DELETE:")
            for item in self.to_delete:
                lines.append(f"  {item}")

        if self.to_create:
            lines.append("CREATE:")
            for item in self.to_create:
                lines.append(f"  {item}")

        if show_skips and self.to_skip:
            lines.append("SKIP:")
            for item in self.to_skip:
                lines.append(f"  {item}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "object_type": self.object_type,
            "target": self.target,
            "summary": {
                "creates": len(self.to_create),
                "deletes": len(self.to_delete),
                "skips": len(self.to_skip),
            },
            "creates": [c.to_dict() for c in self.to_create],
            "deletes": [c.to_dict() for c in self.to_delete],
        }


class ReconcileComparator:
    """
    Компаратор состояний устройства.

    Принимает два снимка Device, возвращает ReconcileDiff.
    Повторное сравнение уже сошедшегося состояния даёт пустой diff.
    """

    def compare(self, zone: str, ttl: int, current: Device, desired: Device) -> List[ReconcileDiff]:
        """
        Все три сравнения в порядке применения.

        Args:
            zone: Прямая зона
            ttl: TTL для новых записей
            current: Опубликованное состояние ("from")
            desired: Нужное состояние ("to")
        """
        return [
            self.compare_reverse(zone, ttl, current, desired),
            self.compare_aliases(zone, ttl, current, desired),
            self.compare_mapping(zone, ttl, current, desired),
        ]

    def compare_reverse(self, zone: str, ttl: int, current: Device, desired: Device) -> ReconcileDiff:
        """PTR записи из Device.reverse."""
        diff = ReconcileDiff(object_type="reverse", target=desired.name)

        for address in current.reverse:
            if desired.has_reverse(address):
                continue
            record = self._pointer(address, current.name)
            self._route(diff, zone, address, record, ChangeType.DELETE)

        for address in desired.reverse:
            if current.has_reverse(address):
                continue
            record = self._pointer(address, desired.name, ttl)
            self._route(diff, zone, address, record, ChangeType.CREATE)

        return diff

    def compare_aliases(self, zone: str, ttl: int, current: Device, desired: Device) -> ReconcileDiff:
        """CNAME записи из Device.aliases, всегда в прямой зоне."""
        diff = ReconcileDiff(object_type="alias", target=desired.name)

        for alias in current.aliases:
            if desired.has_alias(alias):
                continue
            diff.to_delete.append(ZoneChange(
                name=alias,
                change_type=ChangeType.DELETE,
                zone=zone,
                record=ZoneRecord(fqdn(alias), RecordKind.ALIAS, fqdn(desired.name)),
            ))

        for alias in desired.aliases:
            if current.has_alias(alias):
                continue
            diff.to_create.append(ZoneChange(
                name=alias,
                change_type=ChangeType.CREATE,
                zone=zone,
                record=ZoneRecord(fqdn(alias), RecordKind.ALIAS, fqdn(desired.name), ttl),
            ))

        return diff

    def compare_mapping(self, zone: str, ttl: int, current: Device, desired: Device) -> ReconcileDiff:
        """PTR записи вторичных адресов (alias -> адрес)."""
        diff = ReconcileDiff(object_type="mapping", target=desired.name)

        for alias, address in current.mapping.items():
            if desired.has_mapping(alias, address):
                continue
            record = self._pointer(address, alias)
            self._route(diff, zone, f"{alias} -> {address}", record, ChangeType.DELETE, address)

        for alias, address in desired.mapping.items():
            if current.has_mapping(alias, address):
                continue
            record = self._pointer(address, alias, ttl)
            self._route(diff, zone, f"{alias} -> {address}", record, ChangeType.CREATE, address)

        return diff

    @staticmethod
    def _pointer(address: str, target: str, ttl: int = 0) -> ZoneRecord:
        return ZoneRecord(reverse_name(address), RecordKind.POINTER, fqdn(target), ttl)

    @staticmethod
    def _route(
        diff: ReconcileDiff,
        zone: str,
        name: str,
        record: ZoneRecord,
        change_type: ChangeType,
        address: str = "",
    ) -> None:
        """
        Направляет изменение PTR в обратную зону адреса.

        Если обратная зона совпала с переданной прямой, изменение
        пропускается: прямую зону как обратную не трогаем.
        """
        target_zone = find_private_zone(address or name, zone)
        if target_zone == zone:
            diff.to_skip.append(ZoneChange(
                name=name,
                change_type=ChangeType.SKIP,
                zone=zone,
                record=record,
                reason=f"no private reverse zone ({change_type.value})",
            ))
            return

        change = ZoneChange(name=name, change_type=change_type, zone=target_zone, record=record)
        if change_type == ChangeType.CREATE:
            diff.to_create.append(change)
        else:
            diff.to_delete.append(change)
