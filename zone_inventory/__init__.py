"""
Zone Inventory - инвентарь оборудования, хранящийся в DNS.

Источник истины: записи авторитетной зоны (A, CNAME, PTR, TXT, HINFO, LOC).
Модуль позволяет:
- Собрать инвентарь из zone transfer прямых и обратных зон
- Кодировать/декодировать координаты LOC (RFC 1876)
- Применить минимальный набор TSIG-подписанных обновлений,
  чтобы привести опубликованное состояние устройства к нужному

Примеры использования:
    from zone_inventory import DirectoryService, DifferentialReconciler

    directory = DirectoryService.from_config()
    inventory = directory.list(["example.org."], ["168.192.in-addr.arpa."])

    current = inventory.find("gw.example.org.")
    DifferentialReconciler(directory).reconcile("example.org.", 3600, current, desired)
"""

__version__ = "1.0.0"

from .core.models import Device, Inventory
from .core.exceptions import ZoneInventoryError
from .zone.directory import DirectoryService
from .zone.inventory import InventoryBuilder
from .zone.reconciler import DifferentialReconciler

__all__ = [
    "Device",
    "Inventory",
    "ZoneInventoryError",
    "DirectoryService",
    "InventoryBuilder",
    "DifferentialReconciler",
]
