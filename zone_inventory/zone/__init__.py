"""
Работа с DNS сервером.

- DirectoryService: чтение зон и подписанные изменения
- InventoryBuilder: сборка инвентаря из zone transfer
- DifferentialReconciler: применение плана изменений
- RemoteFetch: снимок инвентаря по HTTP
- Transport: dnspython транспорт
"""

from .transport import Transport
from .directory import DirectoryService
from .inventory import InventoryBuilder, load_configured, load_local, load_remote
from .reconciler import DifferentialReconciler, ReconcileStats
from .remote import RemoteFetch

__all__ = [
    "Transport",
    "DirectoryService",
    "InventoryBuilder",
    "load_local",
    "load_remote",
    "load_configured",
    "DifferentialReconciler",
    "ReconcileStats",
    "RemoteFetch",
]
