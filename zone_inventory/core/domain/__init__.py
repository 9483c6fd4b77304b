"""
Domain Layer для Zone Inventory.

Чистая логика без сети:
- geo: кодек координат LOC
- addressing: PTR имена и выбор обратной зоны
- records: записи зоны и проекция Device в записи
- correlation: сборка инвентаря из записей (InventoryCorrelator)
- reconcile: план изменений между двумя состояниями (ReconcileComparator)

correlation и reconcile зависят от models, поэтому импортируются напрямую:
    from zone_inventory.core.domain.reconcile import ReconcileComparator
"""

from .geo import (
    Location,
    decode_location,
    encode_location,
    cm_to_size,
    size_to_cm,
    format_location,
)
from .addressing import (
    fqdn,
    normalize_address,
    reverse_name,
    address_from_reverse,
    find_private_zone,
)
from .records import (
    RecordKind,
    Classification,
    ZoneRecord,
    RecordProjector,
    split_text,
    text_value,
)

__all__ = [
    "Location",
    "decode_location",
    "encode_location",
    "cm_to_size",
    "size_to_cm",
    "format_location",
    "fqdn",
    "normalize_address",
    "reverse_name",
    "address_from_reverse",
    "find_private_zone",
    "RecordKind",
    "Classification",
    "ZoneRecord",
    "RecordProjector",
    "split_text",
    "text_value",
]
