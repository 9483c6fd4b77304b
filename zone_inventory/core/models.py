"""
Data Models для Zone Inventory.

Device: единица инвентаря, восстановленная из DNS записей:
    A      -> ip (основной адрес)
    PTR    -> reverse (обратные адреса) и mapping (PTR на CNAME)
    CNAME  -> aliases
    TXT    -> place
    HINFO  -> model (cpu), code (os)
    LOC    -> latitude, longitude, height

Inventory: неизменяемый список Device, отсортированный по имени.

Использование:
    from zone_inventory.core.models import Device, Inventory

    device = Device.from_dict(data)
    inventory = Inventory([device])
    inventory.list_by_code("wel").find("gw.example.org.")
"""

import copy
import ipaddress
import json
import re
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Any, Dict, Iterator, Iterable, Callable, Tuple, Union

from .domain.addressing import normalize_address
from .domain.geo import decode_location, encode_location


@dataclass(eq=False)
class Device:
    """
    Оборудование, описанное DNS записями.

    Предполагается, что у каждого устройства одна A запись с каноническим
    именем и адресом. Дополнительные имена хранятся как CNAME, дополнительные
    адреса как PTR на эти CNAME (mapping).

    Attributes:
        name: Полное DNS имя (A)
        ip: Основной адрес (A)
        reverse: Адреса с PTR на это имя
        mapping: Вторичные адреса: alias -> адрес (PTR/CNAME)
        aliases: Другие имена (CNAME)
        place: Название места (TXT)
        model: Модель оборудования (HINFO cpu)
        code: Код площадки (HINFO os)
        latitude: Широта (LOC)
        longitude: Долгота (LOC)
        height: Высота в метрах (LOC)
    """
    name: str
    ip: str = ""
    reverse: List[str] = field(default_factory=list)
    mapping: Dict[str, str] = field(default_factory=dict)
    aliases: List[str] = field(default_factory=list)
    place: str = ""
    model: str = ""
    code: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    height: float = 0.0

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Device name не может быть пустым")
        if self.ip:
            self.ip = normalize_address(self.ip)
        self.reverse = [normalize_address(a) for a in self.reverse]
        self.mapping = {n: normalize_address(a) for n, a in self.mapping.items()}

    # ==================== LOC ====================

    def set_location(self, lat32: int, lon32: int, alt32: int) -> None:
        """Устанавливает координаты из LOC значений."""
        self.latitude, self.longitude, self.height = decode_location(lat32, lon32, alt32)

    def location(self) -> Tuple[int, int, int]:
        """Координаты в LOC значениях (lat32, lon32, alt32)."""
        return encode_location(self.latitude, self.longitude, self.height)

    # ==================== ПРЕДИКАТЫ ====================

    def hostname(self) -> str:
        """Первая метка имени."""
        labels = [label for label in self.name.split(".") if label]
        if labels:
            return labels[0]
        return self.name

    def has_name(self, name: str) -> bool:
        return self.name.lower() == name.lower()

    def has_address(self, address: Any) -> bool:
        """Совпадает ли адрес с основным или одним из обратных."""
        ip = _parse_address(address)
        if ip is None:
            return False
        if self.ip and ipaddress.ip_address(self.ip) == ip:
            return True
        return self.has_reverse(ip)

    def in_network(self, network: Union[str, ipaddress.IPv4Network, ipaddress.IPv6Network]) -> bool:
        net = ipaddress.ip_network(str(network), strict=False)
        addresses = ([self.ip] if self.ip else []) + self.reverse
        return any(ipaddress.ip_address(a) in net for a in addresses)

    def at_place(self, place: str) -> bool:
        return self.place.lower() == place.lower()

    def at_location(self, lat32: int, lon32: int, alt32: int) -> bool:
        return self.location() == (lat32, lon32, alt32)

    def has_code(self, code: str) -> bool:
        return self.code.lower() == code.lower()

    def has_model(self, model: str) -> bool:
        # Модель сравнивается с учётом регистра
        return self.model == model

    def has_alias(self, alias: str) -> bool:
        return alias in self.aliases

    def has_reverse(self, address: Any) -> bool:
        ip = _parse_address(address)
        if ip is None:
            return False
        return any(ipaddress.ip_address(a) == ip for a in self.reverse)

    def has_ip(self, address: Any) -> bool:
        """Есть ли адрес среди вторичных (mapping)."""
        ip = _parse_address(address)
        if ip is None:
            return False
        return any(ipaddress.ip_address(a) == ip for a in self.mapping.values())

    def has_mapping(self, name: str, address: Any) -> bool:
        ip = _parse_address(address)
        if ip is None or name not in self.mapping:
            return False
        return ipaddress.ip_address(self.mapping[name]) == ip

    def __eq__(self, other: object) -> bool:
        """
        Совпадение опубликованного состояния.

        Имя, адрес (основной или любой обратный), код, модель и
        закодированные координаты. Используется чтобы понять, нужны ли
        изменения в DNS. Два пустых основных адреса совпадают.
        """
        if not isinstance(other, Device):
            return NotImplemented
        if not self.has_name(other.name):
            return False
        if (self.ip or other.ip) and not self.has_address(other.ip):
            return False
        if not self.has_code(other.code):
            return False
        if not self.has_model(other.model):
            return False
        if not self.at_location(*other.location()):
            return False
        return True

    __hash__ = None  # mutable

    # ==================== СЕРИАЛИЗАЦИЯ ====================

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Device":
        """Создаёт Device из словаря (JSON снимок инвентаря)."""
        return cls(
            name=data.get("name") or "",
            ip=data.get("ip") or "",
            reverse=list(data.get("reverse") or []),
            mapping=dict(data.get("mapping") or {}),
            aliases=list(data.get("aliases") or []),
            place=data.get("place") or "",
            model=data.get("model") or "",
            code=data.get("code") or "",
            latitude=float(data.get("latitude") or 0.0),
            longitude=float(data.get("longitude") or 0.0),
            height=float(data.get("height") or 0.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        return self.to_json()


def _parse_address(address: Any) -> Optional[Union[ipaddress.IPv4Address, ipaddress.IPv6Address]]:
    if not address:
        return None
    try:
        return ipaddress.ip_address(str(address).strip())
    except ValueError:
        return None


class Inventory:
    """
    Неизменяемый список устройств, отсортированный по имени.

    Все запросы возвращают новый Inventory, исходный не меняется.
    Устройства копируются при создании и при выдаче наружу, поэтому
    изменение полученного Device не затрагивает снимок.

    Example:
        inventory = builder.build(["example.org."], ["168.192.in-addr.arpa."])
        for device in inventory.list_by_model("Q330"):
            print(device.name, device.ip)
    """

    def __init__(self, devices: Iterable[Device] = ()):
        self._devices: Tuple[Device, ...] = tuple(
            sorted((copy.deepcopy(d) for d in devices), key=lambda d: d.name)
        )

    @property
    def devices(self) -> Tuple[Device, ...]:
        return tuple(copy.deepcopy(d) for d in self._devices)

    def __iter__(self) -> Iterator[Device]:
        return (copy.deepcopy(d) for d in self._devices)

    def __len__(self) -> int:
        return len(self._devices)

    def __getitem__(self, index: int) -> Device:
        return copy.deepcopy(self._devices[index])

    def __repr__(self) -> str:
        return f"Inventory({len(self._devices)} devices)"

    def _filter(self, predicate: Callable[[Device], bool]) -> "Inventory":
        return Inventory(d for d in self._devices if predicate(d))

    # ==================== ПОИСК ====================

    def find(self, name: str) -> Optional[Device]:
        """Устройство по имени (без учёта регистра)."""
        for device in self._devices:
            if device.has_name(name):
                return copy.deepcopy(device)
        return None

    def find_by_ip(self, address: Any) -> Optional[Device]:
        """Устройство по основному адресу."""
        ip = _parse_address(address)
        if ip is None:
            return None
        for device in self._devices:
            if device.ip and ipaddress.ip_address(device.ip) == ip:
                return copy.deepcopy(device)
        return None

    def list_by_model(self, model: str) -> "Inventory":
        return self._filter(lambda d: d.has_model(model))

    def list_by_code(self, code: str) -> "Inventory":
        return self._filter(lambda d: d.has_code(code))

    def list_by_place(self, place: str) -> "Inventory":
        return self._filter(lambda d: d.at_place(place))

    def list_by_model_and_code(self, model: str, code: str) -> "Inventory":
        return self._filter(lambda d: d.has_model(model) and d.has_code(code))

    def list_by_network(self, network: Any) -> "Inventory":
        net = ipaddress.ip_network(str(network), strict=False)
        return self._filter(lambda d: d.in_network(net))

    def _match(self, pattern: str, attr: str) -> "Inventory":
        try:
            regex = re.compile(pattern)
        except re.error as e:
            raise ValueError(f"Некорректный паттерн {pattern!r}: {e}") from e
        return self._filter(lambda d: regex.search(getattr(d, attr)) is not None)

    def match_by_name(self, pattern: str) -> "Inventory":
        """Фильтр по regex имени."""
        return self._match(pattern, "name")

    def match_by_model(self, pattern: str) -> "Inventory":
        """Фильтр по regex модели."""
        return self._match(pattern, "model")

    def match_by_place(self, pattern: str) -> "Inventory":
        """Фильтр по regex места."""
        return self._match(pattern, "place")

    # ==================== СЕРИАЛИЗАЦИЯ ====================

    @classmethod
    def from_dicts(cls, data: List[Dict[str, Any]]) -> "Inventory":
        return cls(Device.from_dict(d) for d in data)

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [d.to_dict() for d in self._devices]
