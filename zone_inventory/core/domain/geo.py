"""
Кодек географических координат LOC записи (RFC 1876).

Чистые функции: перевод между градусами/метрами и 32-битными
значениями с фиксированной точкой, которые хранятся в LOC записи.

Формат:
    latitude/longitude: миллиарксекунды со смещением 2^31 (экватор/Гринвич)
    altitude: сантиметры со смещением 100000 м (ниже уровня моря)
    size/precision: байт мантисса/экспонента, значение в сантиметрах

Пример использования:
    from zone_inventory.core.domain.geo import Location

    loc = Location.from_degrees(-41.290438888888886, 174.7815961111111, 21)
    str(loc)  # "41 17 25.580 S 174 46 53.746 E 21m 100m 50m 50m"
"""

from dataclasses import dataclass
from typing import Tuple

from ..constants import (
    LOC_EQUATOR,
    LOC_PRIMEMERIDIAN,
    LOC_DEGREES,
    LOC_ALTITUDEBASE,
    LOC_DEFAULT_SIZE_CM,
    LOC_DEFAULT_HORIZ_PRE_CM,
    LOC_DEFAULT_VERT_PRE_CM,
)

_UINT32_MAX = (1 << 32) - 1
_LOC_MINUTES = 60 * 1000  # миллиарксекунд в минуте


def decode_location(lat32: int, lon32: int, alt32: int) -> Tuple[float, float, float]:
    """
    Декодирует LOC значения в градусы и метры.

    Args:
        lat32: Широта (uint32)
        lon32: Долгота (uint32)
        alt32: Высота (uint32, сантиметры от -100000 м)

    Returns:
        Tuple[float, float, float]: (latitude, longitude, height)
    """
    if lat32 > LOC_EQUATOR:
        latitude = (lat32 - LOC_EQUATOR) / LOC_DEGREES
    else:
        latitude = -(LOC_EQUATOR - lat32) / LOC_DEGREES

    if lon32 > LOC_PRIMEMERIDIAN:
        longitude = (lon32 - LOC_PRIMEMERIDIAN) / LOC_DEGREES
    else:
        longitude = -(LOC_PRIMEMERIDIAN - lon32) / LOC_DEGREES

    height = alt32 / 100.0 - LOC_ALTITUDEBASE

    return latitude, longitude, height


def encode_location(latitude: float, longitude: float, height: float) -> Tuple[int, int, int]:
    """
    Кодирует градусы и метры в LOC значения.

    Точность: 1 миллиарксекунда, 1 сантиметр.

    Raises:
        ValueError: Значение не помещается в uint32
    """
    lat32 = round(latitude * LOC_DEGREES) + LOC_EQUATOR
    lon32 = round(longitude * LOC_DEGREES) + LOC_PRIMEMERIDIAN
    alt32 = round((height + LOC_ALTITUDEBASE) * 100.0)

    for label, value in (("latitude", lat32), ("longitude", lon32), ("height", alt32)):
        if not 0 <= value <= _UINT32_MAX:
            raise ValueError(f"{label} вне диапазона LOC: {value}")

    return lat32, lon32, alt32


def cm_to_size(cms: int) -> int:
    """
    Упаковывает сантиметры в байт мантисса/экспонента.

    10000 -> 0x14, 5000 -> 0x53.
    """
    exponent = 0
    value = cms
    while value >= 10:
        value //= 10
        exponent += 1
    return ((value & 0x0F) << 4) | (exponent & 0x0F)


def size_to_cm(size: int) -> int:
    """Распаковывает байт мантисса/экспонента в сантиметры."""
    return (size >> 4) * 10 ** (size & 0x0F)


def _size_to_meters(size: int) -> str:
    mantissa = size >> 4
    exponent = size & 0x0F
    if exponent < 2:
        if exponent == 1:
            mantissa *= 10
        return f"0.{mantissa:02d}"
    return str(mantissa) + "0" * (exponent - 2)


def _format_angle(value: int, base: int, positive: str, negative: str) -> str:
    if value > base:
        hemisphere = positive
        value -= base
    else:
        hemisphere = negative
        value = base - value
    degrees, value = divmod(value, LOC_DEGREES)
    minutes, value = divmod(value, _LOC_MINUTES)
    return f"{degrees:02d} {minutes:02d} {value / 1000:0.3f} {hemisphere}"


def format_location(
    lat32: int,
    lon32: int,
    alt32: int,
    size: int,
    horiz_pre: int,
    vert_pre: int,
) -> str:
    """
    Текстовое представление LOC записи.

    Формат: "41 17 25.580 S 174 46 53.746 E 21m 100m 50m 50m"
    """
    altitude = alt32 / 100.0 - LOC_ALTITUDEBASE
    if alt32 % 100 != 0:
        alt_str = f"{altitude:.2f}m"
    else:
        alt_str = f"{altitude:.0f}m"

    return " ".join([
        _format_angle(lat32, LOC_EQUATOR, "N", "S"),
        _format_angle(lon32, LOC_PRIMEMERIDIAN, "E", "W"),
        alt_str,
        _size_to_meters(size) + "m",
        _size_to_meters(horiz_pre) + "m",
        _size_to_meters(vert_pre) + "m",
    ])


@dataclass(frozen=True)
class Location:
    """
    Содержимое LOC записи в wire-представлении.

    Attributes:
        latitude: Широта (uint32)
        longitude: Долгота (uint32)
        altitude: Высота (uint32)
        size: Диаметр объекта (байт мантисса/экспонента)
        horiz_pre: Горизонтальная точность
        vert_pre: Вертикальная точность
    """
    latitude: int
    longitude: int
    altitude: int
    size: int = cm_to_size(LOC_DEFAULT_SIZE_CM)
    horiz_pre: int = cm_to_size(LOC_DEFAULT_HORIZ_PRE_CM)
    vert_pre: int = cm_to_size(LOC_DEFAULT_VERT_PRE_CM)

    @classmethod
    def from_degrees(
        cls,
        latitude: float,
        longitude: float,
        height: float,
        size_cm: int = LOC_DEFAULT_SIZE_CM,
        horiz_pre_cm: int = LOC_DEFAULT_HORIZ_PRE_CM,
        vert_pre_cm: int = LOC_DEFAULT_VERT_PRE_CM,
    ) -> "Location":
        """Создаёт Location из градусов и метров."""
        lat32, lon32, alt32 = encode_location(latitude, longitude, height)
        return cls(
            latitude=lat32,
            longitude=lon32,
            altitude=alt32,
            size=cm_to_size(size_cm),
            horiz_pre=cm_to_size(horiz_pre_cm),
            vert_pre=cm_to_size(vert_pre_cm),
        )

    def to_degrees(self) -> Tuple[float, float, float]:
        """Возвращает (latitude, longitude, height)."""
        return decode_location(self.latitude, self.longitude, self.altitude)

    def __str__(self) -> str:
        return format_location(
            self.latitude,
            self.longitude,
            self.altitude,
            self.size,
            self.horiz_pre,
            self.vert_pre,
        )
