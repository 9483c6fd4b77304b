"""
Записи зоны и проекция Device в набор записей.

Закрытый набор вариантов записи (RecordKind):
    ADDRESS         A/AAAA   адрес
    POINTER         PTR      обратное имя -> имя
    ALIAS           CNAME    имя -> имя
    TEXT            TXT      место
    CLASSIFICATION  HINFO    (code, model)
    LOCATION        LOC      координаты
    EXTENSION       OPT      только объявление большого размера сообщения

Другие типы записей отклоняются явно на уровне wire (UnsupportedRecordError).

Пример использования:
    projector = RecordProjector()
    records = projector.project(device)
    directory.insert("example.org.", records)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, NamedTuple, Tuple

from .addressing import fqdn
from .geo import Location

# Предел одной character-string в TXT/HINFO (RFC 1035)
MAX_STRING_BYTES = 255


class RecordKind(str, Enum):
    """Тип записи зоны."""
    ADDRESS = "address"
    POINTER = "pointer"
    ALIAS = "alias"
    TEXT = "text"
    CLASSIFICATION = "classification"
    LOCATION = "location"
    EXTENSION = "extension"


class Classification(NamedTuple):
    """Содержимое HINFO: code хранится в os, model в cpu."""
    code: str
    model: str


@dataclass(frozen=True)
class ZoneRecord:
    """
    Одна запись зоны.

    Attributes:
        name: Полное имя владельца записи
        kind: Вариант записи
        value: Значение, зависит от kind:
            ADDRESS -> str адрес
            POINTER, ALIAS -> str целевое имя
            TEXT -> Tuple[str, ...] строки TXT
            CLASSIFICATION -> Classification
            LOCATION -> Location
            EXTENSION -> None
        ttl: TTL записи
    """
    name: str
    kind: RecordKind
    value: Any = None
    ttl: int = 0

    def __str__(self) -> str:
        if self.kind == RecordKind.TEXT:
            value = " ".join(f'"{s}"' for s in self.value)
        elif self.kind == RecordKind.CLASSIFICATION:
            value = f'"{self.value.model}" "{self.value.code}"'
        elif self.value is None:
            value = ""
        else:
            value = str(self.value)
        return f"{self.name}\t{self.ttl}\t{self.kind.value}\t{value}".rstrip()


class RecordProjector:
    """
    Проекция Device в набор записей, опубликованных на его имени.

    Чистая функция, в сеть не ходит.
    """

    def __init__(self, ttl: int = 0):
        """
        Args:
            ttl: TTL для создаваемых записей
        """
        self.ttl = ttl

    def to_extension(self, device: Any = None) -> ZoneRecord:
        """OPT запись для объявления больших буферов (без данных)."""
        return ZoneRecord(name=".", kind=RecordKind.EXTENSION, ttl=0)

    def to_text(self, device: Any) -> ZoneRecord:
        """TXT с названием места; длинный place режется на строки (split_text)."""
        return ZoneRecord(
            name=fqdn(device.name),
            kind=RecordKind.TEXT,
            value=split_text(device.place),
            ttl=self.ttl,
        )

    def to_classification(self, device: Any) -> ZoneRecord:
        """HINFO: cpu = model, os = code."""
        return ZoneRecord(
            name=fqdn(device.name),
            kind=RecordKind.CLASSIFICATION,
            value=Classification(code=device.code, model=device.model),
            ttl=self.ttl,
        )

    def to_location(self, device: Any) -> ZoneRecord:
        """LOC с размером и точностью по умолчанию."""
        return ZoneRecord(
            name=fqdn(device.name),
            kind=RecordKind.LOCATION,
            value=Location(*device.location()),
            ttl=self.ttl,
        )

    def project(self, device: Any) -> List[ZoneRecord]:
        """Полный набор записей устройства."""
        return [
            self.to_extension(device),
            self.to_text(device),
            self.to_classification(device),
            self.to_location(device),
        ]


def _cut_word(word: str, limit: int) -> List[str]:
    """Режет слово по границам символов UTF-8, не более limit байт в куске."""
    pieces: List[str] = []
    current = ""
    size = 0
    for char in word:
        char_size = len(char.encode("utf-8"))
        if current and size + char_size > limit:
            pieces.append(current)
            current, size = "", 0
        current += char
        size += char_size
    if current:
        pieces.append(current)
    return pieces


def split_text(text: str, limit: int = MAX_STRING_BYTES) -> Tuple[str, ...]:
    """
    Разбивает текст на строки TXT не длиннее limit байт в UTF-8.

    Слова упаковываются жадно, разрез проходит по одному пробелу, который
    при этом выпадает. Поэтому text_value(split_text(text)) == text.
    Слово длиннее limit режется по границам символов; при склейке
    на месте такого разреза появится пробел.

    Args:
        text: Исходный текст
        limit: Максимум байт в одной строке

    Returns:
        Tuple[str, ...]: Строки TXT (хотя бы одна, возможно пустая)
    """
    if len(text.encode("utf-8")) <= limit:
        return (text,)

    chunks: List[str] = []
    current = None
    for word in text.split(" "):
        if len(word.encode("utf-8")) > limit:
            if current is not None:
                chunks.append(current)
            *head, current = _cut_word(word, limit)
            chunks.extend(head)
            continue
        if current is None:
            current = word
        elif len(f"{current} {word}".encode("utf-8")) <= limit:
            current = f"{current} {word}"
        else:
            chunks.append(current)
            current = word
    if current is not None:
        chunks.append(current)
    return tuple(chunks)


def text_value(strings: Tuple[str, ...]) -> str:
    """
    Значение place из строк TXT.

    Старые записи хранят место разбитым по пробелам, а длинный place
    режется по пробелам (split_text), поэтому строки склеиваются через пробел.
    """
    return " ".join(strings)
