"""
Преобразование между rdata dnspython и ZoneRecord.

Поддерживается закрытый набор типов: A, AAAA, PTR, CNAME, TXT, HINFO,
LOC, OPT. Остальные типы отклоняются с UnsupportedRecordError.

LOC собирается и разбирается через wire-формат RFC 1876, чтобы значения
с фиксированной точкой не проходили через текстовое представление.
"""

import struct
from typing import Iterable, List

import dns.rdata
import dns.rdataclass
import dns.rdatatype
import dns.rrset
from dns.rdtypes.ANY.HINFO import HINFO
from dns.rdtypes.ANY.TXT import TXT

from ..core.constants import LOC_VERSION
from ..core.domain.addressing import fqdn
from ..core.domain.geo import Location
from ..core.domain.records import MAX_STRING_BYTES, Classification, RecordKind, ZoneRecord
from ..core.exceptions import CorrelationError, UnsupportedRecordError
from ..core.logging import get_logger

logger = get_logger(__name__)

_LOC_FORMAT = "!BBBBIII"

_KIND_TYPES = {
    RecordKind.POINTER: dns.rdatatype.PTR,
    RecordKind.ALIAS: dns.rdatatype.CNAME,
    RecordKind.TEXT: dns.rdatatype.TXT,
    RecordKind.CLASSIFICATION: dns.rdatatype.HINFO,
    RecordKind.LOCATION: dns.rdatatype.LOC,
    RecordKind.EXTENSION: dns.rdatatype.OPT,
}


def rdtype_of(record: ZoneRecord) -> dns.rdatatype.RdataType:
    """Тип DNS записи для ZoneRecord."""
    if record.kind == RecordKind.ADDRESS:
        if ":" in str(record.value):
            return dns.rdatatype.AAAA
        return dns.rdatatype.A
    return _KIND_TYPES[record.kind]


def _text(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


def record_from_rdata(name: str, ttl: int, rdata: dns.rdata.Rdata) -> ZoneRecord:
    """
    ZoneRecord из rdata.

    Raises:
        UnsupportedRecordError: Тип вне закрытого набора
    """
    rdtype = rdata.rdtype

    if rdtype in (dns.rdatatype.A, dns.rdatatype.AAAA):
        return ZoneRecord(name, RecordKind.ADDRESS, rdata.address, ttl)
    if rdtype == dns.rdatatype.PTR:
        return ZoneRecord(name, RecordKind.POINTER, rdata.target.to_text(), ttl)
    if rdtype == dns.rdatatype.CNAME:
        return ZoneRecord(name, RecordKind.ALIAS, rdata.target.to_text(), ttl)
    if rdtype == dns.rdatatype.TXT:
        return ZoneRecord(name, RecordKind.TEXT, tuple(_text(s) for s in rdata.strings), ttl)
    if rdtype == dns.rdatatype.HINFO:
        value = Classification(code=_text(rdata.os), model=_text(rdata.cpu))
        return ZoneRecord(name, RecordKind.CLASSIFICATION, value, ttl)
    if rdtype == dns.rdatatype.LOC:
        return ZoneRecord(name, RecordKind.LOCATION, location_from_rdata(name, rdata), ttl)
    if rdtype == dns.rdatatype.OPT:
        return ZoneRecord(".", RecordKind.EXTENSION, None, 0)

    raise UnsupportedRecordError(
        "Тип записи не поддерживается",
        name=name,
        rdtype=dns.rdatatype.to_text(rdtype),
    )


def location_from_rdata(name: str, rdata: dns.rdata.Rdata) -> Location:
    """Разбирает LOC rdata в Location."""
    wire = rdata.to_wire()
    if len(wire) != struct.calcsize(_LOC_FORMAT):
        raise CorrelationError("Некорректная длина LOC", name=name, record=rdata)
    version, size, horiz_pre, vert_pre, lat32, lon32, alt32 = struct.unpack(_LOC_FORMAT, wire)
    if version != LOC_VERSION:
        raise CorrelationError(f"Неизвестная версия LOC: {version}", name=name, record=rdata)
    return Location(lat32, lon32, alt32, size, horiz_pre, vert_pre)


def location_to_rdata(location: Location) -> dns.rdata.Rdata:
    """Собирает LOC rdata из Location."""
    wire = struct.pack(
        _LOC_FORMAT,
        LOC_VERSION,
        location.size,
        location.horiz_pre,
        location.vert_pre,
        location.latitude,
        location.longitude,
        location.altitude,
    )
    return dns.rdata.from_wire(
        dns.rdataclass.IN, dns.rdatatype.LOC, wire, 0, len(wire)
    )


def record_to_rdata(record: ZoneRecord) -> dns.rdata.Rdata:
    """
    rdata для вставки ZoneRecord.

    Raises:
        UnsupportedRecordError: EXTENSION не является данными зоны
        CorrelationError: Строка TXT/HINFO длиннее 255 байт
    """
    rdclass = dns.rdataclass.IN
    rdtype = rdtype_of(record)

    if record.kind == RecordKind.ADDRESS:
        return dns.rdata.from_text(rdclass, rdtype, str(record.value))
    if record.kind in (RecordKind.POINTER, RecordKind.ALIAS):
        return dns.rdata.from_text(rdclass, rdtype, fqdn(record.value))
    if record.kind in (RecordKind.TEXT, RecordKind.CLASSIFICATION):
        try:
            if record.kind == RecordKind.TEXT:
                return TXT(rdclass, rdtype, [s.encode("utf-8") for s in record.value])
            return HINFO(rdclass, rdtype, record.value.model.encode("utf-8"), record.value.code.encode("utf-8"))
        except ValueError as e:
            raise CorrelationError(
                f"Строка записи длиннее {MAX_STRING_BYTES} байт",
                name=record.name,
                record=record,
            ) from e
    if record.kind == RecordKind.LOCATION:
        return location_to_rdata(record.value)

    raise UnsupportedRecordError(
        "OPT не вставляется в зону",
        name=record.name,
        rdtype="OPT",
    )


def records_from_rrsets(rrsets: Iterable[dns.rrset.RRset], zone: str = "") -> List[ZoneRecord]:
    """
    Все записи из набора RRset.

    Неподдерживаемые типы (SOA, NS, MX, ...) пропускаются с debug логом,
    битые LOC с warning.
    """
    records: List[ZoneRecord] = []
    for rrset in rrsets:
        name = rrset.name.to_text()
        for rdata in rrset:
            try:
                records.append(record_from_rdata(name, rrset.ttl, rdata))
            except UnsupportedRecordError as e:
                logger.debug(f"Запись пропущена: {e.rdtype} {name}", zone=zone)
            except CorrelationError as e:
                logger.warning(f"Запись пропущена: {e}", zone=zone)
    return records
