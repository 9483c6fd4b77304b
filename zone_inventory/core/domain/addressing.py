"""
Адресная арифметика для обратных зон.

- Построение PTR имени по адресу и обратно
- Выбор обратной зоны для приватных сетей (RFC 1918)
"""

import ipaddress
from typing import Union

import dns.exception
import dns.name
import dns.reversename

from ..constants import PRIVATE_NETWORKS
from ..exceptions import CorrelationError

Address = Union[str, ipaddress.IPv4Address, ipaddress.IPv6Address]


def fqdn(name: str) -> str:
    """Добавляет завершающую точку к имени."""
    if name.endswith("."):
        return name
    return name + "."


def normalize_address(address: Address) -> str:
    """
    Нормализует адрес в каноническую текстовую форму.

    Raises:
        ValueError: Строка не является IP адресом
    """
    return str(ipaddress.ip_address(str(address).strip()))


def reverse_name(address: Address) -> str:
    """
    PTR имя для адреса.

    192.168.1.10 -> 10.1.168.192.in-addr.arpa.
    """
    return dns.reversename.from_address(normalize_address(address)).to_text()


def address_from_reverse(name: str) -> str:
    """
    Адрес из полного PTR имени.

    10.1.168.192.in-addr.arpa. -> 192.168.1.10

    Raises:
        CorrelationError: Имя не является полным обратным именем
    """
    try:
        address = dns.reversename.to_address(dns.name.from_text(fqdn(name)))
    except (dns.exception.DNSException, ValueError) as e:
        raise CorrelationError(
            "Имя не является обратным адресом",
            name=name,
            record=e,
        ) from e
    return normalize_address(address)


def find_private_zone(address: Address, zone: str) -> str:
    """
    Обратная зона, которая отвечает за адрес.

    10.0.0.0/8      -> 10.in-addr.arpa.
    172.16.0.0/12   -> <второй октет>.172.in-addr.arpa.
    192.168.0.0/16  -> 168.192.in-addr.arpa.
    остальные       -> zone (переданная вызывающим)

    Args:
        address: IP адрес
        zone: Зона по умолчанию

    Returns:
        str: Имя обратной зоны
    """
    ip = ipaddress.ip_address(normalize_address(address))
    for network, reverse_zone in PRIVATE_NETWORKS:
        if ip.version != network.version or ip not in network:
            continue
        if reverse_zone is None:
            octets = str(ip).split(".")
            return f"{octets[1]}.{octets[0]}.in-addr.arpa."
        return reverse_zone
    return zone
