"""
Транспорт к DNS серверу на dnspython.

Операции:
    resolve                 host[:port] -> (адрес, порт)
    transfer_zone           AXFR, все RRset зоны или TransferError
    exchange                обычный запрос (UDP с переходом на TCP)
    authenticated_exchange  TSIG-подписанное сообщение по TCP

Ошибки dnspython и сокетов переводятся в иерархию ZoneInventoryError.
Повторов нет: решение о retry принимает вызывающий код.
"""

import socket
from typing import List, Optional, Tuple

import dns.exception
import dns.message
import dns.query
import dns.rcode
import dns.rrset
import dns.tsig

from ..core.constants import DEFAULT_DNS_PORT, TSIG_FUDGE
from ..core.credentials import TsigCredentials
from ..core.exceptions import (
    AuthError,
    NotFoundError,
    ProtocolError,
    TransferError,
    TransportError,
)
from ..core.logging import get_logger

logger = get_logger(__name__)

# Ошибки проверки TSIG подписи ответа
_TSIG_ERRORS = (
    dns.tsig.PeerError,
    dns.tsig.BadSignature,
    dns.tsig.BadTime,
    dns.message.UnknownTSIGKey,
)

_NETWORK_ERRORS = (dns.exception.DNSException, OSError, EOFError)


def split_server(server: str, default_port: int = DEFAULT_DNS_PORT) -> Tuple[str, int]:
    """
    Разбирает "host", "host:port", "[v6]:port" или голый IPv6.

    Raises:
        TransportError: Порт не является числом
    """
    server = server.strip()
    host, port = server, str(default_port)

    if server.startswith("["):
        host, _, rest = server[1:].partition("]")
        if rest.startswith(":"):
            port = rest[1:]
    elif server.count(":") == 1:
        host, port = server.split(":")

    try:
        port_number = int(port)
    except ValueError as e:
        raise TransportError(f"Некорректный порт: {port!r}", operation="resolve") from e
    if not 0 < port_number < 65536:
        raise TransportError(f"Порт вне диапазона: {port_number}", operation="resolve")

    return host, port_number


def raise_for_rcode(
    response: dns.message.Message,
    zone: Optional[str] = None,
    name: Optional[str] = None,
    operation: Optional[str] = None,
    key: Optional[str] = None,
) -> None:
    """
    Проверяет код ответа.

    Raises:
        AuthError: NOTAUTH (ключ не принят сервером)
        ProtocolError: Любой другой код кроме NOERROR
    """
    rcode = response.rcode()
    if rcode == dns.rcode.NOERROR:
        return
    text = dns.rcode.to_text(rcode)
    if rcode == dns.rcode.NOTAUTH:
        raise AuthError(f"Сервер отклонил ключ: {text}", zone=zone, operation=operation, key=key)
    raise ProtocolError(
        f"Сервер вернул {text}",
        zone=zone,
        name=name,
        operation=operation,
        rcode=text,
    )


class Transport:
    """
    Синхронный транспорт: один запрос на вызов, без внутренних потоков.

    Example:
        transport = Transport(timeout=5.0)
        address, port = transport.resolve("ns1.example.org:53")
        rrsets = transport.transfer_zone(address, port, "example.org.")
    """

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    def resolve(self, server: str, default_port: int = DEFAULT_DNS_PORT) -> Tuple[str, int]:
        """
        Резолвит имя сервера в адрес.

        Raises:
            NotFoundError: Имя не резолвится
            TransportError: Некорректный порт
        """
        host, port = split_server(server, default_port)
        try:
            infos = socket.getaddrinfo(host, port, proto=socket.IPPROTO_UDP)
        except (socket.gaierror, UnicodeError) as e:
            raise NotFoundError(f"Сервер не найден: {e}", host=host) from e
        if not infos:
            raise NotFoundError("Сервер не найден", host=host)
        address = infos[0][4][0]
        logger.debug(f"{server} -> {address}:{port}", server=server)
        return address, port

    def transfer_zone(self, address: str, port: int, zone: str) -> List[dns.rrset.RRset]:
        """
        Полный AXFR зоны.

        Результат возвращается только после получения всех сообщений.

        Raises:
            TransferError: Любая ошибка во время передачи
        """
        rrsets: List[dns.rrset.RRset] = []
        try:
            for message in dns.query.xfr(
                address,
                zone,
                port=port,
                timeout=self.timeout,
                lifetime=self.timeout * 6,
                relativize=False,
            ):
                rrsets.extend(message.answer)
        except _NETWORK_ERRORS as e:
            raise TransferError(f"Zone transfer прерван: {e}", zone=zone) from e

        logger.debug(f"AXFR получено {len(rrsets)} RRset", zone=zone, server=address)
        return rrsets

    def exchange(self, message: dns.message.Message, address: str, port: int) -> dns.message.Message:
        """
        Обычный запрос.

        Raises:
            TransportError: Сеть, таймаут, битый ответ
        """
        try:
            response, _ = dns.query.udp_with_fallback(
                message, address, timeout=self.timeout, port=port
            )
        except _NETWORK_ERRORS as e:
            raise TransportError(f"Ошибка запроса к {address}:{port}: {e}", operation="lookup") from e
        return response

    def authenticated_exchange(
        self,
        message: dns.message.Message,
        credentials: TsigCredentials,
        address: str,
        port: int,
        zone: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> dns.message.Message:
        """
        Подписывает сообщение TSIG и отправляет по TCP.

        Raises:
            AuthError: Подпись ответа не проходит проверку
            TransportError: Сеть, таймаут
        """
        message.use_tsig(
            credentials.keyring(),
            keyname=credentials.keyname,
            fudge=TSIG_FUDGE,
        )
        try:
            return dns.query.tcp(message, address, timeout=self.timeout, port=port)
        except _TSIG_ERRORS as e:
            raise AuthError(
                f"TSIG проверка не пройдена: {e}",
                zone=zone,
                operation=operation,
                key=credentials.key_name,
            ) from e
        except _NETWORK_ERRORS as e:
            raise TransportError(
                f"Ошибка обмена с {address}:{port}: {e}",
                zone=zone,
                operation=operation,
            ) from e
