"""
Тесты транспорта.

dnspython и сокеты подменяются, в сеть тесты не ходят.
"""

import socket

import pytest
from unittest.mock import MagicMock, patch

import dns.exception
import dns.message
import dns.name
import dns.rcode
import dns.rrset
import dns.tsig
import dns.update

from zone_inventory.core.credentials import TsigCredentials
from zone_inventory.core.exceptions import (
    AuthError,
    NotFoundError,
    ProtocolError,
    TransferError,
    TransportError,
)
from zone_inventory.zone.transport import Transport, raise_for_rcode, split_server

SECRET = "c2VjcmV0LWtleS1mb3ItdGVzdHM="


@pytest.fixture
def transport():
    return Transport(timeout=2.0)


@pytest.fixture
def credentials():
    return TsigCredentials("update-key", SECRET)


def response_with(rcode):
    query = dns.message.make_query("gw.example.org.", "A")
    response = dns.message.make_response(query)
    response.set_rcode(rcode)
    return response


class TestSplitServer:

    @pytest.mark.parametrize("server,expected", [
        ("ns1.example.org", ("ns1.example.org", 53)),
        ("ns1.example.org:5353", ("ns1.example.org", 5353)),
        (" 192.0.2.1:54 ", ("192.0.2.1", 54)),
        ("[2001:db8::1]:5353", ("2001:db8::1", 5353)),
        ("[2001:db8::1]", ("2001:db8::1", 53)),
        ("2001:db8::1", ("2001:db8::1", 53)),
    ])
    def test_forms(self, server, expected):
        assert split_server(server) == expected

    def test_default_port(self):
        assert split_server("ns1.example.org", 5300) == ("ns1.example.org", 5300)

    @pytest.mark.parametrize("server", ["ns1:dns", "ns1:0", "ns1:70000"])
    def test_bad_port(self, server):
        with pytest.raises(TransportError):
            split_server(server)


class TestRaiseForRcode:

    def test_noerror(self):
        raise_for_rcode(response_with(dns.rcode.NOERROR))

    def test_notauth(self):
        with pytest.raises(AuthError) as exc_info:
            raise_for_rcode(response_with(dns.rcode.NOTAUTH), zone="example.org.", key="update-key")
        assert exc_info.value.key == "update-key"

    @pytest.mark.parametrize("rcode,text", [
        (dns.rcode.REFUSED, "REFUSED"),
        (dns.rcode.SERVFAIL, "SERVFAIL"),
        (dns.rcode.NXDOMAIN, "NXDOMAIN"),
    ])
    def test_other_codes(self, rcode, text):
        with pytest.raises(ProtocolError) as exc_info:
            raise_for_rcode(response_with(rcode), zone="example.org.", operation="insert")
        assert exc_info.value.rcode == text
        assert exc_info.value.operation == "insert"


class TestResolve:

    @patch("zone_inventory.zone.transport.socket.getaddrinfo")
    def test_first_address(self, mock_getaddrinfo, transport):
        mock_getaddrinfo.return_value = [
            (socket.AF_INET, socket.SOCK_DGRAM, 17, "", ("192.0.2.53", 5353)),
            (socket.AF_INET, socket.SOCK_DGRAM, 17, "", ("192.0.2.54", 5353)),
        ]

        assert transport.resolve("ns1.example.org:5353") == ("192.0.2.53", 5353)
        assert mock_getaddrinfo.call_args.args[:2] == ("ns1.example.org", 5353)

    @patch("zone_inventory.zone.transport.socket.getaddrinfo")
    def test_not_found(self, mock_getaddrinfo, transport):
        mock_getaddrinfo.side_effect = socket.gaierror(-2, "Name or service not known")

        with pytest.raises(NotFoundError) as exc_info:
            transport.resolve("missing.example.org")
        assert exc_info.value.host == "missing.example.org"

    @patch("zone_inventory.zone.transport.socket.getaddrinfo")
    def test_empty_result(self, mock_getaddrinfo, transport):
        mock_getaddrinfo.return_value = []

        with pytest.raises(NotFoundError):
            transport.resolve("ns1.example.org")


class TestTransferZone:

    @patch("zone_inventory.zone.transport.dns.query.xfr")
    def test_collects_all_messages(self, mock_xfr, transport):
        first = dns.rrset.from_text("example.org.", 3600, "IN", "NS", "ns1.example.org.")
        second = dns.rrset.from_text("gw.example.org.", 3600, "IN", "A", "192.168.1.1")
        mock_xfr.return_value = iter([MagicMock(answer=[first]), MagicMock(answer=[second])])

        rrsets = transport.transfer_zone("192.0.2.53", 53, "example.org.")

        assert rrsets == [first, second]
        assert mock_xfr.call_args.kwargs["relativize"] is False
        assert mock_xfr.call_args.kwargs["port"] == 53

    @patch("zone_inventory.zone.transport.dns.query.xfr")
    def test_refused(self, mock_xfr, transport):
        mock_xfr.side_effect = dns.exception.FormError("Transfer refused")

        with pytest.raises(TransferError) as exc_info:
            transport.transfer_zone("192.0.2.53", 53, "example.org.")
        assert exc_info.value.zone == "example.org."

    @patch("zone_inventory.zone.transport.dns.query.xfr")
    def test_interrupted(self, mock_xfr, transport):
        """Обрыв посередине: частичный результат не возвращается."""
        rrset = dns.rrset.from_text("gw.example.org.", 3600, "IN", "A", "192.168.1.1")

        def messages():
            yield MagicMock(answer=[rrset])
            raise EOFError()

        mock_xfr.return_value = messages()

        with pytest.raises(TransferError):
            transport.transfer_zone("192.0.2.53", 53, "example.org.")


class TestExchange:

    @patch("zone_inventory.zone.transport.dns.query.udp_with_fallback")
    def test_returns_response(self, mock_udp, transport):
        response = response_with(dns.rcode.NOERROR)
        mock_udp.return_value = (response, False)

        query = dns.message.make_query("gw.example.org.", "A")
        assert transport.exchange(query, "192.0.2.53", 53) is response

    @patch("zone_inventory.zone.transport.dns.query.udp_with_fallback")
    def test_timeout(self, mock_udp, transport):
        mock_udp.side_effect = dns.exception.Timeout()

        with pytest.raises(TransportError) as exc_info:
            transport.exchange(dns.message.make_query("gw.example.org.", "A"), "192.0.2.53", 53)
        assert exc_info.value.operation == "lookup"


class TestAuthenticatedExchange:

    @patch("zone_inventory.zone.transport.dns.query.tcp")
    def test_signs_message(self, mock_tcp, transport, credentials):
        response = response_with(dns.rcode.NOERROR)
        mock_tcp.return_value = response
        message = dns.update.UpdateMessage("example.org.")

        result = transport.authenticated_exchange(message, credentials, "192.0.2.53", 53)

        assert result is response
        assert message.keyname == dns.name.from_text("update-key")
        mock_tcp.assert_called_once_with(message, "192.0.2.53", timeout=2.0, port=53)

    @patch("zone_inventory.zone.transport.dns.query.tcp")
    def test_bad_signature(self, mock_tcp, transport, credentials):
        mock_tcp.side_effect = dns.tsig.BadSignature()

        with pytest.raises(AuthError) as exc_info:
            transport.authenticated_exchange(
                dns.update.UpdateMessage("example.org."), credentials, "192.0.2.53", 53,
                zone="example.org.", operation="insert",
            )
        assert exc_info.value.key == "update-key"
        assert exc_info.value.operation == "insert"

    @patch("zone_inventory.zone.transport.dns.query.tcp")
    def test_connection_refused(self, mock_tcp, transport, credentials):
        mock_tcp.side_effect = ConnectionRefusedError()

        with pytest.raises(TransportError) as exc_info:
            transport.authenticated_exchange(
                dns.update.UpdateMessage("example.org."), credentials, "192.0.2.53", 53,
                zone="example.org.",
            )
        assert not isinstance(exc_info.value, AuthError)
        assert exc_info.value.zone == "example.org."
