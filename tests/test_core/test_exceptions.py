"""
Тесты для иерархии исключений.
"""

import pytest

from zone_inventory.core.exceptions import (
    ZoneInventoryError,
    DirectoryError,
    TransportError,
    NotFoundError,
    ProtocolError,
    AuthError,
    TransferError,
    CorrelationError,
    UnsupportedRecordError,
    FetchError,
    ConfigError,
    format_error_for_log,
    is_retryable,
)


class TestHierarchy:
    """Проверка наследования."""

    @pytest.mark.parametrize("error_class", [
        DirectoryError, TransferError, CorrelationError, FetchError, ConfigError,
    ])
    def test_base_class(self, error_class):
        assert issubclass(error_class, ZoneInventoryError)

    def test_directory_errors(self):
        assert issubclass(TransportError, DirectoryError)
        assert issubclass(NotFoundError, TransportError)
        assert issubclass(ProtocolError, DirectoryError)
        assert issubclass(AuthError, DirectoryError)

    def test_unsupported_is_correlation(self):
        assert issubclass(UnsupportedRecordError, CorrelationError)


class TestErrorDetails:

    def test_str_with_details(self):
        error = ProtocolError("Update failed", zone="example.org.", rcode="REFUSED")

        assert "Update failed" in str(error)
        assert "zone='example.org.'" in str(error)
        assert "rcode='REFUSED'" in str(error)
        assert error.rcode == "REFUSED"

    def test_str_without_details(self):
        assert str(ZoneInventoryError("boom")) == "boom"

    def test_not_found_operation(self):
        error = NotFoundError("Host not found", host="ns1.example.org")

        assert error.operation == "resolve"
        assert error.details["host"] == "ns1.example.org"

    def test_auth_error_key(self):
        error = AuthError("Bad signature", zone="example.org.", key="update-key")

        assert error.key == "update-key"
        assert error.zone == "example.org."

    def test_correlation_record_truncated(self):
        error = CorrelationError("Bad record", record="x" * 500)
        assert len(error.details["record"]) == 100

    def test_to_dict(self):
        data = TransferError("Refused", zone="example.org.").to_dict()

        assert data == {
            "error_type": "TransferError",
            "message": "Refused",
            "details": {"zone": "example.org."},
        }


class TestHelpers:

    def test_format_error_for_log(self):
        assert format_error_for_log(FetchError("HTTP 500", status_code=500)) == "HTTP 500 (status_code=500)"
        assert format_error_for_log(KeyError("x")) == "KeyError: 'x'"

    @pytest.mark.parametrize("error,expected", [
        (TransportError("timeout"), True),
        (NotFoundError("no host"), True),
        (TransferError("refused"), True),
        (AuthError("bad key"), False),
        (ProtocolError("refused"), False),
        (ConfigError("bad"), False),
    ])
    def test_is_retryable(self, error, expected):
        assert is_retryable(error) is expected
