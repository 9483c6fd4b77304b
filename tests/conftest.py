"""
Pytest configuration и общие fixtures для тестов.

Предоставляет переиспользуемые fixtures:
- mock_directory: Mock DirectoryService для reconcile/сборки
- mock_transport: Mock транспорта для DirectoryService
- sample_device: Устройство с адресами, алиасами и координатами
- clean_env: Очистка ZONE_* переменных окружения
"""

import pytest
from unittest.mock import MagicMock

import dns.rcode

from zone_inventory.core.context import set_current_context
from zone_inventory.core.models import Device

TSIG_SECRET = "c2VjcmV0LWtleS1mb3ItdGVzdHM="  # base64("secret-key-for-tests")

WELLINGTON = (-41.290438888888886, 174.7815961111111, 21.0)


@pytest.fixture(autouse=True)
def reset_context():
    """Глобальный RunContext не переходит между тестами."""
    set_current_context(None)
    yield
    set_current_context(None)


@pytest.fixture
def clean_env(monkeypatch):
    """Убирает ZONE_* переменные окружения."""
    for name in ("ZONE_SERVER", "ZONE_PORT", "ZONE_TSIG_KEY", "ZONE_TSIG_SECRET", "ZONE_REMOTE_URL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def mock_directory():
    """
    Mock DirectoryService.

    Returns:
        MagicMock: Все изменения проходят успешно
    """
    directory = MagicMock()
    directory.remove_rrset.return_value = None
    directory.insert.return_value = None
    directory.transfer.return_value = []
    return directory


@pytest.fixture
def mock_transport():
    """
    Mock транспорта.

    resolve возвращает фиксированный адрес, подписанный обмен
    отвечает NOERROR.
    """
    transport = MagicMock()
    transport.resolve.return_value = ("192.0.2.53", 53)
    response = MagicMock()
    response.rcode.return_value = dns.rcode.NOERROR
    transport.authenticated_exchange.return_value = response
    transport.transfer_zone.return_value = []
    return transport


@pytest.fixture
def sample_device() -> Device:
    """Устройство в Веллингтоне с одним алиасом и вторичным адресом."""
    lat, lon, height = WELLINGTON
    return Device(
        name="gw.example.org.",
        ip="192.168.1.1",
        reverse=["192.168.1.1"],
        aliases=["router.example.org."],
        mapping={"router.example.org.": "192.168.2.1"},
        place="Wellington Central",
        model="Q330",
        code="WEL",
        latitude=lat,
        longitude=lon,
        height=height,
    )
