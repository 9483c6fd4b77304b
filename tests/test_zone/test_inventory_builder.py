"""
Тесты для InventoryBuilder.

Проверяет:
- Порядок передачи зон (обратные, затем прямые)
- Сборку aliases/mapping из нескольких зон
- Прерывание на ошибке передачи
- load_local/load_remote/load_configured
- Зоны из config.yaml и run_id в логе сборки
"""

import logging

import pytest
from unittest.mock import MagicMock, patch, call

import dns.rrset

from zone_inventory.config import load_config
from zone_inventory.core.context import RunContext, set_current_context
from zone_inventory.core.domain.records import RecordKind, ZoneRecord
from zone_inventory.core.exceptions import TransferError
from zone_inventory.core.models import Inventory
from zone_inventory.zone.directory import DirectoryService
from zone_inventory.zone.inventory import InventoryBuilder, load_configured, load_local, load_remote

FORWARD = "example.org."
REVERSE = "168.192.in-addr.arpa."


def zone_records():
    return {
        REVERSE: [
            ZoneRecord("1.1.168.192.in-addr.arpa.", RecordKind.POINTER, "gw.example.org.", 3600),
            ZoneRecord("1.2.168.192.in-addr.arpa.", RecordKind.POINTER, "router.example.org.", 3600),
        ],
        FORWARD: [
            ZoneRecord("gw.example.org.", RecordKind.ADDRESS, "192.168.1.1", 3600),
            ZoneRecord("router.example.org.", RecordKind.ALIAS, "gw.example.org.", 3600),
            ZoneRecord("gw.example.org.", RecordKind.TEXT, ("Wellington",), 3600),
        ],
    }


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return load_config(str(path))

class TestInventoryBuilder:

    def test_build(self, mock_directory):
        records = zone_records()
        mock_directory.transfer.side_effect = lambda zone: records[zone]

        inventory = InventoryBuilder(mock_directory).build([FORWARD], [REVERSE])

        device = inventory.find("gw.example.org.")
        assert device.reverse == ["192.168.1.1"]
        assert device.aliases == ["router.example.org."]
        assert device.mapping == {"router.example.org.": "192.168.2.1"}
        assert device.place == "Wellington"

    def test_reverse_zones_first(self, mock_directory):
        records = zone_records()
        mock_directory.transfer.side_effect = lambda zone: records[zone]

        InventoryBuilder(mock_directory).build([FORWARD], [REVERSE])

        assert mock_directory.transfer.call_args_list == [call(REVERSE), call(FORWARD)]

    def test_transfer_error_aborts(self, mock_directory):
        """Ошибка передачи прерывает сборку, частичного инвентаря нет."""
        mock_directory.transfer.side_effect = [
            zone_records()[REVERSE],
            TransferError("Transfer refused", zone=FORWARD),
        ]

        with pytest.raises(TransferError):
            InventoryBuilder(mock_directory).build([FORWARD], [REVERSE])

    def test_empty_zones(self, mock_directory):
        inventory = InventoryBuilder(mock_directory).build([], [])

        assert len(inventory) == 0
        mock_directory.transfer.assert_not_called()

    def test_directory_list(self, mock_transport):
        """DirectoryService.list собирает инвентарь через AXFR."""
        rrsets = {
            REVERSE: [dns.rrset.from_text("1.1.168.192.in-addr.arpa.", 3600, "IN", "PTR", "gw.example.org.")],
            FORWARD: [dns.rrset.from_text("gw.example.org.", 3600, "IN", "A", "192.168.1.1")],
        }
        mock_transport.transfer_zone.side_effect = lambda address, port, zone: rrsets[zone]

        inventory = DirectoryService("ns1.example.org", transport=mock_transport).list([FORWARD], [REVERSE])

        assert [d.name for d in inventory] == ["gw.example.org."]
        assert inventory[0].reverse == ["192.168.1.1"]

    def test_default_zones(self, mock_directory):
        """build() без аргументов берёт зоны из конструктора."""
        records = zone_records()
        mock_directory.transfer.side_effect = lambda zone: records[zone]

        inventory = InventoryBuilder(mock_directory, zones=[FORWARD], reverse=[REVERSE]).build()

        assert mock_directory.transfer.call_args_list == [call(REVERSE), call(FORWARD)]
        assert inventory.find("gw.example.org.").place == "Wellington"

    def test_run_id_in_build_log(self, mock_directory, caplog):
        ctx = RunContext.create(command="build")

        with caplog.at_level(logging.INFO, logger="zone_inventory.zone.inventory"):
            InventoryBuilder(mock_directory, context=ctx).build([], [])

        record = next(r for r in caplog.records if getattr(r, "operation", None) == "build")
        assert record.run_id == ctx.run_id
        assert record.status == "success"

    def test_context_from_global(self, mock_directory):
        ctx = RunContext.create()
        set_current_context(ctx)

        assert InventoryBuilder(mock_directory).ctx is ctx

    def test_explicit_context_wins(self, mock_directory, caplog):
        set_current_context(RunContext.create(use_timestamp_id=False))
        ctx = RunContext.create(use_timestamp_id=False)

        with caplog.at_level(logging.INFO, logger="zone_inventory.zone.inventory"):
            InventoryBuilder(mock_directory, context=ctx).build([], [])

        record = next(r for r in caplog.records if getattr(r, "operation", None) == "build")
        assert record.run_id == ctx.run_id


class TestFromConfig:

    def test_zones_section(self, tmp_path, mock_transport, clean_env):
        config = write_config(
            tmp_path,
            "directory:\n"
            "  server: ns9.example.org\n"
            "zones:\n"
            "  forward:\n"
            "    - example.org\n"
            "  reverse:\n"
            "    - 168.192.in-addr.arpa.\n",
        )

        builder = InventoryBuilder.from_config(config, transport=mock_transport)
        builder.build()

        assert builder.directory.server == "ns9.example.org"
        assert builder.zones == [FORWARD]
        assert builder.reverse == [REVERSE]
        assert [c.args[2] for c in mock_transport.transfer_zone.call_args_list] == [REVERSE, FORWARD]


class TestLoaders:

    @patch("zone_inventory.zone.inventory.DirectoryService")
    def test_load_local(self, mock_service_class):
        mock_service = MagicMock()
        mock_service.transfer.return_value = []
        mock_service_class.return_value = mock_service

        inventory = load_local("ns1.example.org", [FORWARD], [REVERSE], port=5353)

        assert isinstance(inventory, Inventory)
        mock_service_class.assert_called_once_with("ns1.example.org", port=5353)

    @patch("zone_inventory.zone.inventory.RemoteFetch")
    def test_load_remote(self, mock_fetch_class):
        mock_fetch_class.return_value.fetch.return_value = Inventory()

        load_remote("inventory.example.org", port=8080, timeout=5)

        mock_fetch_class.assert_called_once_with(timeout=5)
        mock_fetch_class.return_value.fetch.assert_called_once_with("inventory.example.org", 8080)

    @patch("zone_inventory.zone.inventory.RemoteFetch")
    def test_load_configured_remote(self, mock_fetch_class, tmp_path, clean_env):
        """Задан remote.url: снимок по HTTP."""
        config = write_config(
            tmp_path,
            "remote:\n"
            "  url: https://inventory.example.org/list\n"
            "  port: 8443\n",
        )
        mock_fetch_class.from_config.return_value.fetch.return_value = Inventory()

        load_configured(config)

        mock_fetch_class.from_config.assert_called_once_with(config)
        mock_fetch_class.from_config.return_value.fetch.assert_called_once_with(
            "https://inventory.example.org/list", 8443
        )

    @patch("zone_inventory.zone.inventory.InventoryBuilder")
    def test_load_configured_zones(self, mock_builder_class, tmp_path, clean_env):
        """Без remote.url: сборка по зонам с directory.server."""
        config = write_config(tmp_path, "zones:\n  forward:\n    - example.org.\n")
        mock_builder_class.from_config.return_value.build.return_value = Inventory()

        load_configured(config)

        mock_builder_class.from_config.assert_called_once_with(config)
        mock_builder_class.from_config.return_value.build.assert_called_once_with()
