"""
Тесты для structured logging.

Проверяет:
- JSONFormatter и HumanFormatter
- StructuredLogger: поля и bind
- run_id из глобального контекста
- LogContext
- OperationLog
"""

import io
import json
import logging
from unittest.mock import MagicMock

import pytest

from zone_inventory.core.context import RunContext, set_current_context
from zone_inventory.core.logging import (
    HumanFormatter,
    JSONFormatter,
    LogConfig,
    LogContext,
    OperationLog,
    RotationType,
    StructuredLogger,
    get_logger,
    setup_logging,
    setup_logging_from_config,
)


@pytest.fixture
def restore_root_logger():
    """Возвращает handlers root логгера после теста."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def make_record(**extra):
    record = logging.makeLogRecord({
        "name": "zone_inventory.test",
        "levelno": logging.INFO,
        "levelname": "INFO",
        "msg": "Zone transfer завершён",
    })
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_standard_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["message"] == "Zone transfer завершён"
        assert data["logger"] == "zone_inventory.test"
        assert "timestamp" in data

    def test_extra_fields(self):
        record = make_record(zone="example.org.", records=120, run_id="r1")
        data = json.loads(JSONFormatter().format(record))

        assert data["zone"] == "example.org."
        assert data["records"] == 120
        assert data["run_id"] == "r1"

    def test_reserved_attrs_skipped(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert "lineno" not in data
        assert "pathname" not in data


class TestHumanFormatter:

    def test_prefix_and_extras(self):
        record = make_record(run_id="r1", zone="example.org.", device="gw.example.org.")
        line = HumanFormatter().format(record)

        assert "INFO" in line
        assert "[r1] Zone transfer завершён" in line
        assert "(zone=example.org., device=gw.example.org.)" in line

    def test_without_extras(self):
        line = HumanFormatter().format(make_record())
        assert line.endswith("Zone transfer завершён")


class TestStructuredLogger:

    def test_fields_on_record(self, caplog):
        logger = StructuredLogger("zone_inventory.test.fields")

        with caplog.at_level(logging.INFO):
            logger.info("Удаление PTR", zone="168.192.in-addr.arpa.")

        assert caplog.records[0].zone == "168.192.in-addr.arpa."

    def test_bind(self, caplog):
        logger = StructuredLogger("zone_inventory.test.bind").bind(server="ns1")

        with caplog.at_level(logging.INFO):
            logger.info("AXFR started", zone="example.org.")

        record = caplog.records[0]
        assert record.server == "ns1"
        assert record.zone == "example.org."

    def test_run_id_from_context(self, caplog):
        ctx = RunContext.create()
        set_current_context(ctx)

        with caplog.at_level(logging.INFO):
            StructuredLogger("zone_inventory.test.ctx").info("hello")

        assert caplog.records[0].run_id == ctx.run_id

    def test_get_logger_cached(self):
        assert get_logger("zone_inventory.test.cache") is get_logger("zone_inventory.test.cache")


class TestSetupLogging:

    def test_json_stream(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(json_format=True, stream=stream)

        get_logger("zone_inventory.test.setup").info("ready", zone="example.org.")

        data = json.loads(stream.getvalue().strip())
        assert data["message"] == "ready"
        assert data["zone"] == "example.org."

    def test_file_from_config(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "zone.log"
        config = LogConfig.from_dict({
            "level": "DEBUG",
            "json_format": True,
            "console": False,
            "file_path": str(log_file),
            "rotation": "none",
        })
        setup_logging_from_config(config)

        get_logger("zone_inventory.test.file").debug("written")
        for handler in restore_root_logger.handlers:
            handler.flush()

        data = json.loads(log_file.read_text(encoding="utf-8").strip())
        assert data["message"] == "written"

    def test_log_config_from_dict(self):
        config = LogConfig.from_dict({"level": "warning", "rotation": "time"})

        assert config.level == logging.WARNING
        assert config.rotation == RotationType.TIME


class TestLogContext:

    def test_fields_inside_only(self, caplog):
        logger = logging.getLogger("zone_inventory.test.context")

        with caplog.at_level(logging.INFO):
            with LogContext(device="gw.example.org."):
                logger.info("inside")
            logger.info("outside")

        assert caplog.records[0].device == "gw.example.org."
        assert not hasattr(caplog.records[1], "device")


class TestOperationLog:

    def test_success(self):
        op = OperationLog(operation="build").start()
        op.success(devices=3, records=40)

        data = op.to_dict()
        assert data["status"] == "success"
        assert data["result"] == {"devices": 3, "records": 40}
        assert data["duration_ms"] >= 0

    def test_failure(self):
        op = OperationLog(operation="reconcile", device="gw.example.org.").start()
        op.failure("REFUSED")

        data = op.to_dict()
        assert data["status"] == "failure"
        assert data["error"] == "REFUSED"
        assert data["device"] == "gw.example.org."

    def test_log_levels(self):
        logger = MagicMock()

        OperationLog(operation="build").start().success(devices=1).log(logger)
        OperationLog(operation="build").start().failure("x").log(logger)

        first, second = logger._log.call_args_list
        assert first.args[0] == logging.INFO
        assert first.args[1] == "Operation build success"
        assert first.kwargs["result"] == {"devices": 1}
        assert second.args[0] == logging.ERROR
        assert second.kwargs["error"] == "x"
