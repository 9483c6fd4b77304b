"""
Тесты для RunContext.
"""

import re

from zone_inventory.core.context import RunContext, get_current_context, set_current_context


class TestRunContext:

    def test_timestamp_id(self):
        ctx = RunContext.create()
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}", ctx.run_id)

    def test_uuid_id(self):
        ctx = RunContext.create(use_timestamp_id=False)
        assert len(ctx.run_id) == 8

    def test_log_prefix(self):
        ctx = RunContext.create(command="reconcile")
        assert ctx.log_prefix() == f"[{ctx.run_id}][reconcile]"

    def test_str_dry_run(self):
        ctx = RunContext.create(dry_run=True)
        assert "[DRY-RUN]" in str(ctx)

    def test_to_dict(self):
        data = RunContext.create(dry_run=True, triggered_by="test", command="build").to_dict()

        assert data["dry_run"] is True
        assert data["triggered_by"] == "test"
        assert data["command"] == "build"
        assert data["elapsed_seconds"] >= 0


class TestCurrentContext:

    def test_default_is_none(self):
        assert get_current_context() is None

    def test_set_and_get(self):
        ctx = RunContext.create()
        set_current_context(ctx)

        assert get_current_context() is ctx
