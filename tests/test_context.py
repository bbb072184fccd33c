"""Tests for loading a log into an explorer context."""
import pytest
from bandwidth_core.config import Settings
from bandwidth_core.context import load_context
from bandwidth_core.exceptions import LogFileNotFoundError


class TestLoadContext:
    """Test end-to-end loading."""

    def test_load(self, write_log):
        """Test valid lines are folded and bad ones only counted."""
        log = write_log([
            {"body": {"url": "/images/p/d/a-10x10.png", "requestSize": 100, "responseSize": 1000}},
            {"body": {"url": "/images/p/d/a-10x10.png", "requestSize": 100, "responseSize": 2000}},
            "{broken",
            {"body": {"method": "GET"}},
            "",
        ])
        context = load_context(log, Settings(base_url="https://cdn.test"))
        assert context.source == log
        assert context.settings.base_url == "https://cdn.test"
        assert context.summary.records == 2
        assert context.summary.skipped == 2
        assert context.tables.total_bandwidth == 3200
        payload = context.as_dict()
        assert payload["total_requests"] == 2
        assert payload["unclassified_requests"] == 0
        assert payload["summary"]["malformed_json"] == 1

    def test_default_settings(self, write_log):
        context = load_context(write_log([""], name="empty.ndjson"))
        assert context.settings == Settings()
        assert context.tables.asset_rows() == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(LogFileNotFoundError):
            load_context(tmp_path / "absent.ndjson")
