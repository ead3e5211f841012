"""Tests for the JSON step report."""

import json
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from e2e_harness.reporting import ReportEntry, append_report, read_report


class TestReportEntry:
    """Tests for ReportEntry model."""

    def test_defaults(self):
        entry = ReportEntry(status="pass")

        assert entry.timestamp is not None
        assert entry.scenario is None
        assert entry.message is None

    def test_status_validated(self):
        with pytest.raises(ValidationError):
            ReportEntry(status="maybe")

    def test_extra_keys_kept(self):
        data = ReportEntry(status="fail", scenario="Login", browser="firefox").to_dict()

        assert data["browser"] == "firefox"
        assert data["status"] == "fail"
        assert isinstance(data["timestamp"], str)


class TestAppendReport:
    """Tests for append_report."""

    def test_creates_file(self, tmp_path):
        path = tmp_path / "reports" / "report.json"

        result = append_report({"scenario": "Login", "step": "Submit form", "status": "pass"}, path)

        assert result == path
        entries = json.loads(path.read_text())
        assert len(entries) == 1
        assert entries[0]["step"] == "Submit form"
        assert "timestamp" in entries[0]

    def test_appends_in_order(self, tmp_path):
        path = tmp_path / "report.json"

        append_report(ReportEntry(status="info", step="open"), path)
        append_report(ReportEntry(status="fail", step="login", message="Timed out"), path)

        entries = read_report(path)
        assert [e["step"] for e in entries] == ["open", "login"]
        assert entries[1]["message"] == "Timed out"

    def test_replaces_unreadable_file(self, tmp_path):
        path = tmp_path / "report.json"
        path.write_text("{not json")

        append_report({"status": "pass"}, path)

        assert len(read_report(path)) == 1

    def test_replaces_non_list_json(self, tmp_path):
        path = tmp_path / "report.json"
        path.write_text('{"status": "pass"}')

        assert read_report(path) == []

    def test_default_path_from_settings(self, harness_settings, tmp_path):
        with patch("e2e_harness.reporting.get_settings", return_value=harness_settings):
            path = append_report({"status": "skip"})

        assert path == tmp_path / "report.json"
        assert path.exists()


class TestReadReport:
    """Tests for read_report."""

    def test_missing_file(self, tmp_path):
        assert read_report(tmp_path / "missing.json") == []
