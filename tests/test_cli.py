"""
Tests for the command line interface.
"""

import json

import pytest
from typer.testing import CliRunner

from bookingwindows import __version__
from bookingwindows.cli.app import app

runner = CliRunner()

FEED = {
    "events": [
        {
            "id": "walk-1",
            "summary": "Solo Walk (1 hour)",
            "start": {"dateTime": "2025-06-02T10:00:00+01:00"},
            "end": {"dateTime": "2025-06-02T11:00:00+01:00"},
        },
        {
            "id": "vet",
            "summary": "Vet visit",
            "start": {"dateTime": "2025-06-09T09:00:00+01:00"},
            "end": {"dateTime": "2025-06-09T10:00:00+01:00"},
        },
    ],
    "bookings": [
        {
            "id": 5,
            "start_time": "2025-06-02T10:00:00+01:00",
            "end_time": "2025-06-02T11:00:00+01:00",
            "service_type": "Solo Walk (1 hour)",
            "status": "confirmed",
        }
    ],
}


@pytest.fixture
def config_file(tmp_path):
    feed_file = tmp_path / "feed.json"
    feed_file.write_text(json.dumps(FEED), encoding="utf-8")
    config = tmp_path / "config.yaml"
    config.write_text("timezone: Europe/London\nfeed:\n  path: feed.json\n", encoding="utf-8")
    return config


class TestCli:
    """Tests for the bookingwindows commands."""

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_day_json(self, config_file):
        result = runner.invoke(app, ["day", "2025-06-02", "--config", str(config_file), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["windows"][0] == {"start": "00:00", "end": "09:45"}
        assert data["has_walks"] is True

    def test_day_table(self, config_file):
        result = runner.invoke(app, ["day", "2025-06-02", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "09:45" in result.output
        assert "2 time slot(s) available" in result.output

    def test_invalid_date(self, config_file):
        result = runner.invoke(app, ["day", "02/06/2025", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Invalid date" in result.output

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["day", "2025-06-02", "--config", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_range_with_walk_is_available(self, config_file):
        result = runner.invoke(app, ["range", "2025-06-01", "2025-06-03", "--config", str(config_file), "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["available"] is True

    def test_range_inverted(self, config_file):
        result = runner.invoke(app, ["range", "2025-06-03", "2025-06-01", "--config", str(config_file)])

        assert result.exit_code == 1

    def test_conflict(self, config_file):
        result = runner.invoke(
            app, ["conflict", "2025-06-02 10:30", "2025-06-02 11:30", "--kind", "walk", "--config", str(config_file)]
        )

        assert result.exit_code == 2
        assert "booking 5" in result.output

    def test_conflict_json_uses_same_exit_code(self, config_file):
        result = runner.invoke(
            app,
            ["conflict", "2025-06-02 10:30", "2025-06-02 11:30", "--kind", "walk", "--config", str(config_file), "--json"],
        )

        assert result.exit_code == 2
        data = json.loads(result.output)
        assert data["ok"] is False
        assert data["conflict"]["booking_id"] == 5

    def test_single_day_sitting_refused_on_weekend(self, config_file):
        result = runner.invoke(
            app, ["day", "2025-06-07", "--kind", "sitting", "--config", str(config_file), "--json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["available"] is False
        assert data["message"].startswith("Single-day sitting is not available on Saturdays")

    def test_conflict_excluding_rescheduled_booking(self, config_file):
        result = runner.invoke(
            app,
            ["conflict", "2025-06-02 10:30", "2025-06-02 11:30", "--exclude", "5", "--config", str(config_file), "--json"],
        )

        assert result.exit_code == 0
        assert json.loads(result.output) == {"ok": True, "conflict": None}

    def test_recurring_json(self, config_file):
        result = runner.invoke(
            app,
            ["recurring", "2025-06-02", "--time", "09:00", "--weeks", "3", "--config", str(config_file), "--json"],
        )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [item["date"] for item in data["available_dates"]] == ["2025-06-16"]
        assert [item["date"] for item in data["conflicting_dates"]] == ["2025-06-02", "2025-06-09"]
        assert data["summary"]["total_requested"] == 3

    def test_unknown_kind(self, config_file):
        result = runner.invoke(app, ["day", "2025-06-02", "--kind", "grooming", "--config", str(config_file)])

        assert result.exit_code != 0
