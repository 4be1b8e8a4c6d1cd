"""Tests for the unical CLI."""

import json
from datetime import datetime
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest
from click.testing import CliRunner

from unical.adapters.memory_store import InMemoryCalendarStore
from unical.cli import main
from unical.config import Config
from unical.core.events import to_instant

TZ = ZoneInfo("Europe/Warsaw")


class EditableStore(InMemoryCalendarStore):
    """Memory store that also answers permission checks, like the HTTP backend."""

    def can_edit(self) -> bool:
        return True


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config():
    return Config(api_base="https://crm.example.com/api", timezone="Europe/Warsaw")


@pytest.fixture
def store():
    store = EditableStore(TZ)
    store.add_activity(
        "Call Acme",
        to_instant(datetime(2025, 1, 15, 9, tzinfo=TZ)),
        to_instant(datetime(2025, 1, 15, 10, tzinfo=TZ)),
    )
    store.add_appointment("Botox", "2025-01-15", "09:30", "10:30")
    return store


class TestWindowCommand:
    def test_week_json(self, runner, config):
        with patch("unical.cli.load_config", return_value=config):
            result = runner.invoke(main, ["window", "--view", "week", "--date", "2025-01-15", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["mode"] == "week"
        assert data["anchor"] == "2025-01-13"
        assert data["start"] == to_instant(datetime(2025, 1, 13, tzinfo=TZ))

    def test_text_output(self, runner, config):
        with patch("unical.cli.load_config", return_value=config):
            result = runner.invoke(main, ["window", "--view", "month", "--date", "2025-01-15"])

        assert result.exit_code == 0
        assert "January 2025" in result.output
        assert "2025-01-31T23:59:59.999000+01:00" in result.output

    def test_bad_date_is_a_usage_error(self, runner, config):
        with patch("unical.cli.load_config", return_value=config):
            result = runner.invoke(main, ["window", "--date", "15.01.2025"])

        assert result.exit_code == 2
        assert "Invalid value for '--date'" in result.output

    def test_unknown_timezone(self, runner):
        config = Config(timezone="Mars/Olympus_Mons")
        with patch("unical.cli.load_config", return_value=config):
            result = runner.invoke(main, ["window", "--date", "2025-01-15"])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestShowCommand:
    def test_day_layout(self, runner, config, store):
        with (
            patch("unical.cli.load_config", return_value=config),
            patch("unical.cli.HttpCalendarBackend", return_value=store),
        ):
            result = runner.invoke(main, ["show", "--view", "day", "--date", "2025-01-15"])

        assert result.exit_code == 0
        assert "09:00-10:00 [1/2]   Call Acme" in result.output
        assert "09:30-10:30 [2/2]   Botox (gabinet)" in result.output

    def test_month_json(self, runner, config, store):
        with (
            patch("unical.cli.load_config", return_value=config),
            patch("unical.cli.HttpCalendarBackend", return_value=store),
        ):
            result = runner.invoke(main, ["show", "--view", "month", "--date", "2025-01-15", "--json"])

        assert result.exit_code == 0
        weeks = json.loads(result.output)
        cells = {cell["date"]: cell for week in weeks for cell in week}
        assert len(cells["2025-01-15"]["events"]) == 2
        assert cells["2024-12-30"]["inMonth"] is False

    def test_missing_api_base(self, runner):
        with patch("unical.cli.load_config", return_value=Config()):
            result = runner.invoke(main, ["show", "--view", "day", "--date", "2025-01-15"])

        assert result.exit_code == 1
        assert "API_BASE" in result.output


class TestMoveCommand:
    def test_moves_appointment(self, runner, config, store):
        appointment = next(iter(store.appointments.values()))
        with (
            patch("unical.cli.load_config", return_value=config),
            patch("unical.cli.HttpCalendarBackend", return_value=store),
        ):
            result = runner.invoke(
                main, ["move", appointment.activity_id, "--to", "2025-01-16", "--y", "367"]
            )

        assert result.exit_code == 0, result.output
        assert "Thursday 2025-01-16 13:00" in result.output
        assert (appointment.date, appointment.start_time) == ("2025-01-16", "13:00")

    def test_unknown_event(self, runner, config, store):
        with (
            patch("unical.cli.load_config", return_value=config),
            patch("unical.cli.HttpCalendarBackend", return_value=store),
        ):
            result = runner.invoke(main, ["move", "nope", "--to", "2025-01-16", "--y", "0"])

        assert result.exit_code == 1
        assert "not_found" in result.output

    def test_bad_target_date(self, runner, config, store):
        with (
            patch("unical.cli.load_config", return_value=config),
            patch("unical.cli.HttpCalendarBackend", return_value=store),
        ):
            result = runner.invoke(main, ["move", "act1", "--to", "tomorrow", "--y", "0"])

        assert result.exit_code == 2
        assert "Invalid value for '--to'" in result.output
