"""
Tests for the command line interface.
"""

from pathlib import Path

import pendulum
import pytest
from rich.console import Console
from typer.testing import CliRunner

from schedulegrid.cli import app as cli_app
from schedulegrid.domain.models import ClassifiedSlot, ExternalEvent, EventContinuation, TimeRange
from schedulegrid.domain.span_geometry import SpanGeometryCalculator

TZ = "Europe/Berlin"

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setattr(cli_app, "console", Console(width=250))


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(f"timezone: {TZ}\n", encoding="utf-8")
    return path


class TestShowCommand:
    """Tests for the show command."""

    def test_mock_week(self, config_path: Path):
        result = runner.invoke(cli_app.app, ["show", "--mock", "--config", str(config_path)])

        assert result.exit_code == 0, result.output
        assert "Week 09.12.2024 - 15.12.2024" in result.output
        assert "John Smith" in result.output
        assert "Dentist" in result.output
        assert "Fitness Expo" in result.output

    def test_missing_store_is_an_error(self, config_path: Path):
        result = runner.invoke(cli_app.app, ["show", "--config", str(config_path)])

        assert result.exit_code == 1
        assert "No data source configured" in result.output

    def test_bad_start_date(self, config_path: Path):
        result = runner.invoke(
            cli_app.app,
            ["show", "--mock", "--config", str(config_path), "--start", "09.12.2024"],
        )

        assert result.exit_code == 1
        assert "Could not parse start date" in result.output

    def test_conflicting_week_flags(self, config_path: Path):
        result = runner.invoke(
            cli_app.app,
            ["show", "--mock", "--config", str(config_path), "--this-week", "--next-week"],
        )

        assert result.exit_code == 1


class TestOtherCommands:
    """Tests for availability and version."""

    def test_availability(self, config_path: Path):
        result = runner.invoke(cli_app.app, ["availability", "--mock", "--config", str(config_path)])

        assert result.exit_code == 0, result.output
        assert "Weekly availability" in result.output
        assert "Monday" in result.output
        assert "09:00 - 18:00" in result.output

    def test_version(self):
        result = runner.invoke(cli_app.app, ["version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestRenderCell:
    """Tests for single cell rendering."""

    def test_continuation_is_a_rail(self):
        event = ExternalEvent(
            id="e1",
            start_time=pendulum.datetime(2024, 12, 10, 14, tz=TZ),
            end_time=pendulum.datetime(2024, 12, 10, 17, tz=TZ),
        )
        day = pendulum.date(2024, 12, 10)
        slot = ClassifiedSlot(
            date=day,
            hour=15,
            start=TimeRange.for_hour(day, 15, TZ).start,
            within_availability=True,
            occupant=EventContinuation(event),
        )

        assert cli_app.render_cell(slot, SpanGeometryCalculator()) == "[yellow]│[/yellow]"

    def test_empty_slot_outside_availability_is_blank(self):
        day = pendulum.date(2024, 12, 10)
        slot = ClassifiedSlot(
            date=day,
            hour=3,
            start=TimeRange.for_hour(day, 3, TZ).start,
            within_availability=False,
        )

        assert cli_app.render_cell(slot, SpanGeometryCalculator()) == ""
