"""
Tests for the command-line interface.

The clock is fixed through ``current_time`` and every run points at a log
file in a temporary directory. Instants stay near midday so the local zone
of the machine running the tests does not change which day they fall on.
"""

import pytest
import typer
from typer.testing import CliRunner

from conftest import at
from temps.infra.repository import parse_log
from temps.ui import cli

runner = CliRunner()

LOG = (
    "world domination\t2024-05-06T09:00:00+02:00\t2024-05-06T13:24:00+02:00\n"
    "reading\t2024-05-05T10:00:00+02:00\t2024-05-05T11:00:00+02:00\n"
)


@pytest.fixture
def clock(monkeypatch):
    current = {"now": at(6, 15)}
    monkeypatch.setattr(cli, "current_time", lambda: current["now"])
    return current


@pytest.fixture
def invoke(log_path, clock):
    def run(*args):
        return runner.invoke(cli.app, ["--temps-file", str(log_path), *args])
    return run


def read_log(path):
    return parse_log(path.read_text(encoding="utf-8"))


class TestTimerCommands:

    def test_start(self, invoke, log_path):
        result = invoke("start", "world domination")
        assert result.exit_code == 0
        assert "Started 'world domination'." in result.output
        assert log_path.read_text(encoding="utf-8") == (
            "project\tstart\tend\n"
            "world domination\t2024-05-06T15:00:00+02:00\t\n"
        )

    def test_start_switches_project(self, invoke, log_path, clock):
        invoke("start", "a")
        clock["now"] = at(6, 16)
        result = invoke("start", "b")

        assert result.exit_code == 0
        assert "Stopped 'a'." in result.output
        assert "Started 'b'." in result.output
        entries = read_log(log_path)
        assert [(e.project, e.end) for e in entries] == [("a", at(6, 16)), ("b", None)]

    def test_start_from(self, invoke, log_path):
        result = invoke("start", "a", "--from", "2024-05-06T14:00:00+02:00")
        assert result.exit_code == 0
        assert read_log(log_path)[0].start == at(6, 14)

    def test_start_in_future(self, invoke, log_path):
        result = invoke("start", "a", "--from", "2024-05-06T16:00:00+02:00")
        assert result.exit_code == 1
        assert "Error: Start date is in the future" in result.output
        assert not log_path.exists()

    def test_start_without_project(self, invoke):
        result = invoke("start")
        assert result.exit_code == 1
        assert "Error: Cannot infer project name, please specify" in result.output

    def test_start_reuses_last_project(self, invoke, log_path):
        log_path.write_text(LOG, encoding="utf-8")
        result = invoke("start")
        assert result.exit_code == 0
        assert "Started 'reading'." in result.output

    def test_stop(self, invoke, log_path, clock):
        invoke("start", "a")
        clock["now"] = at(6, 15, 30)
        result = invoke("stop")

        assert result.exit_code == 0
        assert "Stopped 'a'." in result.output
        assert read_log(log_path)[0].end == at(6, 15, 30)

    def test_stop_without_timer(self, invoke, log_path):
        log_path.write_text(LOG, encoding="utf-8")
        result = invoke("stop")
        assert result.exit_code == 1
        assert "Error: No ongoing entry" in result.output
        assert log_path.read_text(encoding="utf-8") == LOG

    def test_cancel(self, invoke, log_path):
        log_path.write_text(LOG + "a\t2024-05-06T14:00:00+02:00\t\n", encoding="utf-8")
        result = invoke("cancel")
        assert result.exit_code == 0
        assert "Cancelled 'a' (started at 2024-05-06T14:00:00+02:00)." in result.output
        assert log_path.read_text(encoding="utf-8") == LOG


class TestSummaryCommands:

    def test_default_is_daily_summary(self, invoke, log_path):
        log_path.write_text(LOG, encoding="utf-8")
        result = invoke()
        assert result.exit_code == 0
        rows = [line.split() for line in result.output.splitlines()]
        assert ["world", "domination", "4.40"] in rows
        assert ["TOTAL", "4.40"] in rows
        assert "reading" not in result.output

    def test_summary_for_date(self, invoke, log_path):
        log_path.write_text(LOG, encoding="utf-8")
        result = invoke("summary", "--date", "2024-05-05")
        assert result.exit_code == 0
        assert ["reading", "1.00"] in [line.split() for line in result.output.splitlines()]

    def test_full_summary(self, invoke, log_path):
        log_path.write_text(LOG, encoding="utf-8")
        result = invoke("summary", "--full")
        assert result.exit_code == 0
        assert result.output.startswith("Summary of all tracked time")
        assert ["TOTAL", "5.40"] in [line.split() for line in result.output.splitlines()]

    def test_weekly_summary(self, invoke, log_path):
        log_path.write_text(LOG, encoding="utf-8")
        result = invoke("summary", "-w")
        assert result.exit_code == 0
        assert "Weekly total: 4.40 hours" in result.output

    def test_modes_are_exclusive(self, invoke):
        result = invoke("summary", "--full", "--weekly")
        assert result.exit_code == 2

    def test_ongoing_entry_is_shown(self, invoke, log_path):
        log_path.write_text("studying category theory\t2024-05-06T14:51:00+02:00\t\n", encoding="utf-8")
        result = invoke("summary")
        assert result.output.rstrip().endswith("Ongoing: studying category theory (9m)")

    def test_empty_log(self, invoke):
        result = invoke()
        assert result.exit_code == 0
        assert "TOTAL" in result.output

    def test_corrupt_log(self, invoke, log_path):
        log_path.write_text(LOG + "just a project name\n", encoding="utf-8")
        result = invoke("summary")
        assert result.exit_code == 1
        assert "Error: line 3" in result.output

    def test_invalid_date(self, invoke):
        result = invoke("summary", "--date", "someday")
        assert result.exit_code == 1
        assert result.output.startswith("Error:")


class TestOtherCommands:

    def test_list(self, invoke, log_path):
        log_path.write_text(LOG, encoding="utf-8")
        result = invoke("list")
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].split() == ["Project", "Start", "End"]
        assert lines[2].split() == ["world", "domination", "2024-05-06T09:00:00+02:00",
                                    "2024-05-06T13:24:00+02:00"]

    def test_viz(self, invoke, log_path):
        log_path.write_text(LOG, encoding="utf-8")
        result = invoke("viz", "2024-05-06")
        assert result.exit_code == 0
        assert "█" in result.output
        assert "world domination" in result.output

    def test_viz_empty_day(self, invoke, log_path):
        log_path.write_text(LOG, encoding="utf-8")
        result = invoke("viz", "2024-05-01")
        assert result.exit_code == 0
        assert "Nothing tracked on 2024-05-01." in result.output

    def test_edit_reports_broken_file(self, invoke, log_path, monkeypatch):
        def fake_edit(filename=None, **kwargs):
            with open(filename, "a", encoding="utf-8") as fh:
                fh.write("broken\n")

        monkeypatch.setattr(typer, "edit", fake_edit)
        result = invoke("edit")
        assert result.exit_code == 1
        assert "Error: line 1" in result.output

    def test_invalid_midnight_offset(self, invoke):
        result = invoke("--midnight-offset", "25:00", "summary")
        assert result.exit_code == 1
        assert "Invalid configuration for 'midnight_offset'" in result.output

    def test_invalid_setting_in_environment(self, invoke, monkeypatch):
        monkeypatch.setenv("TEMPS_MIDNIGHT_OFFSET", "nonsense")
        result = invoke("summary")
        assert result.exit_code == 1
        assert "Invalid configuration for 'midnight_offset'" in result.output
