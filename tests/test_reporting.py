from types import SimpleNamespace

import pytest

from core.config_provider import ConfigSnapshot
from core.pytest_plugin import ExecutionTableReporter, outcome_status, split_nodeid
from core.reporting import ENVIRONMENT_FILE, ExecutionTable, write_environment


SEPARATOR = "+" + "-" * 10 + "+" + "-" * 27 + "+" + "-" * 42 + "+" + "-" * 14 + "+"


class TestExecutionTable:

    def test_first_row_carries_header(self):
        table = ExecutionTable()
        table.add_row(1, "LoginTests", "test_invalid_credentials", "PASSED")

        lines = table.latest_row().splitlines()

        assert lines[0] == SEPARATOR
        assert lines[1].startswith("| S.No     | Class Name ")
        assert lines[2] == SEPARATOR
        assert lines[3] == (
            "| 1        | LoginTests                | "
            + "test_invalid_credentials".ljust(40)
            + " | PASSED       |"
        )
        assert lines[4] == SEPARATOR

    def test_later_rows_skip_header(self):
        table = ExecutionTable()
        table.add_row(1, "A", "a", "PASSED")
        table.latest_row()
        table.add_row(2, "B", "b", "FAILED")

        lines = table.latest_row().splitlines()

        assert len(lines) == 2
        assert "FAILED" in lines[0]

    def test_reset_header(self):
        table = ExecutionTable()
        table.add_row(1, "A", "a", "PASSED")
        table.latest_row()
        table.reset_header()
        assert "S.No" in table.latest_row()

    def test_long_values_are_truncated(self):
        table = ExecutionTable()
        row = table.format_row(("1", "C" * 30, "m", "SKIPPED"))
        assert "C" * 22 + "..." in row
        assert "C" * 23 not in row
        assert len(row) == len(SEPARATOR)

    def test_empty_table(self):
        table = ExecutionTable()
        assert table.latest_row() == ""
        assert len(table.render().splitlines()) == 4

    def test_render_lists_every_row(self):
        table = ExecutionTable()
        table.add_row(1, "A", "a", "PASSED")
        table.add_row(2, "B", "b", "SKIPPED")
        lines = table.render().splitlines()
        assert len(lines) == 6
        assert len(table) == 2


def test_write_environment(tmp_path):
    config = ConfigSnapshot({"base.url": "http://localhost:3000", "browser": "chrome"})

    target = write_environment(tmp_path / "allure-results", config)

    assert target.name == ENVIRONMENT_FILE
    lines = target.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Base\\ URL=http://localhost:3000"
    assert lines[1] == "Browser=chrome"
    assert [line.split("=", 1)[0] for line in lines[2:]] == ["OS", "Python\\ Version", "User"]


@pytest.mark.parametrize("nodeid, expected", [
    ("tests/test_login.py::TestLogin::test_bad_password", ("TestLogin", "test_bad_password")),
    ("tests/test_login.py::test_bad_password", ("test_login", "test_bad_password")),
    ("tests/test_login.py::TestLogin::test_browser[chrome]", ("TestLogin", "test_browser[chrome]")),
])
def test_split_nodeid(nodeid, expected):
    assert split_nodeid(nodeid) == expected


def _report(when, outcome, nodeid="tests/test_x.py::TestX::test_y"):
    return SimpleNamespace(
        when=when,
        nodeid=nodeid,
        passed=outcome == "passed",
        failed=outcome == "failed",
        skipped=outcome == "skipped",
    )


@pytest.mark.parametrize("when, outcome, expected", [
    ("call", "passed", "PASSED"),
    ("call", "failed", "FAILED"),
    ("call", "skipped", "SKIPPED"),
    ("setup", "skipped", "SKIPPED"),
    ("setup", "failed", "FAILED"),
    ("setup", "passed", None),
    ("teardown", "passed", None),
    ("teardown", "failed", None),
])
def test_outcome_status(when, outcome, expected):
    assert outcome_status(_report(when, outcome)) == expected


def test_reporter_writes_rows_to_terminal():
    written = []
    terminal = SimpleNamespace(write_line=written.append)
    config = SimpleNamespace(pluginmanager=SimpleNamespace(get_plugin=lambda name: terminal))
    reporter = ExecutionTableReporter(config)

    reporter.pytest_runtest_logreport(_report("setup", "passed"))
    reporter.pytest_runtest_logreport(_report("call", "passed"))
    reporter.pytest_runtest_logreport(_report("teardown", "passed"))

    assert reporter.counter == 1
    assert any("| TestX " in line and "PASSED" in line for line in written)
