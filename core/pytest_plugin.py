"""Pytest integration for browser session lifecycle.

Enable in an e2e suite's conftest.py:

    pytest_plugins = ["core.pytest_plugin"]

Then request the `page` fixture. Each test gets its own session, released
after the test with the test name as trace label.

Options:
    --e2e-config PATH   use this YAML instead of E2E_CONFIG / config/e2e.yaml
    --e2e-table         print an execution table row as each test finishes
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import pytest

from core.config_provider import ConfigProvider
from core.reporting import ExecutionTable, write_environment
from core.session_lifecycle import SessionLifecycleOrchestrator


def pytest_addoption(parser):
    group = parser.getgroup("e2e", "browser session lifecycle")
    group.addoption(
        "--e2e-config",
        action="store",
        default=None,
        help="Path to the e2e YAML config (overrides E2E_CONFIG).",
    )
    group.addoption(
        "--e2e-table",
        action="store_true",
        default=False,
        help="Print an execution table row after each test.",
    )


def pytest_configure(config):
    config_path = config.getoption("--e2e-config")
    if config_path:
        ConfigProvider.use_path(Path(config_path).resolve())

    if config.getoption("--e2e-table"):
        config.pluginmanager.register(ExecutionTableReporter(config), "e2e-execution-table")


def pytest_unconfigure(config):
    if config.getoption("--e2e-config"):
        ConfigProvider.use_path(None)


def pytest_sessionstart(session):
    snapshot = ConfigProvider.get()
    results_dir = snapshot.get_property("allure.results.dir")
    if results_dir:
        write_environment(results_dir, snapshot)


@pytest.fixture(scope="session")
def e2e_config():
    """Process-wide configuration snapshot."""
    return ConfigProvider.get()


@pytest.fixture(scope="session")
def session_orchestrator(e2e_config):
    lifecycle = SessionLifecycleOrchestrator(config=e2e_config)
    SessionLifecycleOrchestrator.install(lifecycle)
    yield lifecycle
    SessionLifecycleOrchestrator.reset()


@pytest.fixture
def page(session_orchestrator, request):
    """Fresh page in an isolated context; trace saved under the test name."""
    browser_page = session_orchestrator.acquire()
    yield browser_page
    report = session_orchestrator.release(request.node.name)
    if not report.ok:
        logging.warning(
            f"{request.node.nodeid}: {len(report.failures)} teardown step(s) failed"
        )


# =============================================================================
# EXECUTION TABLE
# =============================================================================

def split_nodeid(nodeid: str) -> Tuple[str, str]:
    """(class name, test name) for a pytest node id.

    Module-level tests use the module file stem as class name.
    """
    parts = nodeid.split("::")
    method_name = parts[-1]
    if len(parts) >= 3:
        return parts[-2], method_name
    return Path(parts[0]).stem, method_name


def outcome_status(report) -> Optional[str]:
    """PASSED / FAILED / SKIPPED once per test, None for phases to ignore."""
    if report.when == "call":
        if report.passed:
            return "PASSED"
        if report.skipped:
            return "SKIPPED"
        return "FAILED"
    if report.when == "setup":
        if report.skipped:
            return "SKIPPED"
        if report.failed:
            return "FAILED"
    return None


class ExecutionTableReporter:
    """Prints one table row per finished test."""

    def __init__(self, config):
        self.config = config
        self.table = ExecutionTable()
        self.counter = 0

    def pytest_runtest_logreport(self, report):
        status = outcome_status(report)
        if status is None:
            return
        self.counter += 1
        class_name, method_name = split_nodeid(report.nodeid)
        self.table.add_row(self.counter, class_name, method_name, status)

        terminal = self.config.pluginmanager.get_plugin("terminalreporter")
        if terminal is not None:
            terminal.write_line("")
            for line in self.table.latest_row().splitlines():
                terminal.write_line(line)
