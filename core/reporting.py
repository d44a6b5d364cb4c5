"""Reporting - Execution table rows and report environment metadata

Pure string rendering plus one file write. Nothing here touches browser
sessions.
"""

import getpass
import logging
import platform
from pathlib import Path
from typing import List, Sequence

from core.config_provider import ConfigSnapshot


SERIAL_WIDTH = 8
CLASS_WIDTH = 25
METHOD_WIDTH = 40
STATUS_WIDTH = 12

HEADER = ("S.No", "Class Name", "Method Name", "Status")

ENVIRONMENT_FILE = "environment.properties"


def _truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    return value[: width - 3] + "..."


class ExecutionTable:
    """Fixed-width table of executed tests.

    Usage:
        table = ExecutionTable()
        table.add_row(1, "TestLogin", "test_invalid_credentials", "PASSED")
        print(table.latest_row())
    """

    WIDTHS = (SERIAL_WIDTH, CLASS_WIDTH, METHOD_WIDTH, STATUS_WIDTH)

    def __init__(self):
        self._rows: List[Sequence[str]] = []
        self._header_emitted = False

    def __len__(self) -> int:
        return len(self._rows)

    def add_row(self, serial: int, class_name: str, method_name: str, status: str) -> None:
        self._rows.append((str(serial), class_name or "", method_name or "", status or ""))

    def separator(self) -> str:
        return "+" + "+".join("-" * (w + 2) for w in self.WIDTHS) + "+"

    def format_row(self, row: Sequence[str]) -> str:
        cells = [
            _truncate(value, width).ljust(width)
            for value, width in zip(row, self.WIDTHS)
        ]
        return "| " + " | ".join(cells) + " |"

    def latest_row(self) -> str:
        """Render the newest row; header and rule precede the first call only."""
        if not self._rows:
            return ""

        lines = []
        if not self._header_emitted:
            lines += [self.separator(), self.format_row(HEADER), self.separator()]
            self._header_emitted = True

        lines += [self.format_row(self._rows[-1]), self.separator()]
        return "\n".join(lines)

    def render(self) -> str:
        """Render the whole table, header included."""
        lines = [self.separator(), self.format_row(HEADER), self.separator()]
        lines += [self.format_row(row) for row in self._rows]
        lines.append(self.separator())
        return "\n".join(lines)

    def reset_header(self) -> None:
        self._header_emitted = False


def environment_entries(config: ConfigSnapshot) -> List[tuple]:
    """Key/value pairs describing the run, in report order."""
    try:
        user = getpass.getuser()
    except Exception:
        user = "unknown"
    return [
        ("Base URL", config.get_property("base.url") or ""),
        ("Browser", config.get_property("browser") or ""),
        ("OS", platform.system()),
        ("Python Version", platform.python_version()),
        ("User", user),
    ]


def write_environment(results_dir, config: ConfigSnapshot) -> Path:
    """Write environment.properties into the report results directory.

    Spaces and colons in keys are escaped the way .properties readers expect.
    """
    target_dir = Path(results_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / ENVIRONMENT_FILE

    lines = []
    for key, value in environment_entries(config):
        escaped_key = key.replace(" ", "\\ ").replace(":", "\\:").replace("=", "\\=")
        lines.append(f"{escaped_key}={value}")

    target.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logging.info(f"Report environment written to {target}")
    return target
