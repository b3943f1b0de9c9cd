"""Terminal table renderer.

One line per port; the whole table is cut at the terminal width, measured
in display columns (the status glyphs are two columns wide).
"""

import shutil
from typing import Any

from tabulate import tabulate
from wcwidth import wcwidth

from rdma_linkcheck.analysis.health import ACTIVE_STATE
from rdma_linkcheck.models import PortStats, flat_columns

# too noisy to be useful on a terminal
HIDDEN_COLUMNS = {"fec_bin_2", "fec_bin_3", "fec_bin_4", "fec_bin_5", "fault"}

_HEADERS = {
    "effective_physical_errors": "phys err",
    "effective_physical_ber": "phys ber",
    "raw_physical_ber": "raw ber",
}


def _header(column: str) -> str:
    if column.startswith("fec_bin_"):
        return "bin" + column[len("fec_bin_"):]
    if column.startswith("raw_physical_errors_per_lane_"):
        return "raw err " + column[len("raw_physical_errors_per_lane_"):]
    return _HEADERS.get(column, column)


def _link_state(state: str) -> str:
    glyph = "✅" if state == ACTIVE_STATE else "❌"
    return f"{glyph} {state}"


def _cell(value: Any) -> Any:
    if isinstance(value, str):
        return " ".join(value.split())
    return value


def _truncate(line: str, width: int) -> str:
    used = 0
    for i, ch in enumerate(line):
        used += max(wcwidth(ch), 0)
        if used > width:
            return line[:i]
    return line


def render_table(records: list[PortStats], options: dict | None = None) -> str:
    options = options or {}
    width = options.get("width") or shutil.get_terminal_size().columns
    columns = [c for c in flat_columns() if c not in HIDDEN_COLUMNS]

    rows = []
    for record in records:
        row = record.flat_row()
        row["link_state"] = _link_state(record.link_state)
        rows.append([_cell(row[c]) for c in columns])

    text = tabulate(
        rows,
        headers=[_header(c) for c in columns],
        tablefmt="rounded_outline",
        missingval="",
        disable_numparse=True,
    )
    return "\n".join(_truncate(line, width) for line in text.splitlines())
