"""CSV renderer: a header row, then one row per port."""

import csv
import io

from rdma_linkcheck.models import PortStats, flat_columns


def _csv_value(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def render_csv(records: list[PortStats], options: dict | None = None) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=flat_columns(), lineterminator="\n")
    writer.writeheader()
    for record in records:
        writer.writerow({k: _csv_value(v) for k, v in record.flat_row().items()})
    return buf.getvalue().rstrip("\n")
