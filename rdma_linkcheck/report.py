"""Order and filter evaluated records, and pick a renderer."""

from collections.abc import Callable, Iterable

from natsort import natsorted

from rdma_linkcheck.errors import ConfigurationError
from rdma_linkcheck.exporters.csv_exporter import render_csv
from rdma_linkcheck.exporters.json_exporter import render_json
from rdma_linkcheck.exporters.table_exporter import render_table
from rdma_linkcheck.models import PortStats

RENDERERS: dict[str, Callable[..., str]] = {
    "table": render_table,
    "csv": render_csv,
    "json": render_json,
}


def assemble(records: Iterable[PortStats], errors_only: bool = False) -> list[PortStats]:
    """Sort *records* naturally by port and keep the requested ones.

    With *errors_only* only faulty records are kept; otherwise all are.
    """
    ordered = natsorted(records, key=lambda r: (r.port, r.device))
    if errors_only:
        return [r for r in ordered if r.fault]
    return ordered


def get_renderer(output_format: str) -> Callable[..., str]:
    try:
        return RENDERERS[output_format]
    except KeyError:
        raise ConfigurationError(
            f"unknown output format {output_format!r} "
            f"(expected one of: {', '.join(RENDERERS)})"
        ) from None
