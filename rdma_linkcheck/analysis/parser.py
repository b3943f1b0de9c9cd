"""Extract a ``PortStats`` record from ``mlxlink --json`` output.

Every field is read through one table of ``(name, path, kind)`` entries so
that a renamed or missing upstream key fails in exactly one place, with a
``ParseError`` naming the field.
"""

from dataclasses import dataclass
from typing import Any

from rdma_linkcheck.errors import ParseError
from rdma_linkcheck.models import (
    FEC_BIN_COUNT,
    LANE_COUNT,
    HostContext,
    PortIdentity,
    PortStats,
)

PHYS = "Physical Counters and BER Info"
FEC = "Histogram of FEC Errors"

INT = "int"
TEXT = "text"
DECIMAL = "decimal"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    path: tuple[str | int, ...]
    kind: str


FIELDS: tuple[FieldSpec, ...] = (
    *(
        FieldSpec(f"raw_physical_errors_per_lane[{lane}]",
                  (PHYS, "Raw Physical Errors Per Lane", "values", lane), INT)
        for lane in range(LANE_COUNT)
    ),
    FieldSpec("effective_physical_errors", (PHYS, "Effective Physical Errors"), INT),
    FieldSpec("effective_physical_ber", (PHYS, "Effective Physical BER"), DECIMAL),
    FieldSpec("raw_physical_ber", (PHYS, "Raw Physical BER"), DECIMAL),
    FieldSpec("vendor_serial", ("Module Info", "Vendor Serial Number"), TEXT),
    FieldSpec("recommendation", ("Troubleshooting Info", "Recommendation"), TEXT),
    FieldSpec("link_state", ("Operational Info", "State"), TEXT),
    # values[0] of each bin is its label; values[1] is the error count
    *(
        FieldSpec(f"fec_histogram[{i}]", (FEC, f"Bin {i}", "values", 1), INT)
        for i in range(FEC_BIN_COUNT)
    ),
)


def _lookup(raw: Any, spec: FieldSpec) -> Any:
    node = raw
    for key in spec.path:
        if isinstance(key, int):
            if not isinstance(node, list) or key >= len(node):
                raise ParseError(spec.name, "missing")
        elif not isinstance(node, dict) or key not in node:
            raise ParseError(spec.name, "missing")
        node = node[key]
    return node


def _convert(value: Any, spec: FieldSpec) -> int | str:
    if spec.kind == INT:
        if isinstance(value, bool):
            raise ParseError(spec.name, f"not a number: {value!r}")
        if isinstance(value, int):
            number = value
        elif isinstance(value, str) and value.strip().isascii() \
                and value.strip().isdigit():
            number = int(value.strip())
        else:
            raise ParseError(spec.name, f"not a number: {value!r}")
        if number < 0:
            raise ParseError(spec.name, f"negative count: {number}")
        return number

    if spec.kind == DECIMAL and isinstance(value, (int, float)) \
            and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise ParseError(spec.name, f"expected text, got {value!r}")
    return value.strip()


def extract_fields(raw: dict[str, Any]) -> dict[str, int | str]:
    """Read every entry of ``FIELDS`` from *raw*, keyed by field name."""
    return {spec.name: _convert(_lookup(raw, spec), spec) for spec in FIELDS}


def parse(identity: PortIdentity, raw: dict[str, Any],
          host: HostContext) -> PortStats:
    """Build a fully populated, not yet evaluated ``PortStats``.

    Raises:
        ParseError: if any field is missing or malformed.
    """
    values = extract_fields(raw)
    return PortStats(
        host_serial=host.chassis_serial,
        hostname=host.hostname,
        port=identity.port,
        device=identity.device,
        fec_histogram=[values[f"fec_histogram[{i}]"] for i in range(FEC_BIN_COUNT)],
        raw_physical_errors_per_lane=[
            values[f"raw_physical_errors_per_lane[{lane}]"]
            for lane in range(LANE_COUNT)
        ],
        link_state=values["link_state"],
        vendor_serial=values["vendor_serial"],
        effective_physical_errors=values["effective_physical_errors"],
        effective_physical_ber=values["effective_physical_ber"],
        raw_physical_ber=values["raw_physical_ber"],
        recommendation=values["recommendation"],
    )
