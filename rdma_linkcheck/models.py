"""Data records flowing through the link check pipeline."""

from dataclasses import asdict, dataclass, field, fields
from typing import Any

LANE_COUNT = 4
FEC_BIN_COUNT = 16


@dataclass(frozen=True)
class PortIdentity:
    """One monitored adapter interface."""
    device: str                         # e.g. rdma0
    port: str                           # e.g. mlx5_0, or mlx5_0,mlx5_1


@dataclass(frozen=True)
class HostContext:
    chassis_serial: str
    hostname: str


@dataclass
class PortStats:
    """Normalized physical-layer health record for a single port.

    Field order is the column order used by every renderer.  Telemetry
    fields are ``None`` (arrays empty) only on degraded rows built from a
    collection or parse failure.
    """
    host_serial: str
    hostname: str
    port: str
    device: str
    fec_histogram: list[int] = field(default_factory=list)
    raw_physical_errors_per_lane: list[int] = field(default_factory=list)
    link_state: str = ""
    vendor_serial: str | None = None
    effective_physical_errors: int | None = None
    effective_physical_ber: str | None = None
    raw_physical_ber: str | None = None
    recommendation: str | None = None
    comment: str = ""
    fault: bool = False

    @property
    def degraded(self) -> bool:
        return self.effective_physical_errors is None

    @classmethod
    def failed(cls, identity: PortIdentity, host: HostContext,
               error: Exception) -> "PortStats":
        """Build the row reported for a port whose pipeline failed."""
        return cls(
            host_serial=host.chassis_serial,
            hostname=host.hostname,
            port=identity.port,
            device=identity.device,
            link_state="Unknown",
            comment=f"❌ {type(error).__name__}: {error}",
            fault=True,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PortStats":
        names = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in names}
        kwargs["fec_histogram"] = list(kwargs.get("fec_histogram") or [])
        kwargs["raw_physical_errors_per_lane"] = list(
            kwargs.get("raw_physical_errors_per_lane") or []
        )
        return cls(**kwargs)

    def flat_row(self) -> dict[str, Any]:
        """Flatten array fields into indexed columns (CSV/table shape)."""
        row: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "fec_histogram":
                for i in range(FEC_BIN_COUNT):
                    row[f"fec_bin_{i}"] = value[i] if i < len(value) else None
            elif f.name == "raw_physical_errors_per_lane":
                for i in range(LANE_COUNT):
                    row[f"raw_physical_errors_per_lane_{i}"] = (
                        value[i] if i < len(value) else None
                    )
            else:
                row[f.name] = value
        return row


def flat_columns() -> list[str]:
    """Column names of ``PortStats.flat_row`` in order."""
    columns: list[str] = []
    for f in fields(PortStats):
        if f.name == "fec_histogram":
            columns.extend(f"fec_bin_{i}" for i in range(FEC_BIN_COUNT))
        elif f.name == "raw_physical_errors_per_lane":
            columns.extend(
                f"raw_physical_errors_per_lane_{i}" for i in range(LANE_COUNT)
            )
        else:
            columns.append(f.name)
    return columns
