"""Pytest configuration and shared fixtures."""

import copy
import json

import pytest

from rdma_linkcheck.models import HostContext, PortIdentity
from rdma_linkcheck.utils.config_loader import DEFAULTS


def _output(state="Active", raw_ber="15E-255", effective_ber="15E-255",
            effective_errors=0, lane_errors=(0, 0, 0, 0), fec_bins=None,
            vendor_serial="MT2231FT12345", recommendation="No issue was observed"):
    """Build the ``result.output`` section of an ``mlxlink --json`` run."""
    bins = list(fec_bins) if fec_bins is not None else [0] * 16
    return {
        "Operational Info": {
            "State": state,
            "Physical state": "LinkUp",
            "Speed": "IB-NDR",
            "Width": "4x",
        },
        "Troubleshooting Info": {
            "Status Opcode": "0",
            "Group Opcode": "N/A",
            "Recommendation": recommendation,
        },
        "Module Info": {
            "Vendor Name": "Mellanox",
            "Vendor Serial Number": vendor_serial,
        },
        "Physical Counters and BER Info": {
            "Time Since Last Clear [Min]": "1440.1",
            "Effective Physical Errors": str(effective_errors),
            "Effective Physical BER": effective_ber,
            "Raw Physical Errors Per Lane": {
                "values": [str(v) for v in lane_errors],
            },
            "Raw Physical BER": raw_ber,
        },
        "Histogram of FEC Errors": {
            f"Bin {i}": {"values": [str(i), str(count)]}
            for i, count in enumerate(bins)
        },
    }


def _document(**kwargs):
    return {
        "status": {"code": 0, "message": "Success"},
        "result": {"output": _output(**kwargs)},
    }


@pytest.fixture
def make_output():
    return _output


@pytest.fixture
def make_document():
    return _document


@pytest.fixture
def make_document_text():
    return lambda **kwargs: json.dumps(_document(**kwargs))


@pytest.fixture
def host():
    return HostContext(chassis_serial="CHS123", hostname="gpu-node-01")


@pytest.fixture
def identity():
    return PortIdentity(device="rdma0", port="mlx5_0")


@pytest.fixture
def cfg(tmp_path):
    """Defaults suitable for running without root or real hardware."""
    c = copy.deepcopy(DEFAULTS)
    c["general"]["require_root"] = False
    c["host"]["chassis_serial"] = "CHS123"
    c["host"]["hostname"] = "gpu-node-01"
    c["network"]["sysfs_root"] = str(tmp_path / "sys")
    return c


@pytest.fixture
def sysfs(tmp_path):
    """Fake sysfs tree factory: ``sysfs({"rdma0": ["mlx5_0"]})``."""
    root = tmp_path / "sys"

    def _build(netdevs, chassis_serial="CHS123"):
        net = root / "class" / "net"
        net.mkdir(parents=True, exist_ok=True)
        for netdev, ib_names in netdevs.items():
            ib_dir = net / netdev / "device" / "infiniband"
            ib_dir.mkdir(parents=True, exist_ok=True)
            for name in ib_names:
                (ib_dir / name).mkdir()
        if chassis_serial is not None:
            dmi = root / "class" / "dmi" / "id"
            dmi.mkdir(parents=True, exist_ok=True)
            (dmi / "chassis_serial").write_text(chassis_serial + "\n")
        return root

    return _build
