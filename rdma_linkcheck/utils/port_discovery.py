"""Enumerate RDMA adapter ports and read the identity of this host."""

import logging
import os
import socket
from pathlib import Path

from rdma_linkcheck.errors import DiscoveryError, HostContextError, PrivilegeError
from rdma_linkcheck.models import HostContext, PortIdentity

logger = logging.getLogger(__name__)

NETDEV_PREFIX = "rdma"


def _ib_ports_for_netdev(net_class: Path, netdev: str) -> list[str]:
    """Return the InfiniBand device names backing a net interface."""
    ib_dir = net_class / netdev / "device" / "infiniband"
    try:
        return sorted(p.name for p in ib_dir.iterdir())
    except (FileNotFoundError, NotADirectoryError, PermissionError):
        return []


def discover_ports(sysfs_root: str = "/sys",
                   device_filter: list[str] | None = None) -> list[PortIdentity]:
    """Discover RDMA ports on this host.

    Every ``rdma*`` interface under ``<sysfs_root>/class/net`` is one port;
    its InfiniBand device name(s) are read from ``device/infiniband`` and
    joined with ``,``.

    Args:
        sysfs_root: Mount point of sysfs.
        device_filter: If non-empty, only return interfaces whose names are
                       in this list.

    Returns:
        List of PortIdentity objects, possibly empty.

    Raises:
        DiscoveryError: if the net class directory cannot be listed.
    """
    net_class = Path(sysfs_root) / "class" / "net"
    try:
        netdevs = sorted(
            p.name for p in net_class.iterdir() if p.name.startswith(NETDEV_PREFIX)
        )
    except OSError as exc:
        raise DiscoveryError(f"cannot list {net_class}: {exc}") from exc

    if device_filter:
        netdevs = [d for d in netdevs if d in device_filter]

    ports: list[PortIdentity] = []
    for netdev in netdevs:
        ib_names = _ib_ports_for_netdev(net_class, netdev)
        if not ib_names:
            logger.warning("Skipping %s: no InfiniBand device found", netdev)
            continue
        identity = PortIdentity(device=netdev, port=",".join(ib_names))
        ports.append(identity)
        logger.info("Discovered %s -> %s", identity.device, identity.port)

    if not ports:
        logger.warning("No RDMA ports discovered on this host.")
    return ports


def parse_port_list(specs: list[str]) -> list[PortIdentity]:
    """Build identities from ``device:port`` strings given on the command line."""
    ports: list[PortIdentity] = []
    for spec in specs:
        device, sep, port = spec.partition(":")
        if not sep or not device or not port:
            raise DiscoveryError(f"invalid port spec {spec!r}, expected device:port")
        ports.append(PortIdentity(device=device, port=port))
    return ports


def read_host_context(sysfs_root: str = "/sys", chassis_serial: str = "",
                      hostname: str = "") -> HostContext:
    """Read chassis serial and hostname; explicit values take precedence."""
    if not chassis_serial:
        serial_path = Path(sysfs_root) / "class" / "dmi" / "id" / "chassis_serial"
        try:
            chassis_serial = serial_path.read_text().strip()
        except OSError as exc:
            raise HostContextError(f"cannot read chassis serial: {exc}") from exc
    if not hostname:
        try:
            hostname = socket.gethostname()
        except OSError as exc:
            raise HostContextError(f"cannot read hostname: {exc}") from exc
    return HostContext(chassis_serial=chassis_serial, hostname=hostname)


def check_privilege() -> None:
    if os.geteuid() != 0:
        raise PrivilegeError("You must be root to run this program.")
