"""Main link check orchestrator.

Coordinates configuration, port discovery, the per-port pipeline, report
assembly and rendering for a single run.
"""

import logging
import sys

from rdma_linkcheck.collectors.base import BaseCollector
from rdma_linkcheck.collectors.mlxlink import MlxlinkCollector
from rdma_linkcheck.collectors.replay import ReplayCollector
from rdma_linkcheck.exporters.prometheus_exporter import PrometheusExporter
from rdma_linkcheck.models import HostContext, PortIdentity, PortStats
from rdma_linkcheck.pipeline import check_ports
from rdma_linkcheck.report import assemble, get_renderer
from rdma_linkcheck.utils.config_loader import load_config
from rdma_linkcheck.utils.port_discovery import (
    check_privilege,
    discover_ports,
    parse_port_list,
    read_host_context,
)

logger = logging.getLogger("rdma_linkcheck")


def _setup_logging(cfg: dict) -> None:
    general = cfg.get("general", {})
    level_str = str(general.get("log_level", "WARNING")).upper()
    level = getattr(logging, level_str, logging.WARNING)
    log_file = general.get("log_file", "")

    # stdout carries the report
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )


class LinkChecker:
    """Runs one health check of every local RDMA port."""

    def __init__(self, config_path: str | None = None,
                 output_format: str | None = None,
                 errors_only: bool = False,
                 replay_dir: str | None = None,
                 ports: list[str] | None = None,
                 cfg: dict | None = None):
        self.cfg = cfg if cfg is not None else load_config(config_path)
        _setup_logging(self.cfg)

        self.output_format = output_format or self.cfg["output"]["format"]
        self.errors_only = errors_only
        self.replay_dir = replay_dir
        self.port_specs = ports or []
        # fail on a bad format before any port is touched
        self.renderer = get_renderer(self.output_format)

    # ------------------------------------------------------------------
    # Setup helpers
    # ------------------------------------------------------------------

    def _check_privilege(self) -> None:
        if self.replay_dir is None and self.cfg["general"]["require_root"]:
            check_privilege()

    def _discover(self) -> list[PortIdentity]:
        if self.port_specs:
            return parse_port_list(self.port_specs)
        net_cfg = self.cfg["network"]
        return discover_ports(
            sysfs_root=net_cfg["sysfs_root"],
            device_filter=net_cfg.get("devices") or None,
        )

    def _host_context(self) -> HostContext:
        host_cfg = self.cfg.get("host", {})
        return read_host_context(
            sysfs_root=self.cfg["network"]["sysfs_root"],
            chassis_serial=str(host_cfg.get("chassis_serial") or ""),
            hostname=str(host_cfg.get("hostname") or ""),
        )

    def _collector(self) -> BaseCollector:
        if self.replay_dir is not None:
            return ReplayCollector(self.replay_dir)
        mlx_cfg = self.cfg["mlxlink"]
        return MlxlinkCollector(
            binary=mlx_cfg["binary"],
            timeout=mlx_cfg["timeout"],
            extra_args=mlx_cfg.get("extra_args") or [],
        )

    def _export_prometheus(self, records: list[PortStats]) -> None:
        prom_cfg = self.cfg.get("prometheus", {})
        path = prom_cfg.get("textfile")
        if not path:
            return
        exporter = PrometheusExporter(prefix=prom_cfg.get("metric_prefix", "rdma_linkcheck"))
        exporter.write(records, path)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def collect(self) -> list[PortStats]:
        """Check every port and return all records, unordered."""
        self._check_privilege()
        ports = self._discover()
        host = self._host_context()
        if not ports:
            return []
        logger.info("Checking %d ports", len(ports))
        return check_ports(
            ports, self._collector(), host,
            max_workers=self.cfg["general"]["max_workers"],
        )

    def run(self) -> str | None:
        """Run a full check and return the rendered report.

        Returns ``None`` when no record matches the filter.
        """
        records = self.collect()
        self._export_prometheus(records)
        rows = assemble(records, errors_only=self.errors_only)
        if not rows:
            logger.info("No matching ports.")
            return None
        return self.renderer(rows, self.cfg["output"])
