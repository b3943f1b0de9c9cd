"""Prometheus textfile exporter.

Writes per-port gauges in the node-exporter textfile collector format so a
scheduled run feeds the same monitoring pipeline as the live exporters.
"""

import logging

from prometheus_client import CollectorRegistry, Gauge, write_to_textfile

from rdma_linkcheck.analysis.health import ACTIVE_STATE
from rdma_linkcheck.models import PortStats

logger = logging.getLogger(__name__)

_LABELS = ["host", "device", "port"]


class PrometheusExporter:
    """Builds a fresh registry per report and writes it atomically."""

    def __init__(self, prefix: str = "rdma_linkcheck"):
        self.prefix = prefix

    def _gauge(self, registry: CollectorRegistry, name: str, doc: str,
               extra_labels: tuple[str, ...] = ()) -> Gauge:
        return Gauge(f"{self.prefix}_{name}", doc, [*_LABELS, *extra_labels],
                     registry=registry)

    def build_registry(self, records: list[PortStats]) -> CollectorRegistry:
        registry = CollectorRegistry()
        fault = self._gauge(registry, "port_fault", "1 if any health rule matched")
        active = self._gauge(registry, "link_active", "1 if the link state is Active")
        eff_errors = self._gauge(registry, "effective_physical_errors",
                                 "Effective physical errors")
        raw_ber = self._gauge(registry, "raw_physical_ber", "Raw physical BER")
        eff_ber = self._gauge(registry, "effective_physical_ber",
                              "Effective physical BER")
        lane_errors = self._gauge(registry, "raw_physical_errors",
                                  "Raw physical errors per lane", ("lane",))
        fec = self._gauge(registry, "fec_histogram",
                          "Receive FEC histogram bin count", ("bin",))

        for r in records:
            labels = {"host": r.hostname, "device": r.device, "port": r.port}
            fault.labels(**labels).set(1 if r.fault else 0)
            active.labels(**labels).set(1 if r.link_state == ACTIVE_STATE else 0)
            if r.degraded:
                continue
            eff_errors.labels(**labels).set(r.effective_physical_errors)
            raw_ber.labels(**labels).set(float(r.raw_physical_ber))
            eff_ber.labels(**labels).set(float(r.effective_physical_ber))
            for lane, count in enumerate(r.raw_physical_errors_per_lane):
                lane_errors.labels(**labels, lane=str(lane)).set(count)
            for index, count in enumerate(r.fec_histogram):
                fec.labels(**labels, bin=str(index)).set(count)
        return registry

    def write(self, records: list[PortStats], path: str) -> None:
        write_to_textfile(path, self.build_registry(records))
        logger.info("Wrote %d port metrics to %s", len(records), path)
