"""Telemetry collector backed by the Mellanox ``mlxlink`` utility.

One ``mlxlink`` process is spawned per port, requesting module info,
physical counters, BER and the receive FEC histogram as JSON.
"""

import logging
import subprocess
from typing import Any

from rdma_linkcheck.collectors.base import BaseCollector, extract_output
from rdma_linkcheck.errors import CollectionError, CollectionTimeoutError
from rdma_linkcheck.models import PortIdentity

logger = logging.getLogger(__name__)

MLXLINK_FLAGS = ["-m", "-e", "-c"]
HISTOGRAM_FLAGS = ["--rx_fec_histogram", "--show_histogram", "--json"]


class MlxlinkCollector(BaseCollector):
    name = "mlxlink"

    def __init__(self, binary: str = "mlxlink", timeout: int = 60,
                 extra_args: list[str] | None = None):
        self.binary = binary
        self.timeout = timeout
        self.extra_args = list(extra_args or [])

    def command(self, identity: PortIdentity) -> list[str]:
        return [
            self.binary, *MLXLINK_FLAGS, "-d", identity.port,
            *HISTOGRAM_FLAGS, *self.extra_args,
        ]

    def collect(self, identity: PortIdentity) -> dict[str, Any]:
        cmd = self.command(identity)
        logger.debug("Running: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, encoding="utf-8",
                errors="replace", timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise CollectionTimeoutError(
                f"{self.binary} timed out after {self.timeout}s on {identity.port}"
            ) from exc
        except OSError as exc:
            raise CollectionError(f"failed to start {self.binary}: {exc}") from exc

        if result.returncode != 0:
            logger.debug("%s exited %d for %s: %s", self.binary,
                         result.returncode, identity.port, result.stderr.strip())
        return extract_output(result.stdout, f"{self.binary} on {identity.port}")
