"""Concurrent Collect -> Parse -> Evaluate pipeline, one task per port."""

import concurrent.futures
import logging

from rdma_linkcheck.analysis.health import evaluate
from rdma_linkcheck.analysis.parser import parse
from rdma_linkcheck.collectors.base import BaseCollector
from rdma_linkcheck.errors import PortError
from rdma_linkcheck.models import HostContext, PortIdentity, PortStats

logger = logging.getLogger(__name__)


def check_port(identity: PortIdentity, collector: BaseCollector,
               host: HostContext) -> PortStats:
    """Run the full pipeline for one port.

    Never raises: a failure is returned as a degraded, faulty row.
    """
    try:
        raw = collector.timed_collect(identity)
        return evaluate(parse(identity, raw, host))
    except PortError as exc:
        logger.warning("%s (%s): %s: %s", identity.device, identity.port,
                       type(exc).__name__, exc)
        return PortStats.failed(identity, host, exc)
    except Exception as exc:
        logger.exception("Unexpected failure checking %s (%s)",
                         identity.device, identity.port)
        return PortStats.failed(identity, host, exc)


def check_ports(ports: list[PortIdentity], collector: BaseCollector,
                host: HostContext, max_workers: int = 16) -> list[PortStats]:
    """Check every port concurrently and return one record per port.

    Records come back in completion order; ordering is the report's job.
    """
    if not ports:
        return []

    records: list[PortStats] = []
    workers = min(max_workers, len(ports))
    with concurrent.futures.ThreadPoolExecutor(
        max_workers=workers, thread_name_prefix="linkcheck"
    ) as executor:
        futures = [
            executor.submit(check_port, identity, collector, host)
            for identity in ports
        ]
        for future in concurrent.futures.as_completed(futures):
            records.append(future.result())

    failed = sum(1 for r in records if r.degraded)
    if failed:
        logger.warning("%d of %d ports could not be checked", failed, len(records))
    return records
