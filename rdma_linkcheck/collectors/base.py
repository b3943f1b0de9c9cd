"""Base class for per-port telemetry collectors."""

import abc
import json
import logging
import time
from typing import Any

from rdma_linkcheck.errors import InvalidOutputError
from rdma_linkcheck.models import PortIdentity

logger = logging.getLogger(__name__)


def extract_output(text: str, source: str) -> dict[str, Any]:
    """Decode an ``mlxlink --json`` document and return its ``result.output``.

    A non-zero ``status.code`` is only logged: mlxlink reports partial
    support (e.g. no FEC histogram) that way while still emitting data.
    """
    if not text.strip():
        raise InvalidOutputError(f"{source} produced no output")
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidOutputError(f"{source} emitted invalid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise InvalidOutputError(f"{source} emitted a non-object JSON document")

    status = document.get("status")
    if isinstance(status, dict) and status.get("code") not in (None, 0):
        logger.warning("%s reported status %s: %s", source,
                       status.get("code"), status.get("message", ""))

    result = document.get("result")
    output = result.get("output") if isinstance(result, dict) else None
    if not isinstance(output, dict):
        message = status.get("message", "") if isinstance(status, dict) else ""
        raise InvalidOutputError(
            f"{source} document has no result.output"
            + (f" ({message})" if message else "")
        )
    return output


class BaseCollector(abc.ABC):
    """Abstract base for telemetry collectors.

    Subclasses implement ``collect()`` returning the raw hierarchical
    telemetry of one port, or raising a ``CollectionError``.
    """

    name: str = "base"

    @abc.abstractmethod
    def collect(self, identity: PortIdentity) -> dict[str, Any]:
        """Collect raw telemetry for *identity*."""
        ...

    def timed_collect(self, identity: PortIdentity) -> dict[str, Any]:
        start = time.monotonic()
        try:
            return self.collect(identity)
        finally:
            elapsed = time.monotonic() - start
            logger.debug("Collector %s took %.1f ms for %s",
                         self.name, elapsed * 1000, identity.port)
