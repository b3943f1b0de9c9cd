"""Collector that replays ``mlxlink --json`` documents captured earlier.

Files are looked up as ``<directory>/<port>.json``.
"""

import logging
from pathlib import Path
from typing import Any

from rdma_linkcheck.collectors.base import BaseCollector, extract_output
from rdma_linkcheck.errors import CollectionError
from rdma_linkcheck.models import PortIdentity

logger = logging.getLogger(__name__)


class ReplayCollector(BaseCollector):
    name = "replay"

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def path_for(self, identity: PortIdentity) -> Path:
        return self.directory / f"{identity.port}.json"

    def collect(self, identity: PortIdentity) -> dict[str, Any]:
        path = self.path_for(identity)
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise CollectionError(f"cannot read {path}: {exc}") from exc
        return extract_output(text, str(path))
