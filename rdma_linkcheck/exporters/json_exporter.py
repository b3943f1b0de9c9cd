"""JSON renderer.

Emits the report as a single array of complete records; ``load_records``
reads such a document back.
"""

import json
from typing import Any

from rdma_linkcheck.models import PortStats


def render_json(records: list[PortStats], options: dict | None = None) -> str:
    indent = (options or {}).get("json_indent", 2)
    return json.dumps([r.to_dict() for r in records], indent=indent,
                      ensure_ascii=False)


def load_records(text: str) -> list[PortStats]:
    data: Any = json.loads(text)
    return [PortStats.from_dict(item) for item in data]
