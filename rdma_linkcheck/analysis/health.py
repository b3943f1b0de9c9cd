"""Threshold rules that classify a port as healthy or faulty.

Rules run in a fixed order.  Each matching rule sets the fault flag and
overwrites the comment, so the comment names the last matching rule only.
"""

import logging
from collections.abc import Callable

from rdma_linkcheck.errors import ParseError
from rdma_linkcheck.models import PortStats

logger = logging.getLogger(__name__)

ACTIVE_STATE = "Active"
RAW_BER_THRESHOLD = 1.0e-9
FEC_ALERT_BINS = (7, 8, 9)

LINK_DOWN = "❌ Link is down"
HIGH_BER = "❌ Physical BER is high"
PHYSICAL_ERRORS = "❌ Physical errors detected"


def fec_comment(bin_index: int) -> str:
    return f"❌ FEC[{bin_index}] errors detected"


def ber_value(stats: PortStats, field: str = "raw_physical_ber") -> float:
    value = getattr(stats, field)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ParseError(field, f"not a number: {value!r}") from None


def _fec_rule(bin_index: int) -> tuple[Callable[[PortStats], bool], str]:
    return (lambda s: s.fec_histogram[bin_index] > 0, fec_comment(bin_index))


RULES: list[tuple[Callable[[PortStats], bool], str]] = [
    (lambda s: s.link_state != ACTIVE_STATE, LINK_DOWN),
    (lambda s: ber_value(s) > RAW_BER_THRESHOLD, HIGH_BER),
    (lambda s: s.effective_physical_errors > 0, PHYSICAL_ERRORS),
    *(_fec_rule(i) for i in FEC_ALERT_BINS),
]


def evaluate(stats: PortStats) -> PortStats:
    """Populate ``comment`` and ``fault`` on *stats* and return it.

    Raises:
        ParseError: if a BER field cannot be read as a float.
    """
    # effective BER is display-only but must still be numeric
    ber_value(stats, "effective_physical_ber")

    comment = ""
    fault = False
    for matches, text in RULES:
        if matches(stats):
            comment = text
            fault = True
    stats.comment = comment
    stats.fault = fault
    if fault:
        logger.info("%s (%s): %s", stats.device, stats.port, comment)
    return stats
