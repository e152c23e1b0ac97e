"""
Worklist ordering: priority level, then score, then most recent scan first.
"""

from collections.abc import Iterable

from scan_triage.models.models import Scan
from scan_triage.models.rule_models import PRIORITY_RANK, PriorityLevel

# Missing or unrecognized levels rank with LOW
DEFAULT_RANK = PRIORITY_RANK[PriorityLevel.LOW]


def priority_rank(scan: Scan) -> int:
    if scan.priority is None:
        return DEFAULT_RANK
    return PRIORITY_RANK.get(scan.priority.level, DEFAULT_RANK)


def priority_score(scan: Scan) -> int:
    return scan.priority.score if scan.priority is not None else 0


def sort_key(scan: Scan) -> tuple[int, int, float]:
    # Negated so an ascending stable sort yields descending order
    return (-priority_rank(scan), -priority_score(scan), -scan.scan_date.timestamp())


def sort_worklist(scans: Iterable[Scan]) -> list[Scan]:
    """
    Order scans for review.

    Sorted by level (urgent > high > medium > low), then score, then scan
    date, all descending. Scans equal on all three keep their input order.
    """
    return sorted(scans, key=sort_key)
