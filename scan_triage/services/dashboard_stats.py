"""
Worklist filtering and dashboard summary counters.

Backs the status filter, the search box, the header counters and the chart
series of the dashboard page.
"""

from collections import Counter
from collections.abc import Iterable, Sequence

from scan_triage.models.models import DashboardStats, Scan, ScanStatus
from scan_triage.models.rule_models import PriorityLevel

# Fields matched by the free-text search box
SEARCH_FIELDS = ("scan_id", "patient_id", "patient_name", "body_part")


def matches_search(scan: Scan, term: str) -> bool:
    term = term.lower()
    return any(term in (getattr(scan, name) or "").lower() for name in SEARCH_FIELDS)


def filter_scans(
    scans: Iterable[Scan],
    status: ScanStatus | None = None,
    search: str | None = None,
) -> list[Scan]:
    """
    Keep scans matching the status filter and search term.

    Input order is preserved, so filtering a sorted worklist stays sorted.
    """
    term = (search or "").strip()
    result = []
    for scan in scans:
        if status is not None and scan.status != status:
            continue
        if term and not matches_search(scan, term):
            continue
        result.append(scan)
    return result


def compute_stats(scans: Sequence[Scan]) -> DashboardStats:
    """Summarize the worklist for the dashboard header and charts."""
    by_status = Counter(scan.status.value for scan in scans)
    by_scan_type = Counter(scan.scan_type or "Unknown" for scan in scans)
    by_level = Counter(
        (scan.priority.level if scan.priority else PriorityLevel.LOW).value
        for scan in scans
    )
    confidences = [scan.priority.confidence for scan in scans if scan.priority is not None]

    return DashboardStats(
        total_scans=len(scans),
        pending_review=by_status.get(ScanStatus.PENDING_REVIEW.value, 0),
        urgent_priority=by_level.get(PriorityLevel.URGENT.value, 0),
        by_status=dict(by_status),
        by_scan_type=dict(by_scan_type),
        by_priority_level={level.value: by_level.get(level.value, 0) for level in PriorityLevel},
        average_confidence=round(sum(confidences) / len(confidences), 1) if confidences else None,
    )
