"""
One-time priority enrichment applied to scans before they enter the repository.
"""

from collections.abc import Iterable

from scan_triage.config.logging_config import get_logger
from scan_triage.models.models import Priority, Scan
from scan_triage.services.priority_scorer import score_scan
from scan_triage.services.rule_store import RuleStore

logger = get_logger(__name__)

AUTOMATED_ANALYSIS_FLAG = "automated_analysis"


def build_priority(scan: Scan, rule_store: RuleStore) -> Priority:
    """Compose a Priority from the scorer's decision and the scan's AI entry."""
    decision = score_scan(scan, rule_store)
    analysis = rule_store.get_analysis(scan.scan_id)

    return Priority(
        level=decision.level,
        score=decision.score,
        reasoning=decision.reasoning,
        ai_analysis=analysis.ai_findings,
        confidence=analysis.confidence,
        key_structures=list(analysis.key_structures),
        recommendations=analysis.recommendations,
        flags={AUTOMATED_ANALYSIS_FLAG},
    )


def enrich_scans(scans: Iterable[Scan], rule_store: RuleStore) -> list[Scan]:
    """
    Attach a priority to every scan that lacks one.

    Scans that already carry a priority are returned as-is; existing priority
    data is never recomputed. Returns a new list and leaves the inputs untouched.
    """
    enriched: list[Scan] = []
    computed = 0

    for scan in scans:
        if scan.priority is not None:
            enriched.append(scan)
            continue
        enriched.append(scan.model_copy(update={"priority": build_priority(scan, rule_store)}))
        computed += 1

    logger.info(
        "Scans enriched",
        total=len(enriched),
        computed=computed,
        passed_through=len(enriched) - computed,
    )
    return enriched
