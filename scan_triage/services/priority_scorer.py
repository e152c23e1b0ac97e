"""
Priority Scorer.

Provides deterministic keyword scoring of a scan against the Rule Store.
No model is involved: a rule matches when any of its keywords occurs in the
scan's text, and the highest-scoring matching rule decides the triage level.
"""

from scan_triage.config.logging_config import get_logger
from scan_triage.models.models import Scan
from scan_triage.models.rule_models import DEFAULT_DECISION, PriorityRule, TriageDecision
from scan_triage.services.rule_store import RuleStore

logger = get_logger(__name__)

# Fields searched for rule keywords, in corpus order
CORPUS_FIELDS = ("description", "body_part", "scan_type", "findings")


def build_corpus(scan: Scan) -> str:
    """Join the searchable text fields into one lowercased corpus."""
    parts = [getattr(scan, name, None) or "" for name in CORPUS_FIELDS]
    return " ".join(parts).lower()


def count_keyword_hits(rule: PriorityRule, corpus: str) -> int:
    """Number of the rule's keywords appearing as substrings of the corpus."""
    return sum(1 for keyword in rule.keywords if keyword in corpus)


def score_text(corpus: str, rule_store: RuleStore) -> TriageDecision:
    """
    Score a pre-built corpus against the rule table.

    Among matching rules the strictly greatest score wins, so on a tie the
    rule stored first is kept.
    """
    corpus = corpus.lower()
    best: PriorityRule | None = None

    for rule in rule_store.rules:
        if count_keyword_hits(rule, corpus) == 0:
            continue
        if best is None or rule.score > best.score:
            best = rule

    if best is None:
        return DEFAULT_DECISION

    return TriageDecision(
        level=best.priority_label,
        score=best.score,
        reasoning=best.reasoning,
        matched_keywords=tuple(k for k in best.keywords if k in corpus),
    )


def score_scan(scan: Scan, rule_store: RuleStore) -> TriageDecision:
    """
    Assign a triage decision to a scan.

    Args:
        scan: Scan whose description, body part, scan type and findings are searched.
        rule_store: Loaded rules.

    Returns:
        The winning rule's level, score and reasoning, or low/0/"Routine study"
        when nothing matches.
    """
    decision = score_text(build_corpus(scan), rule_store)

    logger.debug(
        "Scan scored",
        scan_id=scan.scan_id,
        level=decision.level.value,
        score=decision.score,
        matched_keywords=list(decision.matched_keywords),
    )
    return decision
