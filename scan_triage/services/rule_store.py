"""
Rule Store for keyword priority scoring.

Holds the ordered priority rules and the per-scan AI analysis lookup table.
Both are loaded once at startup and are read-only afterwards. A seed file that
cannot be loaded leaves its half of the store empty, which makes the scorer
fall back to the routine classification for every scan.
"""

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from scan_triage.config.logging_config import get_logger
from scan_triage.exceptions import ConfigLoadError
from scan_triage.models.rule_models import (
    DEFAULT_AI_ANALYSIS,
    AIAnalysisEntry,
    PriorityRule,
)
from scan_triage.services.data_loader import read_json

logger = get_logger(__name__)


class RuleStore:
    """
    Immutable collection of priority rules and AI analysis entries.

    Rule order is significant: when two matching rules share a score, the one
    stored first wins.
    """

    def __init__(
        self,
        rules: Iterable[PriorityRule] = (),
        ai_analysis: dict[str, AIAnalysisEntry] | None = None,
    ):
        self._rules: tuple[PriorityRule, ...] = tuple(rules)
        self._ai_analysis: dict[str, AIAnalysisEntry] = dict(ai_analysis or {})

    @property
    def rules(self) -> tuple[PriorityRule, ...]:
        return self._rules

    @property
    def analysis_count(self) -> int:
        return len(self._ai_analysis)

    def get_analysis(self, scan_id: str) -> AIAnalysisEntry:
        """Return the AI entry for a scan, or the default placeholder entry."""
        return self._ai_analysis.get(scan_id, DEFAULT_AI_ANALYSIS)

    def has_analysis(self, scan_id: str) -> bool:
        return scan_id in self._ai_analysis

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleStore(rules={len(self._rules)}, ai_analysis={len(self._ai_analysis)})"


def parse_rules(payload: Any, source: str = "<memory>") -> list[PriorityRule]:
    """
    Validate a decoded rules payload.

    Accepts either a bare list of rules or ``{"rules": [...]}``.

    Raises:
        ConfigLoadError: If the payload shape or any rule is invalid.
    """
    if isinstance(payload, dict) and "rules" in payload:
        payload = payload["rules"]
    if not isinstance(payload, list):
        raise ConfigLoadError(source, f"expected a list of rules, got {type(payload).__name__}")

    try:
        return [PriorityRule.model_validate(item) for item in payload]
    except ValidationError as e:
        raise ConfigLoadError(source, f"invalid priority rule: {e.error_count()} error(s)") from e


def parse_ai_analysis(payload: Any, source: str = "<memory>") -> dict[str, AIAnalysisEntry]:
    """
    Validate a decoded AI analysis payload.

    Accepts an object keyed by scan id or a list of entries carrying ``scanId``.

    Raises:
        ConfigLoadError: If the payload shape or any entry is invalid.
    """
    try:
        if isinstance(payload, dict):
            entries = {
                scan_id: AIAnalysisEntry.model_validate({**data, "scanId": scan_id})
                for scan_id, data in payload.items()
            }
        elif isinstance(payload, list):
            entries = {}
            for item in payload:
                entry = AIAnalysisEntry.model_validate(item)
                if not entry.scan_id:
                    raise ConfigLoadError(source, "AI analysis entry without scanId")
                entries[entry.scan_id] = entry
        else:
            raise ConfigLoadError(
                source, f"expected an object or list of entries, got {type(payload).__name__}"
            )
    except (ValidationError, TypeError) as e:
        raise ConfigLoadError(source, f"invalid AI analysis entry: {e}") from e
    return entries


def load_rules(path: Path) -> list[PriorityRule]:
    """Load priority rules, returning an empty list on any load failure."""
    try:
        rules = parse_rules(read_json(path), source=str(path))
    except ConfigLoadError as e:
        logger.error("Failed to load priority rules", path=e.path, reason=e.reason)
        return []

    logger.info("Priority rules loaded", path=str(path), rule_count=len(rules))
    return rules


def load_ai_analysis(path: Path) -> dict[str, AIAnalysisEntry]:
    """Load the AI analysis table, returning an empty table on any load failure."""
    try:
        entries = parse_ai_analysis(read_json(path), source=str(path))
    except ConfigLoadError as e:
        logger.error("Failed to load AI analysis table", path=e.path, reason=e.reason)
        return {}

    logger.info("AI analysis table loaded", path=str(path), entry_count=len(entries))
    return entries


def load_rule_store(rules_path: Path, ai_analysis_path: Path) -> RuleStore:
    """Build the Rule Store from its two seed files."""
    return RuleStore(
        rules=load_rules(rules_path),
        ai_analysis=load_ai_analysis(ai_analysis_path),
    )
