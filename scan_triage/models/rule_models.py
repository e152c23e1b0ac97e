"""
Pydantic models for the keyword priority rule engine.

This module defines the structured representation of priority rules,
per-scan AI analysis entries, and the triage decision produced by the scorer.
"""

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ============================================================================
# Priority Levels
# ============================================================================

class PriorityLevel(str, Enum):
    """Triage levels assigned by the priority rules."""
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_RANK: dict[PriorityLevel, int] = {
    PriorityLevel.URGENT: 4,
    PriorityLevel.HIGH: 3,
    PriorityLevel.MEDIUM: 2,
    PriorityLevel.LOW: 1,
}


# ============================================================================
# Priority Rule
# ============================================================================

class PriorityRule(BaseModel):
    """
    A single keyword rule: any keyword found in a scan's text makes it match.

    Keywords are normalized to lowercase on load. Blank keywords are dropped
    so they can never match every corpus.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    keywords: tuple[str, ...] = Field(default=(), description="Lowercased keywords")
    priority_label: PriorityLevel = Field(
        ...,
        validation_alias=AliasChoices("priorityLabel", "priority_label", "priority", "level"),
        serialization_alias="priorityLabel",
        description="Triage level assigned when this rule wins",
    )
    score: int = Field(..., ge=0, description="Rule score; higher wins")
    reasoning: str = Field(default="", description="Human-readable reason for the level")

    @field_validator("keywords", mode="before")
    @classmethod
    def normalize_keywords(cls, v) -> tuple[str, ...]:
        """Lowercase, strip, drop blanks and de-duplicate preserving order."""
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            raise ValueError("keywords must be a list of strings")
        seen: dict[str, None] = {}
        for keyword in v:
            cleaned = str(keyword).strip().lower()
            if cleaned:
                seen.setdefault(cleaned, None)
        return tuple(seen)

    @field_validator("priority_label", mode="before")
    @classmethod
    def normalize_label(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


# ============================================================================
# AI Analysis Lookup
# ============================================================================

class AIAnalysisEntry(BaseModel):
    """Precomputed AI findings for a single scan."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    scan_id: str = Field(default="", description="Scan this entry belongs to")
    ai_findings: str = Field(..., description="Preliminary AI findings text")
    confidence: int = Field(..., ge=0, le=100, description="Confidence percentage")
    key_structures: tuple[str, ...] = Field(default=(), description="Anatomy highlighted by the model")
    recommendations: str = Field(default="", description="Suggested follow-up")

    @field_validator("confidence", mode="before")
    @classmethod
    def scale_fractional_confidence(cls, v):
        """Accept 0-1 fractions from older seed files as percentages."""
        if isinstance(v, float) and 0.0 <= v <= 1.0:
            return round(v * 100)
        return v


DEFAULT_AI_ANALYSIS = AIAnalysisEntry(
    ai_findings="AI analysis in progress...",
    confidence=50,
    key_structures=(),
    recommendations="Clinical correlation recommended",
)


# ============================================================================
# Triage Decision
# ============================================================================

class TriageDecision(BaseModel):
    """Result of scoring a scan against the rule table."""
    model_config = ConfigDict(frozen=True)

    level: PriorityLevel = Field(..., description="Winning triage level")
    score: int = Field(..., ge=0, description="Winning rule score")
    reasoning: str = Field(..., description="Winning rule reasoning")
    matched_keywords: tuple[str, ...] = Field(
        default=(),
        description="Keywords of the winning rule found in the scan text (for audit)"
    )


DEFAULT_DECISION = TriageDecision(
    level=PriorityLevel.LOW,
    score=0,
    reasoning="Routine study",
)
