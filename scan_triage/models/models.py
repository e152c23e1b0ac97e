"""
Pydantic models for API request/response validation.

Scan records travel over the wire in camelCase (``scanId``, ``bodyPart``)
and are addressed in snake_case inside the service.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from scan_triage.models.rule_models import PriorityLevel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScanStatus(str, Enum):
    """Review workflow states for a scan."""
    PENDING_REVIEW = "Pending Review"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    REQUIRES_CONSULTATION = "Requires Consultation"

    @classmethod
    def from_label(cls, label: str) -> "ScanStatus | None":
        """
        Resolve a status label case-insensitively.

        Older dashboards wrote ``Reviewed`` for finished studies; it maps to
        ``Completed``. Returns None for anything unrecognized.
        """
        key = " ".join(label.replace("_", " ").replace("-", " ").split()).lower()
        if key == "reviewed":
            return cls.COMPLETED
        for status in cls:
            if status.value.lower() == key:
                return status
        return None


class Priority(CamelModel):
    """
    Triage priority attached to a scan by enrichment.

    Attributes:
        level: Triage level from the winning rule.
        score: Score from the same winning rule.
        reasoning: Why the rule fired.
        ai_analysis: Preliminary AI findings text.
        confidence: AI confidence percentage (0-100).
        key_structures: Anatomy highlighted by the AI entry.
        recommendations: Suggested follow-up.
        flags: Provenance markers such as ``automated_analysis``.
    """
    level: PriorityLevel = Field(..., description="Triage level")
    score: int = Field(..., ge=0, description="Rule score")
    reasoning: str = Field(default="", description="Rule reasoning")
    ai_analysis: str = Field(default="", description="AI findings text")
    confidence: int = Field(default=0, ge=0, le=100, description="AI confidence percentage")
    key_structures: list[str] = Field(default_factory=list, description="Highlighted anatomy")
    recommendations: str = Field(default="", description="Suggested follow-up")
    flags: set[str] = Field(default_factory=set, description="Provenance flags")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_serializer("flags")
    def serialize_flags(self, flags: set[str]) -> list[str]:
        return sorted(flags)


class Scan(CamelModel):
    """
    A single imaging study on the worklist.

    Only ``status`` and ``review_timestamp`` change after load.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    scan_id: str = Field(..., min_length=1, description="Unique scan identifier")
    patient_id: str = Field(default="", description="Patient identifier")
    patient_name: str = Field(default="", description="Patient display name")
    body_part: str = Field(default="", description="Imaged anatomy")
    scan_type: str = Field(default="", description="Modality, e.g. X-Ray, MRI, CT")
    scan_date: datetime = Field(..., description="Acquisition timestamp")
    description: str = Field(default="", description="Clinical indication")
    findings: str = Field(default="", description="Reported findings")
    consultant: str = Field(default="", description="Assigned consultant")
    status: ScanStatus = Field(default=ScanStatus.PENDING_REVIEW, description="Review status")
    priority: Priority | None = Field(default=None, description="Triage priority")
    review_timestamp: datetime | None = Field(default=None, description="Last status change")
    image_url: str | None = Field(default=None, description="Preview image location")
    notes: str | None = Field(default=None, description="Consultant notes")

    @field_validator(
        "patient_id", "patient_name", "body_part", "scan_type",
        "description", "findings", "consultant",
        mode="before",
    )
    @classmethod
    def none_to_empty(cls, v):
        """Missing text fields are treated as empty strings."""
        return "" if v is None else v

    @field_validator("scan_date", "review_timestamp")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Naive timestamps in seed files are taken as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        if isinstance(v, str):
            return ScanStatus.from_label(v) or v
        return v


class StatusUpdateRequest(BaseModel):
    """Body of ``PATCH /api/scans/{scanId}``."""
    status: str | None = Field(default=None, description="New review status")


class DashboardStats(CamelModel):
    """Header counters and chart series for the dashboard."""
    total_scans: int = Field(..., ge=0)
    pending_review: int = Field(..., ge=0)
    urgent_priority: int = Field(..., ge=0)
    by_status: dict[str, int] = Field(default_factory=dict)
    by_scan_type: dict[str, int] = Field(default_factory=dict)
    by_priority_level: dict[str, int] = Field(default_factory=dict)
    average_confidence: float | None = Field(default=None, description="Mean AI confidence")


class HealthStatus(str, Enum):
    """System health status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """
    Health check response for monitoring.

    Attributes:
        status: Overall system health status.
        version: Application version.
        environment: Deployment environment.
        checks: Individual component health checks.
    """
    status: HealthStatus = Field(..., description="Overall health status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Deployment environment")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    checks: dict[str, bool] = Field(default_factory=dict, description="Component health checks")


class ErrorResponse(BaseModel):
    """
    Standardized error response.

    Attributes:
        error: Human-readable error message.
        code: Machine-readable error type.
        details: Additional error details.
        request_id: Request ID for tracing.
    """
    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Error type")
    details: dict | None = Field(default=None, description="Additional details")
    request_id: str | None = Field(default=None, description="Request ID for tracing")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")
