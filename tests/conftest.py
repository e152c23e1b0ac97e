"""
Shared pytest fixtures for scan triage tests.

Provides an in-memory rule store, a scan factory and a fixed clock so tests
never depend on the seed files in data/.
"""
from datetime import datetime, timezone

import pytest

from scan_triage.models.models import Scan
from scan_triage.models.rule_models import AIAnalysisEntry, PriorityRule
from scan_triage.services.rule_store import RuleStore

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def build_scan(scan_id: str = "S-1", **overrides) -> Scan:
    """Build a scan with harmless defaults; keyword-free text unless overridden."""
    data = {
        "scan_id": scan_id,
        "patient_id": f"P-{scan_id}",
        "patient_name": "Test Patient",
        "body_part": "Chest",
        "scan_type": "X-Ray",
        "scan_date": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "description": "",
        "findings": "",
        "consultant": "Dr. Test",
    }
    data.update(overrides)
    return Scan(**data)


@pytest.fixture
def make_scan():
    """Factory fixture for Scan records."""
    return build_scan


@pytest.fixture
def sample_rules() -> list[PriorityRule]:
    return [
        PriorityRule(
            keywords=["fracture", "emergency"],
            priority_label="urgent",
            score=90,
            reasoning="Fracture suspected",
        ),
        PriorityRule(
            keywords=["tear", "dislocation"],
            priority_label="high",
            score=70,
            reasoning="Soft tissue injury",
        ),
        PriorityRule(
            keywords=["wrist"],
            priority_label="medium",
            score=40,
            reasoning="Peripheral joint study",
        ),
    ]


@pytest.fixture
def sample_analysis() -> dict[str, AIAnalysisEntry]:
    return {
        "S-1": AIAnalysisEntry(
            scan_id="S-1",
            ai_findings="Distal radius fracture",
            confidence=94,
            key_structures=("distal radius",),
            recommendations="Orthopaedic referral",
        ),
    }


@pytest.fixture
def rule_store(sample_rules, sample_analysis) -> RuleStore:
    return RuleStore(rules=sample_rules, ai_analysis=sample_analysis)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
