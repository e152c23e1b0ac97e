"""Tests for scan seed loading and legacy record normalization."""

import json
from datetime import timezone

import pytest

from scan_triage.exceptions import ConfigLoadError
from scan_triage.models.models import ScanStatus
from scan_triage.models.rule_models import PriorityLevel
from scan_triage.services.data_loader import (
    load_scans,
    normalize_legacy_record,
    parse_scans,
    read_json,
)


def _record(**overrides) -> dict:
    record = {
        "scanId": "S-1",
        "patientId": "P-1",
        "bodyPart": "Wrist",
        "scanType": "X-Ray",
        "scanDate": "2024-01-01T10:00:00Z",
        "description": "Fall",
        "findings": "",
        "consultant": "Dr. A",
        "status": "Pending Review",
    }
    record.update(overrides)
    return record


class TestReadJson:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigLoadError) as exc_info:
            read_json(tmp_path / "nope.json")
        assert exc_info.value.reason == "file not found"

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_bytes(b'[{"scanId": "fr\xff"}]')
        with pytest.raises(ConfigLoadError) as exc_info:
            read_json(path)
        assert "invalid UTF-8" in exc_info.value.reason

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{")
        with pytest.raises(ConfigLoadError) as exc_info:
            read_json(path)
        assert "invalid JSON" in exc_info.value.reason


class TestNormalizeLegacyRecord:
    def test_renamed_fields(self):
        record = normalize_legacy_record(
            _record(assignedRadiologist="Dr. B", radiologistNotes="check again", consultant=None)
        )
        assert "assignedRadiologist" not in record
        assert record["consultant"] == "Dr. B"
        assert record["notes"] == "check again"

    def test_current_field_wins_over_legacy(self):
        record = normalize_legacy_record(_record(consultant="Dr. A", assignedRadiologist="Dr. B"))
        assert record["consultant"] == "Dr. A"

    def test_bare_string_priority_dropped(self):
        record = normalize_legacy_record(_record(priority="Urgent"))
        assert "priority" not in record

    def test_structured_priority_kept(self):
        record = normalize_legacy_record(_record(priority={"level": "high", "score": 70}))
        assert record["priority"].level == PriorityLevel.HIGH
        assert record["priority"].score == 70

    def test_priority_level_casing_normalized(self):
        record = normalize_legacy_record(_record(priority={"level": " Urgent ", "score": 90}))
        assert record["priority"].level == PriorityLevel.URGENT

    @pytest.mark.parametrize("priority", [
        {"level": "urgent"},
        {"level": "critical", "score": 90},
        {"level": "high", "score": -1},
    ])
    def test_unusable_priority_object_dropped(self, priority):
        record = normalize_legacy_record(_record(priority=priority))
        assert "priority" not in record

    def test_input_not_mutated(self):
        raw = _record(priority="Urgent")
        normalize_legacy_record(raw)
        assert raw["priority"] == "Urgent"


class TestParseScans:
    def test_parses_camel_case_records(self):
        [scan] = parse_scans([_record()])
        assert scan.scan_id == "S-1"
        assert scan.body_part == "Wrist"
        assert scan.scan_date.tzinfo == timezone.utc
        assert scan.priority is None

    def test_legacy_assigned_radiologist(self):
        record = _record(assignedRadiologist="Dr. B")
        del record["consultant"]
        [scan] = parse_scans([record])
        assert scan.consultant == "Dr. B"

    def test_legacy_status_values(self):
        scans = parse_scans([
            _record(scanId="S-1", status="Reviewed"),
            _record(scanId="S-2", status="pending review"),
            _record(scanId="S-3", status="in_progress"),
        ])
        assert [s.status for s in scans] == [
            ScanStatus.COMPLETED, ScanStatus.PENDING_REVIEW, ScanStatus.IN_PROGRESS,
        ]

    def test_naive_dates_taken_as_utc(self):
        [scan] = parse_scans([_record(scanDate="2024-02-01T08:00:00")])
        assert scan.scan_date.tzinfo == timezone.utc

    def test_invalid_records_skipped(self):
        scans = parse_scans([
            _record(scanId="S-1"),
            _record(scanId="S-2", scanDate="not a date"),
            "not an object",
            _record(scanId="S-3", status="Lost"),
            _record(scanId="S-4"),
        ])
        assert [s.scan_id for s in scans] == ["S-1", "S-4"]

    def test_rejects_non_list_payload(self):
        with pytest.raises(ConfigLoadError):
            parse_scans({"scans": []})


class TestLoadScans:
    def test_loads_file(self, tmp_path):
        path = tmp_path / "scans.json"
        path.write_text(json.dumps([_record(scanId="S-1"), _record(scanId="S-2")]))
        assert [s.scan_id for s in load_scans(path)] == ["S-1", "S-2"]

    def test_unreadable_file_returns_empty(self, tmp_path):
        assert load_scans(tmp_path / "missing.json") == []

    def test_malformed_file_returns_empty(self, tmp_path):
        path = tmp_path / "scans.json"
        path.write_text("not json at all")
        assert load_scans(path) == []

    def test_undecodable_file_returns_empty(self, tmp_path):
        path = tmp_path / "scans.json"
        path.write_bytes(b'[{"scanId": "A-1", "description": "fr\xff"}]')
        assert load_scans(path) == []

    def test_scan_with_legacy_priority_object_kept(self, tmp_path):
        path = tmp_path / "scans.json"
        path.write_text(json.dumps([
            {"scanId": "A-1", "scanDate": "2024-01-01T00:00:00Z",
             "priority": {"level": "Urgent", "score": 90}},
            {"scanId": "A-2", "scanDate": "2024-01-01T00:00:00Z",
             "priority": {"level": "high"}},
        ]))

        scans = load_scans(path)

        assert [s.scan_id for s in scans] == ["A-1", "A-2"]
        assert scans[0].priority.level == PriorityLevel.URGENT
        assert scans[0].priority.score == 90
        assert scans[1].priority is None
