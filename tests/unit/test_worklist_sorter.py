"""Tests for worklist ordering."""

from datetime import datetime, timezone
from itertools import combinations

from scan_triage.models.models import Priority
from scan_triage.models.rule_models import PriorityLevel
from scan_triage.services.worklist_sorter import priority_rank, sort_key, sort_worklist


def _date(month: int, day: int = 1) -> datetime:
    return datetime(2024, month, day, tzinfo=timezone.utc)


def _scan(make_scan, scan_id, level, score, date):
    priority = Priority(level=level, score=score) if level is not None else None
    return make_scan(scan_id, scan_date=date, priority=priority)


class TestSortWorklist:
    def test_level_dominates_score(self, make_scan):
        low_high_score = _scan(make_scan, "A", PriorityLevel.LOW, 99, _date(1))
        urgent = _scan(make_scan, "B", PriorityLevel.URGENT, 10, _date(1))

        assert [s.scan_id for s in sort_worklist([low_high_score, urgent])] == ["B", "A"]

    def test_full_level_ordering(self, make_scan):
        scans = [
            _scan(make_scan, "low", PriorityLevel.LOW, 0, _date(1)),
            _scan(make_scan, "medium", PriorityLevel.MEDIUM, 0, _date(1)),
            _scan(make_scan, "urgent", PriorityLevel.URGENT, 0, _date(1)),
            _scan(make_scan, "high", PriorityLevel.HIGH, 0, _date(1)),
        ]
        assert [s.scan_id for s in sort_worklist(scans)] == ["urgent", "high", "medium", "low"]

    def test_score_breaks_level_ties(self, make_scan):
        a = _scan(make_scan, "A", PriorityLevel.HIGH, 60, _date(3))
        b = _scan(make_scan, "B", PriorityLevel.HIGH, 75, _date(1))

        assert [s.scan_id for s in sort_worklist([a, b])] == ["B", "A"]

    def test_later_date_first_on_equal_level_and_score(self, make_scan):
        x = _scan(make_scan, "X", PriorityLevel.HIGH, 70, _date(1))
        y = _scan(make_scan, "Y", PriorityLevel.HIGH, 70, _date(2))

        assert [s.scan_id for s in sort_worklist([x, y])] == ["Y", "X"]

    def test_stable_for_identical_keys(self, make_scan):
        scans = [
            _scan(make_scan, f"S-{i}", PriorityLevel.MEDIUM, 40, _date(2))
            for i in range(6)
        ]
        assert [s.scan_id for s in sort_worklist(scans)] == [f"S-{i}" for i in range(6)]

    def test_missing_priority_ranks_as_low(self, make_scan):
        none = _scan(make_scan, "none", None, 0, _date(5))
        low = _scan(make_scan, "low", PriorityLevel.LOW, 0, _date(1))
        medium = _scan(make_scan, "medium", PriorityLevel.MEDIUM, 0, _date(1))

        assert priority_rank(none) == priority_rank(low) == 1
        assert [s.scan_id for s in sort_worklist([low, none, medium])] == ["medium", "none", "low"]

    def test_does_not_mutate_input(self, make_scan):
        scans = [
            _scan(make_scan, "A", PriorityLevel.LOW, 0, _date(1)),
            _scan(make_scan, "B", PriorityLevel.URGENT, 90, _date(1)),
        ]
        sort_worklist(scans)
        assert [s.scan_id for s in scans] == ["A", "B"]

    def test_pairwise_order_is_lexicographic_descending(self, make_scan):
        levels = list(PriorityLevel)
        scans = [
            _scan(make_scan, f"S-{i}", levels[i % 4], (i * 37) % 5 * 10, _date(1 + i % 3))
            for i in range(24)
        ]

        ordered = sort_worklist(scans)

        for earlier, later in combinations(ordered, 2):
            assert sort_key(earlier) <= sort_key(later)
