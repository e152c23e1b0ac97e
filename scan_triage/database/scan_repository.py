"""
In-memory scan repository.

Scans live for the lifetime of the process; the only permitted write is a
status update, stamped with a fresh review timestamp. Nothing is persisted.
"""

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Protocol

from scan_triage.config.logging_config import get_logger
from scan_triage.exceptions import InvalidInputError, ScanNotFoundError
from scan_triage.models.models import Scan, ScanStatus

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScanRepository(Protocol):
    """Read/update access to the scan worklist."""

    def get_all(self) -> list[Scan]: ...

    def get_by_id(self, scan_id: str) -> Scan: ...

    def update_status(self, scan_id: str, new_status: str | None) -> Scan: ...


class InMemoryScanRepository:
    """
    Scan repository backed by a dict keyed by scan id.

    Insertion order is kept so ``get_all`` returns scans in load order.
    Duplicate ids at construction keep the first record.
    """

    def __init__(
        self,
        scans: Iterable[Scan] = (),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._scans: dict[str, Scan] = {}
        self._clock = clock

        for scan in scans:
            if scan.scan_id in self._scans:
                logger.warning("Duplicate scan id ignored", scan_id=scan.scan_id)
                continue
            self._scans[scan.scan_id] = scan

        logger.info("Scan repository initialized", scan_count=len(self._scans))

    def get_all(self) -> list[Scan]:
        """Return every scan, unsorted."""
        return list(self._scans.values())

    def get_by_id(self, scan_id: str) -> Scan:
        """
        Look up a scan.

        Raises:
            ScanNotFoundError: If no scan has this id.
        """
        try:
            return self._scans[scan_id]
        except KeyError:
            raise ScanNotFoundError(scan_id) from None

    def update_status(self, scan_id: str, new_status: str | None) -> Scan:
        """
        Change a scan's review status in place.

        Raises:
            ScanNotFoundError: If no scan has this id.
            InvalidInputError: If the status is missing, blank or unknown.
        """
        scan = self.get_by_id(scan_id)

        if new_status is None or not str(new_status).strip():
            raise InvalidInputError("Status is required", field="status")

        status = ScanStatus.from_label(str(new_status))
        if status is None:
            raise InvalidInputError(f"Invalid status: {new_status}", field="status")

        previous = scan.status
        scan.status = status
        scan.review_timestamp = self._clock()

        logger.info(
            "Scan status updated",
            scan_id=scan_id,
            previous_status=previous.value,
            new_status=status.value,
        )
        return scan

    def __len__(self) -> int:
        return len(self._scans)
