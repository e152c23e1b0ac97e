"""Custom exceptions for the scan triage service."""


class ScanTriageError(Exception):
    """Base exception for all scan triage errors."""
    pass


class ScanNotFoundError(ScanTriageError):
    """No scan with the requested identifier exists."""

    def __init__(self, scan_id: str):
        self.scan_id = scan_id
        super().__init__(f"Scan not found: {scan_id}")


class InvalidInputError(ScanTriageError):
    """A request carried a missing or unusable value."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class ConfigLoadError(ScanTriageError):
    """Seed data could not be read or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load {path}: {reason}")
