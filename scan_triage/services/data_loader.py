"""
Seed data loader.

Reads the JSON seed files at startup and normalizes legacy record shapes at
the load boundary, so the rest of the service only ever sees the canonical
Scan schema.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from scan_triage.config.logging_config import get_logger
from scan_triage.exceptions import ConfigLoadError
from scan_triage.models.models import Priority, Scan

logger = get_logger(__name__)

# Field names used by earlier dashboard builds
LEGACY_FIELD_NAMES: dict[str, str] = {
    "assignedRadiologist": "consultant",
    "radiologistNotes": "notes",
}


def read_json(path: Path) -> Any:
    """
    Read and parse a JSON file.

    Raises:
        ConfigLoadError: If the file is missing, unreadable or not valid JSON.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ConfigLoadError(str(path), "file not found") from e
    except OSError as e:
        raise ConfigLoadError(str(path), str(e)) from e
    except json.JSONDecodeError as e:
        raise ConfigLoadError(str(path), f"invalid JSON at line {e.lineno}: {e.msg}") from e
    except UnicodeDecodeError as e:
        raise ConfigLoadError(str(path), f"invalid UTF-8 at byte {e.start}") from e


def normalize_legacy_record(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Map an older scan record onto the canonical schema.

    - Renamed fields are moved to their current names.
    - A bare-string ``priority`` (e.g. ``"Urgent"``), or a priority object
      that does not validate, is dropped so that enrichment recomputes a
      structured priority from the rule table.
    """
    record = dict(raw)

    for old_name, new_name in LEGACY_FIELD_NAMES.items():
        if old_name in record:
            value = record.pop(old_name)
            if record.get(new_name) in (None, ""):
                record[new_name] = value

    priority = record.get("priority")
    if priority is None:
        return record

    if not isinstance(priority, dict):
        logger.warning(
            "Discarding legacy priority value",
            scan_id=record.get("scanId"),
            legacy_priority=priority,
        )
        record.pop("priority")
        return record

    try:
        record["priority"] = Priority.model_validate(priority)
    except ValidationError as e:
        logger.warning(
            "Discarding invalid priority object",
            scan_id=record.get("scanId"),
            errors=e.error_count(),
        )
        record.pop("priority")

    return record


def parse_scans(payload: Any, source: str = "<memory>") -> list[Scan]:
    """
    Validate a decoded seed payload into Scan records.

    Individual records that fail validation are logged and skipped.

    Raises:
        ConfigLoadError: If the payload is not a list of records.
    """
    if not isinstance(payload, list):
        raise ConfigLoadError(source, f"expected a list of scans, got {type(payload).__name__}")

    scans: list[Scan] = []
    for index, raw in enumerate(payload):
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object scan record", index=index, source=source)
            continue
        try:
            scans.append(Scan.model_validate(normalize_legacy_record(raw)))
        except ValidationError as e:
            logger.warning(
                "Skipping invalid scan record",
                index=index,
                scan_id=raw.get("scanId"),
                errors=e.error_count(),
                detail=str(e),
            )
    return scans


def load_scans(path: Path) -> list[Scan]:
    """
    Load scan records from a seed file.

    Unreadable or malformed files are logged and yield an empty list.
    """
    try:
        scans = parse_scans(read_json(path), source=str(path))
    except ConfigLoadError as e:
        logger.error("Failed to load scans", path=e.path, reason=e.reason)
        return []

    logger.info("Scans loaded", path=str(path), count=len(scans))
    return scans
