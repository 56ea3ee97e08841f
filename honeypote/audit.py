"""Append-only JSON audit log.

Every notable event is printed as JSON and appended to LOG_FILE, which holds
a single JSON array. The array is rewritten through a temp file and
`os.replace`, so an interrupted write leaves the previous file intact. A file
that no longer parses is moved aside, never overwritten. Write failures are
reported through logging and never reach the caller.
"""

import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from typing import Optional

from honeypote import config

logger = logging.getLogger(__name__)

_write_lock = threading.Lock()


class CorruptAuditLog(ValueError):
    """The audit file exists but does not hold a JSON array."""


def log_event(event: str, log_file: Optional[str] = None, **fields) -> dict:
    """Record `{event, timestamp, **fields}` on stdout and in the audit file."""
    record = {
        "event": event,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **fields,
    }
    print(json.dumps(record, indent=2, default=str), flush=True)
    _append(record, log_file or config.LOG_FILE)
    return record


def read_events(log_file: Optional[str] = None) -> list:
    """Load every record in the audit file ([] if missing or unreadable)."""
    path = log_file or config.LOG_FILE
    try:
        return _load(path)
    except (OSError, CorruptAuditLog) as exc:
        logger.warning(f"Unreadable audit log {path}: {exc}")
        return []


def _load(path: str) -> list:
    if not os.path.exists(path):
        return []
    with open(path, "r", encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except ValueError as exc:
            raise CorruptAuditLog(str(exc)) from exc
    if not isinstance(data, list):
        raise CorruptAuditLog(f"expected a JSON array, got {type(data).__name__}")
    return data


def _quarantine(path: str, reason: Exception) -> str:
    """Move an unparsable audit file out of the way and return its new name."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
    target = f"{path}.corrupt-{stamp}"
    os.replace(path, target)
    logger.error(json.dumps({
        "event": "json_write_error",
        "error": f"corrupt audit log: {reason}",
        "movedTo": target,
    }))
    return target


def _write_atomic(records: list, path: str) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(
        dir=directory, prefix=os.path.basename(path) + ".", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(records, fh, indent=2, default=str)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def _append(record: dict, path: str) -> None:
    try:
        with _write_lock:
            try:
                records = _load(path)
            except CorruptAuditLog as exc:
                _quarantine(path, exc)
                records = []
            records.append(record)
            _write_atomic(records, path)
    except Exception as exc:
        logger.error(json.dumps({"event": "json_write_error", "error": str(exc)}))
