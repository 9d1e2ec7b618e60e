"""
Structured JSON Lines reports for a sync run.

Every entity the engine could not match, and every update it proposes
or applies, is appended to a file under the run's report directory so
the full picture survives even though API responses only carry bounded
samples.

Two public functions are provided:

``report_error``
    Record a problem with an entity (for example a module whose title
    found no counterpart in the database).

``report_ok``
    Record an event for an entity, such as a proposed or applied update.
    Additional key/value information can be attached via ``extra``.

The ``EVENTS`` dictionary maps event codes to human readable messages.
Codes not present in the dictionary fall back to the code itself.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

EVENTS: Dict[str, str] = {
    "COURSE_NOT_MAPPED": "No database course matches the WordPress course",
    "MODULE_NOT_FOUND": "No database module matches the WordPress module",
    "LESSON_NOT_FOUND": "No database lesson matches the WordPress lesson",
    "UPDATE_PROPOSED": "Field fill proposed (dry run)",
    "UPDATE_APPLIED": "Field fill written to the database",
}

DEFAULT_REPORT_DIR = os.path.join("reports", "sync")
UNMATCHED_LOG = "unmatched.jsonl"
UPDATES_LOG = "updates.jsonl"


def _write_jsonl(path: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline to ``path``."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
        f.write("\n")


def report_error(
    code: str,
    entity: Dict[str, Any],
    exc: Optional[Exception] = None,
    *,
    report_dir: str = DEFAULT_REPORT_DIR,
) -> Dict[str, Any]:
    """Log a problem with ``entity`` to ``unmatched.jsonl``.

    Parameters
    ----------
    code:
        A key identifying the kind of problem; looked up in :data:`EVENTS`.
    entity:
        A mapping describing the entity.  It is copied into the entry.
    exc:
        Optional exception; its string form is stored under ``error``.
    report_dir:
        Directory receiving the report file.
    """
    entry: Dict[str, Any] = {"code": code, "message": EVENTS.get(code, code), **entity}
    if exc is not None:
        entry["error"] = str(exc)
    _write_jsonl(os.path.join(report_dir, UNMATCHED_LOG), entry)
    return entry


def report_ok(
    code: str,
    entity: Dict[str, Any],
    extra: Optional[Dict[str, Any]] = None,
    *,
    report_dir: str = DEFAULT_REPORT_DIR,
) -> Dict[str, Any]:
    """Log an event for ``entity`` to ``updates.jsonl``."""
    entry: Dict[str, Any] = {"code": code, "message": EVENTS.get(code, code), **entity}
    if extra:
        entry.update(extra)
    _write_jsonl(os.path.join(report_dir, UPDATES_LOG), entry)
    return entry
