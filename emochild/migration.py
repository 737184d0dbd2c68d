"""Normalise persisted log records to the current shape.

Logs written before display colours existed have no `text_color`; they get
the default "white". `quick_emotion` is optional by design and is left
absent. Running the migration on already-migrated records changes nothing.
"""

from typing import Any

from emochild.models import DEFAULT_TEXT_COLOR


def migrate_log(raw: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of one raw log record with missing fields filled."""
    record = dict(raw)
    if not record.get("text_color"):
        record["text_color"] = DEFAULT_TEXT_COLOR
    return record


def migrate_logs(raw_logs: list[Any]) -> list[Any]:
    """Migrate every dict in a raw log list. Non-dict entries pass through for validation to reject."""
    return [migrate_log(r) if isinstance(r, dict) else r for r in raw_logs]
