"""Append-only moderation log.

Every moderation verdict and risk analysis is written once as a line of
JSON in a daily file under ``~/.reportguard/moderation_logs/``. Entries are
never rewritten. Write failures must not block a verdict, so callers go
through :func:`record_safely`.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 300

_CSV_COLUMNS = [
    "id", "timestamp", "kind", "action", "violation_type", "confidence",
    "user_id", "post_id", "method", "message", "content_preview",
]


@dataclass
class ModerationLogEntry:
    """A single immutable log record."""

    id: str
    timestamp: str
    kind: str  # "moderation" | "risk"
    action: str  # "approved" | "rejected" | "blocked" | "analyzed" | "auto_flagged"
    violation_type: Optional[str] = None
    confidence: float = 0
    content_preview: str = ""
    user_id: Optional[str] = None
    post_id: Optional[str] = None
    method: str = ""
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)


class ModerationLog:
    """File-based JSONL moderation log."""

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        self._base_dir = Path(base_dir) if base_dir else Path.home() / ".reportguard" / "moderation_logs"

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _log_file_for_date(self, dt: datetime) -> Path:
        return self._base_dir / f"{dt.strftime('%Y-%m-%d')}.jsonl"

    def _read_all_entries(self) -> list[ModerationLogEntry]:
        entries: list[ModerationLogEntry] = []
        if not self._base_dir.is_dir():
            return entries
        for path in sorted(self._base_dir.glob("*.jsonl")):
            for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
                if not line.strip():
                    continue
                try:
                    entries.append(ModerationLogEntry(**json.loads(line)))
                except (json.JSONDecodeError, TypeError):
                    logger.warning("skipping unreadable log line %s:%d", path.name, lineno)
        return entries

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record(
        self,
        *,
        kind: str,
        action: str,
        violation_type: Optional[str] = None,
        confidence: float = 0,
        content: str = "",
        user_id: Optional[str] = None,
        post_id: Optional[str] = None,
        method: str = "",
        message: str = "",
        details: Optional[dict[str, Any]] = None,
    ) -> ModerationLogEntry:
        """Append one entry and return it. Raises ``OSError`` on write failure."""
        now = datetime.now(timezone.utc)
        entry = ModerationLogEntry(
            id=uuid.uuid4().hex[:16],
            timestamp=now.isoformat(),
            kind=kind,
            action=action,
            violation_type=violation_type,
            confidence=confidence,
            content_preview=(content or "")[:PREVIEW_LENGTH],
            user_id=user_id,
            post_id=post_id,
            method=method,
            message=message,
            details=details or {},
        )
        self._base_dir.mkdir(parents=True, exist_ok=True)
        with self._log_file_for_date(now).open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(asdict(entry)) + "\n")
        return entry

    def get_entries(
        self,
        *,
        kind: Optional[str] = None,
        action: Optional[str] = None,
        violation_type: Optional[str] = None,
        user_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = 200,
    ) -> list[ModerationLogEntry]:
        """Return filtered entries, newest first."""
        entries = self._read_all_entries()

        if kind:
            entries = [e for e in entries if e.kind == kind]
        if action:
            entries = [e for e in entries if e.action == action]
        if violation_type:
            entries = [e for e in entries if e.violation_type == violation_type]
        if user_id:
            entries = [e for e in entries if e.user_id == user_id]
        if start_date:
            entries = [e for e in entries if e.timestamp >= start_date]
        if end_date:
            entries = [e for e in entries if e.timestamp <= end_date]

        # append order breaks timestamp ties
        entries.reverse()
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries[:limit]

    def stats(self) -> dict[str, Any]:
        """Counts by action and by violation type."""
        entries = self._read_all_entries()
        by_action: dict[str, int] = {}
        by_violation: dict[str, int] = {}
        for e in entries:
            by_action[e.action] = by_action.get(e.action, 0) + 1
            if e.violation_type:
                by_violation[e.violation_type] = by_violation.get(e.violation_type, 0) + 1
        return {"total": len(entries), "by_action": by_action, "by_violation_type": by_violation}

    def export(self, fmt: str = "json", **filters: Any) -> str:
        """Export entries as ``json`` or ``csv``."""
        filters.setdefault("limit", 10000)
        entries = self.get_entries(**filters)
        if fmt == "csv":
            buf = io.StringIO()
            writer = csv.DictWriter(buf, fieldnames=_CSV_COLUMNS, extrasaction="ignore")
            writer.writeheader()
            for e in entries:
                writer.writerow(asdict(e))
            return buf.getvalue()
        if fmt != "json":
            raise ValueError(f"Unsupported export format: {fmt}")
        return json.dumps([asdict(e) for e in entries], indent=2)


def record_safely(log: Optional[ModerationLog], **kwargs: Any) -> Optional[ModerationLogEntry]:
    """Write to *log*, logging and swallowing write failures."""
    if log is None:
        return None
    try:
        return log.record(**kwargs)
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("failed to write moderation log entry: %s", exc)
        return None
