"""Report model and boundary normalization.

Reports arrive from the document store as loosely shaped dicts: camelCase
keys, optional fields, and timestamps in several representations. Everything
is mapped here onto one typed shape with a single timestamp type
(timezone-aware :class:`datetime`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

from reportguard.errors import ReportValidationError

# Epoch values above this are taken to be milliseconds
_EPOCH_MS_CUTOFF = 100_000_000_000


class ReportStatus(Enum):
    """Lifecycle states of a report."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"
    FLAGGED_FALSE = "flagged_false"


@dataclass
class Location:
    """Where an incident was reported."""

    building: str = ""
    room: str = ""

    def same_place(self, other: Optional["Location"]) -> bool:
        return (
            other is not None
            and self.building == other.building
            and self.room == other.room
        )


@dataclass
class Report:
    """An incident report as seen by the engines."""

    id: str = ""
    title: str = ""
    description: str = ""
    category: str = ""
    priority: str = ""
    status: ReportStatus = ReportStatus.PENDING
    user_id: str = ""
    anonymous: bool = False
    location: Optional[Location] = None
    media: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    ai_analyzed: bool = False
    ai_analysis: dict[str, Any] = field(default_factory=dict)
    is_false_positive: bool = False
    false_positive_reason: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Report":
        """Build a report from a document-store dict (camelCase or snake_case)."""
        location = data.get("location")
        if isinstance(location, Mapping):
            location = Location(
                building=str(location.get("building") or ""),
                room=str(location.get("room") or ""),
            )
        elif not isinstance(location, Location):
            location = None

        created = _first(data, "createdAt", "created_at")
        status = data.get("status") or ReportStatus.PENDING.value
        try:
            status = ReportStatus(status)
        except ValueError:
            raise ReportValidationError(f"Unknown report status: {status!r}")

        return cls(
            id=str(data.get("id") or ""),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            category=str(data.get("category") or ""),
            priority=str(data.get("priority") or ""),
            status=status,
            user_id=str(_first(data, "userId", "authorId", "user_id") or ""),
            anonymous=bool(data.get("anonymous", False)),
            location=location,
            media=list(_first(data, "media", "images") or []),
            created_at=normalize_timestamp(created) if created is not None else None,
            ai_analyzed=bool(_first(data, "aiAnalyzed", "ai_analyzed") or False),
            ai_analysis=dict(_first(data, "aiAnalysis", "ai_analysis") or {}),
            is_false_positive=bool(
                _first(data, "isFalsePositive", "is_false_positive") or False
            ),
            false_positive_reason=str(
                _first(data, "falsePositiveReason", "false_positive_reason") or ""
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Render the report in the document store's camelCase shape."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "priority": self.priority,
            "status": self.status.value,
            "userId": self.user_id,
            "anonymous": self.anonymous,
            "location": (
                {"building": self.location.building, "room": self.location.room}
                if self.location
                else None
            ),
            "media": list(self.media),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "aiAnalyzed": self.ai_analyzed,
            "aiAnalysis": dict(self.ai_analysis),
            "isFalsePositive": self.is_false_positive,
            "falsePositiveReason": self.false_positive_reason,
        }


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def normalize_timestamp(value: Any) -> datetime:
    """Coerce any supported timestamp representation to an aware datetime.

    Accepts datetimes (naive ones are taken as UTC), epoch seconds or
    milliseconds, ISO-8601 strings, ``{"seconds", "nanoseconds"}`` mappings
    (with or without a leading underscore) and objects exposing
    ``to_datetime()``.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    for attr in ("to_datetime", "ToDatetime"):
        converter = getattr(value, attr, None)
        if callable(converter):
            return normalize_timestamp(converter())

    if isinstance(value, bool):
        raise ReportValidationError(f"Unsupported timestamp: {value!r}")

    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) > _EPOCH_MS_CUTOFF else value
        return _from_epoch(seconds, value)

    if isinstance(value, Mapping):
        seconds = _first(value, "seconds", "_seconds")
        if seconds is None:
            raise ReportValidationError(f"Unsupported timestamp: {value!r}")
        nanos = _first(value, "nanoseconds", "_nanoseconds") or 0
        try:
            seconds = int(seconds) + int(nanos) / 1e9
        except (TypeError, ValueError, OverflowError):
            raise ReportValidationError(f"Unsupported timestamp: {value!r}")
        return _from_epoch(seconds, value)

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ReportValidationError(f"Unparseable timestamp: {value!r}")
        return normalize_timestamp(parsed)

    raise ReportValidationError(f"Unsupported timestamp: {value!r}")


def _from_epoch(seconds: float, original: Any) -> datetime:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        raise ReportValidationError(f"Timestamp out of range: {original!r}")
