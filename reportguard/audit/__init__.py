"""Append-only audit sink for moderation verdicts and risk analyses."""

from reportguard.audit.moderation_log import ModerationLog, ModerationLogEntry, record_safely

__all__ = ["ModerationLog", "ModerationLogEntry", "record_safely"]
