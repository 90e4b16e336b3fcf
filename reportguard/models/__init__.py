"""Typed models shared by both engines."""

from reportguard.models.report import Location, Report, ReportStatus, normalize_timestamp

__all__ = ["Location", "Report", "ReportStatus", "normalize_timestamp"]
