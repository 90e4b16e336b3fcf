"""Exception types raised by reportguard."""

from __future__ import annotations


class ReportGuardError(Exception):
    """Base class for reportguard errors."""


class ReportValidationError(ReportGuardError, ValueError):
    """Input rejected before either engine runs (client-facing)."""


class ClassifierError(ReportGuardError):
    """A remote classifier call failed or returned an unusable payload."""


class ConfigError(ReportGuardError):
    """Configuration file could not be parsed."""
