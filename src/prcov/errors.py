"""Centralised exception hierarchy for prcov."""

from __future__ import annotations


class PrcovError(Exception):
    """Base class for all custom prcov exceptions."""


class CoverageReportError(PrcovError):
    """Base class for errors related to coverage report handling."""


class CoverageReportNotFoundError(CoverageReportError):
    """Coverage report could not be located on disk."""


class InvalidCoverageReportError(CoverageReportError):
    """Coverage report was found but does not contain a valid report."""


class DiffSourceError(PrcovError):
    """The diff could not be obtained from its source (file, stdin or git)."""


class ConfigError(PrcovError):
    """Project configuration (``[tool.prcov]``) is invalid."""


class PublishError(PrcovError):
    """The review client failed while publishing comments."""


class RangeInvariantError(AssertionError):
    """Line ranges handed to the intersection are unsorted, overlapping or malformed."""


__all__ = [
    "ConfigError",
    "CoverageReportError",
    "CoverageReportNotFoundError",
    "DiffSourceError",
    "InvalidCoverageReportError",
    "PrcovError",
    "PublishError",
    "RangeInvariantError",
]
