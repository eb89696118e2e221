"""csvrelay exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each pipeline stage raises a specific error type for debuggability.
"""

from __future__ import annotations


class CsvRelayError(Exception):
    """Base exception for all csvrelay failures."""


class CsvRelayConfigError(CsvRelayError):
    """Raised for invalid runtime configuration."""


class CsvRelayDependencyError(CsvRelayError):
    """Raised when a runtime dependency is missing."""


class CsvRelayEventError(CsvRelayError):
    """Raised for malformed or unsupported trigger events."""


class CsvRelayIngestError(CsvRelayError):
    """Raised for object fetch and CSV parsing failures."""


class CsvRelayQueueError(CsvRelayError):
    """Raised when the queue rejects a send or delete call."""


class CsvRelayParameterError(CsvRelayError):
    """Raised when parameter store lookups fail."""


class CsvRelayDatabaseError(CsvRelayError):
    """Raised for upsert and transaction failures."""
