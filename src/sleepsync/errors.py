"""
Error taxonomy for a reconciliation run.

  ValidationError       bad week number / malformed date / bad menu choice.
                        Fatal to the invocation, never retried.
  ConnectivityError     upstream auth or network failure (pre-flight check or
                        telemetry fetch). Fatal, raised before any write.
  PerRecordExportError  one record failed to save or to become a calendar
                        event. Caught inside the export loops and counted.
"""


class SleepSyncError(Exception):
    """Base class for all sleepsync errors."""


# ── Validation ────────────────────────────────────────────────────────────────

class ValidationError(SleepSyncError, ValueError):
    """Raised when user input cannot be turned into a night range."""


class InvalidWeekNumber(ValidationError):
    """Raised when a week number is outside 1..52."""


class InvalidDateFormat(ValidationError):
    """Raised when a compact DD-MM-YY date string cannot be parsed."""


class InvalidSelection(ValidationError):
    """Raised when the selection mode is neither a date nor a week."""


# ── Connectivity ──────────────────────────────────────────────────────────────

class ConnectivityError(SleepSyncError):
    """Raised when an upstream service cannot be reached or rejects our credentials."""

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}")
        self.service = service
        self.message = message


# ── Per-record ────────────────────────────────────────────────────────────────

class PerRecordExportError(SleepSyncError):
    """A single record failed to export. Never aborts a batch."""

    def __init__(self, identifier: str, message: str):
        super().__init__(f"{identifier}: {message}")
        self.identifier = identifier
        self.message = message
