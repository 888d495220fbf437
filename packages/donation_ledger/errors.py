"""Exception hierarchy for ``donation_ledger``.

- ``ConfigurationError`` is fatal: raised before any ledger mutation and
  propagated to the caller.
- ``SourceFormatError`` / ``UnsupportedSourceError`` are file-level: the
  import orchestrator records them per file and leaves the file in place.
- ``AcknowledgementError`` is record-level: the engine records it against the
  row and moves on to the next record.
"""

from __future__ import annotations


class DonationLedgerError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(DonationLedgerError):
    def __init__(self, message: str, *, missing: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.missing = missing


class SourceFormatError(DonationLedgerError):
    """An intake file cannot be normalized (column count, data marker, values)."""


class UnsupportedSourceError(SourceFormatError):
    """An intake file whose name matches no known source prefix."""


class AcknowledgementError(DonationLedgerError):
    """Rendering or transmitting one acknowledgement failed."""

    def __init__(self, record_id: int, detail: str) -> None:
        super().__init__(f"row {record_id}: {detail}")
        self.record_id = record_id
        self.detail = detail


__all__ = [
    "AcknowledgementError",
    "ConfigurationError",
    "DonationLedgerError",
    "SourceFormatError",
    "UnsupportedSourceError",
]
