"""Ingest utilities shared by the import orchestrator and the CLI.

Intake files are classified by file-name prefix (case-insensitive) and routed
to the matching adapter. Unknown prefixes are classified ``Unsupported``;
:func:`load_records` raises :class:`~donation_ledger.errors.UnsupportedSourceError`
for them so the orchestrator can report the file without moving it.
"""

from __future__ import annotations

from ..errors import UnsupportedSourceError
from ..models import DonationRecord, SourceKind
from .adapters.check_ledger_xlsx import DEFAULT_DATA_RANGE, read_check_ledger
from .adapters.paypal_csv import read_paypal_export

PAYPAL_FILE_PREFIX = "paypal"
CHECK_LEDGER_FILE_PREFIX = "checks"


def classify_source(file_name: str) -> SourceKind:
    name = file_name.lower()
    if name.startswith(PAYPAL_FILE_PREFIX):
        return SourceKind.PAYPAL_EXPORT
    if name.startswith(CHECK_LEDGER_FILE_PREFIX):
        return SourceKind.CHECK_LEDGER
    return SourceKind.UNSUPPORTED


def load_records(
    kind: SourceKind,
    data: bytes,
    *,
    file_name: str,
    check_ledger_data_range: str = DEFAULT_DATA_RANGE,
    check_ledger_first_data_row: int = 1,
) -> tuple[int, list[DonationRecord]]:
    """Dispatch ``data`` to the adapter for ``kind``; returns ``(rows_read, records)``."""

    if kind is SourceKind.PAYPAL_EXPORT:
        return read_paypal_export(data, file_name=file_name)
    if kind is SourceKind.CHECK_LEDGER:
        return read_check_ledger(
            data,
            file_name=file_name,
            data_range=check_ledger_data_range,
            first_data_row=check_ledger_first_data_row,
        )
    raise UnsupportedSourceError(
        f"{file_name}: unsupported file; expected a name starting with "
        f"{PAYPAL_FILE_PREFIX!r} or {CHECK_LEDGER_FILE_PREFIX!r}"
    )


__all__ = [
    "CHECK_LEDGER_FILE_PREFIX",
    "PAYPAL_FILE_PREFIX",
    "classify_source",
    "load_records",
]
