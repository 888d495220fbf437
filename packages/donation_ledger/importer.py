"""Import orchestrator: pending intake files -> canonical records -> ledger.

For each file in the intake area (case-insensitive name order):

1. classify it by name prefix and run the matching adapter;
2. on success, sort the file's records by date, newest first, insert them as
   one block at the configured insertion point and commit, then move the
   file to the processed area;
3. on failure, roll back anything uncommitted for that file, leave it where it
   is and record the error.

Moving a file out of the intake area is the only de-duplication. The move
happens after the commit, so a file is imported at least once: if the move
fails its rows stay in the ledger and the file is read again next run.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from .config import ImportConfig
from .errors import ConfigurationError, SourceFormatError
from .ingest import classify_source, load_records
from .ledger import LedgerStore
from .logging_setup import get_logger
from .models import DonationRecord, ImportBatchResult, ImportFileResult, SourceKind
from .storage import FolderStore

_logger = get_logger("donation_ledger.importer")


def pending_file_names(pending: FolderStore) -> list[str]:
    """Intake file names sorted case-insensitively (ties broken by exact name)."""

    return sorted(pending.list_files(), key=lambda n: (n.lower(), n))


def order_for_insert(records: list[DonationRecord]) -> list[DonationRecord]:
    """Newest first; rows sharing a date keep their file order."""

    return sorted(records, key=lambda r: r.donation_date, reverse=True)


def _folders(config: ImportConfig) -> tuple[FolderStore, FolderStore]:
    pending = FolderStore(config.pending_folder)
    imported = FolderStore(config.imported_folder)
    for label, store in (("pending_folder", pending), ("imported_folder", imported)):
        if not store.root.is_dir():
            raise ConfigurationError(f"{label} is not an accessible folder: {store.root}")
    return pending, imported


def import_file(
    store: LedgerStore,
    config: ImportConfig,
    name: str,
    *,
    pending: FolderStore,
    imported: FolderStore,
) -> ImportFileResult:
    kind = classify_source(name)
    try:
        data = b"" if kind is SourceKind.UNSUPPORTED else pending.read_bytes(name)
        total, records = load_records(
            kind,
            data,
            file_name=name,
            check_ledger_data_range=config.check_ledger_data_range,
            check_ledger_first_data_row=config.check_ledger_first_data_row,
        )
    except (SourceFormatError, OSError) as exc:
        _logger.warning("import of %s failed: %s", name, exc)
        return ImportFileResult(file_name=name, kind=kind, succeeded=False, error=str(exc))

    ordered = order_for_insert(records)
    try:
        store.insert_block(ordered, at=config.first_data_row, source_file=name)
        store.commit()
    except SQLAlchemyError as exc:
        store.session.rollback()
        _logger.warning("could not store records from %s: %s", name, exc)
        return ImportFileResult(
            file_name=name,
            kind=kind,
            succeeded=False,
            total_rows_read=total,
            error=f"{name}: could not store records: {exc}",
        )

    try:
        pending.move_to(name, imported)
    except OSError as exc:
        # Rows are committed; the file stays in intake and is read again next run.
        _logger.warning("could not move %s out of the intake area: %s", name, exc)
        return ImportFileResult(
            file_name=name,
            kind=kind,
            succeeded=False,
            total_rows_read=total,
            records_inserted=len(ordered),
            error=f"{name}: records stored but file could not be moved: {exc}",
        )

    _logger.info("imported %s: %d rows read, %d records inserted", name, total, len(ordered))
    return ImportFileResult(
        file_name=name,
        kind=kind,
        succeeded=True,
        total_rows_read=total,
        records_inserted=len(ordered),
        payment_notes=[r for r in ordered if r.payment_note],
    )


def import_pending(store: LedgerStore, config: ImportConfig) -> ImportBatchResult:
    """Import every pending file; per-file failures never abort the run."""

    pending, imported = _folders(config)
    names = pending_file_names(pending)
    result = ImportBatchResult()
    if not names:
        _logger.info("no files pending import in %s", pending.root)
        return result

    _logger.info("importing %d pending file(s) from %s", len(names), pending.root)
    for name in names:
        result.files.append(
            import_file(store, config, name, pending=pending, imported=imported)
        )
    failed = sum(1 for f in result.files if not f.succeeded)
    _logger.info(
        "import finished: %d file(s), %d record(s) inserted, %d failure(s)",
        len(result.files),
        result.records_inserted,
        failed,
    )
    return result


__all__ = ["import_file", "import_pending", "order_for_insert", "pending_file_names"]
