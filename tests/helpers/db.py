"""DB helpers for tests: bootstrap a temporary SQLite ledger and seed it."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from donation_ledger.ledger import create_schema, ledger_writer
from donation_ledger.models import DonationRecord, LedgerEntry


def bootstrap_sqlite_db(db_file: Path, *, set_default_env: bool = False) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    create_schema(database_url=url)
    if set_default_env:
        os.environ.setdefault("DATABASE_URL", url)
    return url


def seed_settings(*, database_url: str, values: Mapping[str, object]) -> None:
    with ledger_writer(database_url=database_url) as store:
        store.set_settings((name, str(value)) for name, value in values.items())


def seed_records(
    *,
    database_url: str,
    records: Iterable[DonationRecord],
    source_file: str = "seed",
) -> list[int]:
    with ledger_writer(database_url=database_url) as store:
        ids = store.insert_block(list(records), at=0, source_file=source_file)
    return ids


def ledger_entries(*, database_url: str) -> list[LedgerEntry]:
    with ledger_writer(database_url=database_url) as store:
        return store.entries()
