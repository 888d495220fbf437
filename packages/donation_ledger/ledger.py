# ruff: noqa: I001
"""Ledger persistence: the merge/query primitives every component shares.

Rows live in ``dl_donations`` (see ``db.models.ledger``). Identity is the
surrogate ``id``; ``position`` is display order only, with 0 at the top.
Imports and rollups are inserted as a contiguous block at a configured
insertion point, pushing existing rows down. The new block is *not* merged
into the date order of the rows already there.

Access goes through :func:`ledger_writer`, which serializes writers to the
same database inside one process. Runs commit after each discrete step
(``store.commit()``), so a crash leaves earlier steps in place.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from datetime import date

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from db import Base
from db.client import get_engine, resolve_database_url, session_scope
from db.models.ledger import DlDonation, DlSetting
from .models import DonationRecord, LedgerEntry, PaymentType

_WRITER_LOCKS: dict[str, threading.Lock] = {}
_WRITER_LOCKS_GUARD = threading.Lock()


def _writer_lock(url: str) -> threading.Lock:
    with _WRITER_LOCKS_GUARD:
        return _WRITER_LOCKS.setdefault(url, threading.Lock())


def create_schema(*, database_url: str | None = None) -> None:
    """Create the ledger tables when missing (Alembic mirrors this schema)."""

    Base.metadata.create_all(bind=get_engine(database_url=database_url))


@contextmanager
def ledger_writer(*, database_url: str | None = None) -> Iterator[LedgerStore]:
    """Yield a :class:`LedgerStore` while holding the ledger's writer lock.

    The lock is per database URL and not re-entrant: do not nest writers for
    the same ledger.
    """

    url = resolve_database_url(database_url)
    with _writer_lock(url):
        with session_scope(database_url=url) as session:
            yield LedgerStore(session)


def _to_row(record: DonationRecord, *, position: int, source_file: str | None) -> DlDonation:
    return DlDonation(
        position=position,
        acknowledged=record.acknowledged,
        donation_date=record.donation_date,
        last_name=record.last_name,
        first_name=record.first_name,
        salutation=record.salutation,
        gross=record.gross,
        fee=record.fee,
        net=record.net,
        payment_type=str(record.payment_type),
        payment_source=record.payment_source,
        payment_note=record.payment_note,
        email_address=record.email_address,
        street_address=record.street_address,
        city=record.city,
        state=record.state,
        zip_code=record.zip_code,
        source_file=source_file,
    )


def _to_entry(row: DlDonation) -> LedgerEntry:
    record = DonationRecord(
        acknowledged=bool(row.acknowledged),
        donation_date=row.donation_date,
        last_name=row.last_name or "",
        first_name=row.first_name or "",
        salutation=row.salutation or "",
        gross=row.gross,
        fee=row.fee,
        net=row.net,
        payment_type=PaymentType(row.payment_type),
        payment_source=row.payment_source or "",
        payment_note=row.payment_note or "",
        email_address=row.email_address or "",
        street_address=row.street_address or "",
        city=row.city or "",
        state=row.state or "",
        zip_code=row.zip_code or "",
    )
    return LedgerEntry(id=row.id, position=row.position, record=record)


class LedgerStore:
    """Ledger operations bound to one SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def commit(self) -> None:
        self.session.commit()

    # ---- queries ---------------------------------------------------------

    def count(self) -> int:
        return int(self.session.scalar(select(func.count()).select_from(DlDonation)) or 0)

    def entries(self) -> list[LedgerEntry]:
        rows = self.session.scalars(select(DlDonation).order_by(DlDonation.position))
        return [_to_entry(r) for r in rows]

    def unacknowledged(self) -> list[LedgerEntry]:
        rows = self.session.scalars(
            select(DlDonation)
            .where(DlDonation.acknowledged.is_(False))
            .order_by(DlDonation.position)
        )
        return [_to_entry(r) for r in rows]

    def _of_type_between(
        self, payment_type: PaymentType, start: date, end: date
    ) -> list[LedgerEntry]:
        rows = self.session.scalars(
            select(DlDonation)
            .where(
                (DlDonation.payment_type == str(payment_type))
                & (DlDonation.donation_date >= start)
                & (DlDonation.donation_date <= end)
            )
            .order_by(DlDonation.donation_date, DlDonation.id)
        )
        return [_to_entry(r) for r in rows]

    def recurring_between(self, start: date, end: date) -> list[LedgerEntry]:
        return self._of_type_between(PaymentType.RECURRING, start, end)

    def rollups_between(self, start: date, end: date) -> list[LedgerEntry]:
        return self._of_type_between(PaymentType.ANNUAL_ROLLUP, start, end)

    # ---- mutations -------------------------------------------------------

    def insert_block(
        self,
        records: Sequence[DonationRecord],
        *,
        at: int = 0,
        source_file: str | None = None,
    ) -> list[int]:
        """Insert ``records`` contiguously at position ``at``, in the given order.

        Rows at or below ``at`` move down by ``len(records)``. An insertion
        point past the end appends. Returns the new row ids.
        """

        if not records:
            return []
        at = max(0, min(at, self.count()))
        self.session.execute(
            update(DlDonation)
            .where(DlDonation.position >= at)
            .values(position=DlDonation.position + len(records))
        )
        rows = [
            _to_row(r, position=at + i, source_file=source_file) for i, r in enumerate(records)
        ]
        self.session.add_all(rows)
        self.session.flush()
        return [row.id for row in rows]

    def mark_acknowledged(self, record_id: int) -> bool:
        """Flip ``acknowledged`` to true. Never resets; returns whether it changed."""

        result = self.session.execute(
            update(DlDonation)
            .where((DlDonation.id == record_id) & (DlDonation.acknowledged.is_(False)))
            .values(acknowledged=True)
        )
        return bool(result.rowcount)

    # ---- named settings --------------------------------------------------

    def settings(self) -> dict[str, str]:
        return {s.name: s.value for s in self.session.scalars(select(DlSetting))}

    def get_setting(self, name: str) -> str | None:
        row = self.session.get(DlSetting, name)
        return row.value if row is not None else None

    def set_setting(self, name: str, value: str) -> None:
        self.session.merge(DlSetting(name=name, value=value))
        self.session.flush()

    def set_settings(self, values: Iterable[tuple[str, str]]) -> None:
        for name, value in values:
            self.set_setting(name, value)


__all__ = ["LedgerStore", "create_schema", "ledger_writer"]
