"""Annual rollup of recurring (P2) gifts into one P4 record per donor.

Monthly subscribers are not thanked per payment. Once a year, every P2 row
dated in the tax year (by default the calendar year before today) is grouped
by donor name, and one synthetic P4 row per donor is inserted with the summed
gross/fee/net, the latest gift date, and the latest email on file. Postal
fields are left blank. The acknowledgement engine then thanks each donor once
for the year.

A donor that already has a P4 row dated in the tax year is skipped, so a
repeated run does not double-acknowledge.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal

from .ledger import LedgerStore
from .logging_setup import get_logger
from .models import DonationRecord, PaymentType, RollupResult

_logger = get_logger("donation_ledger.rollup")

DonorKey = tuple[str, str]


def prior_tax_year(today: date | None = None) -> int:
    return (today or date.today()).year - 1


def donor_key(record: DonationRecord) -> DonorKey:
    return (record.last_name.strip().casefold(), record.first_name.strip().casefold())


def summarize(records: list[DonationRecord], *, tax_year: int) -> DonationRecord:
    """Collapse one donor's recurring gifts into a single P4 record."""

    newest_first = sorted(records, key=lambda r: r.donation_date, reverse=True)
    latest = newest_first[0]
    email = next((r.email_address for r in newest_first if r.email_address.strip()), "")
    return DonationRecord(
        acknowledged=False,
        donation_date=latest.donation_date,
        last_name=latest.last_name,
        first_name=latest.first_name,
        salutation="",
        gross=sum((r.gross for r in records), Decimal("0.00")),
        fee=sum((r.fee for r in records), Decimal("0.00")),
        net=sum((r.net for r in records), Decimal("0.00")),
        payment_type=PaymentType.ANNUAL_ROLLUP,
        payment_source=latest.payment_source,
        payment_note=f"{tax_year} recurring gifts ({len(records)})",
        email_address=email,
    )


def generate_annual_rollup(
    store: LedgerStore,
    *,
    tax_year: int,
    at: int = 0,
) -> RollupResult:
    """Insert one P4 record per recurring donor for ``tax_year``."""

    start, end = date(tax_year, 1, 1), date(tax_year, 12, 31)
    result = RollupResult(tax_year=tax_year)

    groups: dict[DonorKey, list[DonationRecord]] = defaultdict(list)
    for entry in store.recurring_between(start, end):
        groups[donor_key(entry.record)].append(entry.record)
    if not groups:
        _logger.info("no recurring gifts dated in %d", tax_year)
        return result

    already = {donor_key(e.record) for e in store.rollups_between(start, end)}
    rollups: list[DonationRecord] = []
    for key, records in groups.items():
        if key in already:
            result.skipped_existing += 1
            continue
        rollups.append(summarize(records, tax_year=tax_year))

    rollups.sort(key=lambda r: r.donation_date, reverse=True)
    store.insert_block(rollups, at=at, source_file=f"rollup:{tax_year}")
    store.commit()
    result.records = rollups

    _logger.info(
        "rollup %d: %d donor(s) summarized, %d already rolled up",
        tax_year,
        len(rollups),
        result.skipped_existing,
    )
    return result


__all__ = ["donor_key", "generate_annual_rollup", "prior_tax_year", "summarize"]
