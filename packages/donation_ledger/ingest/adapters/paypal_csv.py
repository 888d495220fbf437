"""Adapter for PayPal "Activity download" CSV exports.

The export is a 41-column, comma-separated file with a header row. Columns
are addressed by position (the header text varies between PayPal locales)::

    0  Date                    10 From Email Address   31 Address Line 2
    3  Name                    13 Shipping Address     32 Town/City
    4  Type                    30 Address Line 1       33 State/Province
    7  Gross    8 Fee  9 Net                           34 Zip/Postal Code
                                                       38 Note

Only donation-like transaction types are kept (see :data:`DONATION_TYPES`);
everything else (transfers, holds, currency conversions) is dropped silently.

Failure mode
------------
Bytes that are not UTF-8, malformed CSV, a header with the wrong column count,
an empty file, or an unparseable date or amount on a kept row raises
:class:`~donation_ledger.errors.SourceFormatError`.
The orchestrator treats that as a file-level failure and leaves the file in
the intake area.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence

from ...errors import SourceFormatError
from ...models import DonationRecord, PaymentSource, PaymentType
from ...normalize import (
    clean_text,
    is_blank_row,
    join_address,
    pad_zip,
    parse_donation_date,
    split_name,
    to_decimal,
    trim_email,
)

PAYPAL_FIELD_COUNT = 41

DONATION_PAYMENT = "Donation Payment"
SUBSCRIPTION_PAYMENT = "Subscription Payment"
MOBILE_PAYMENT = "Mobile Payment"
MASS_PAYMENT = "Mass Pay Payment"

DONATION_TYPES: frozenset[str] = frozenset(
    {DONATION_PAYMENT, SUBSCRIPTION_PAYMENT, MOBILE_PAYMENT, MASS_PAYMENT}
)

COL_DATE = 0
COL_NAME = 3
COL_TYPE = 4
COL_GROSS = 7
COL_FEE = 8
COL_NET = 9
COL_FROM_EMAIL = 10
COL_SHIPPING_NAME = 13
COL_ADDRESS_1 = 30
COL_ADDRESS_2 = 31
COL_CITY = 32
COL_STATE = 33
COL_ZIP = 34
COL_NOTE = 38


def payment_type_for(transaction_type: str, note: str) -> PaymentType:
    if transaction_type == MASS_PAYMENT:
        return PaymentType.DONOR_ADVISED_FUND
    if transaction_type == SUBSCRIPTION_PAYMENT:
        return PaymentType.RECURRING
    if transaction_type == DONATION_PAYMENT and note:
        return PaymentType.ONE_TIME_WITH_NOTE
    return PaymentType.ONE_TIME


def _cell(row: Sequence[str], idx: int) -> str:
    return row[idx] if idx < len(row) else ""


def to_record(row: Sequence[str]) -> DonationRecord | None:
    """Map one export row to a canonical record, or ``None`` when not a donation."""

    transaction_type = clean_text(_cell(row, COL_TYPE))
    if transaction_type not in DONATION_TYPES:
        return None

    note = clean_text(_cell(row, COL_NOTE))
    first_name, last_name = split_name(
        _cell(row, COL_SHIPPING_NAME),
        _cell(row, COL_NAME),
        whole_surname=transaction_type == MASS_PAYMENT,
    )

    return DonationRecord(
        acknowledged=False,
        donation_date=parse_donation_date(_cell(row, COL_DATE)),
        last_name=last_name,
        first_name=first_name,
        salutation="",
        gross=to_decimal(_cell(row, COL_GROSS)),
        fee=to_decimal(_cell(row, COL_FEE)),
        net=to_decimal(_cell(row, COL_NET)),
        payment_type=payment_type_for(transaction_type, note),
        payment_source=PaymentSource.PAYPAL.value,
        payment_note=note,
        email_address=trim_email(_cell(row, COL_FROM_EMAIL)),
        street_address=join_address(_cell(row, COL_ADDRESS_1), _cell(row, COL_ADDRESS_2)),
        city=clean_text(_cell(row, COL_CITY)),
        state=clean_text(_cell(row, COL_STATE)),
        zip_code=pad_zip(_cell(row, COL_ZIP)),
    )


def _numbered_rows(data: bytes, file_name: str) -> list[tuple[int, list[str]]]:
    """Decode and split the export into ``(line_no, row)`` pairs, blanks dropped.

    ``line_no`` is the 1-based record number in the file, counted before blank
    rows are removed.
    """

    try:
        text = data.decode("utf-8-sig")
        return [
            (line_no, row)
            for line_no, row in enumerate(csv.reader(io.StringIO(text, newline="")), start=1)
            if not is_blank_row(row)
        ]
    except UnicodeDecodeError as exc:
        raise SourceFormatError(f"{file_name}: not UTF-8 text: {exc}") from exc
    except csv.Error as exc:
        raise SourceFormatError(f"{file_name}: malformed CSV: {exc}") from exc


def read_paypal_export(
    data: bytes, *, file_name: str = "<paypal>"
) -> tuple[int, list[DonationRecord]]:
    """Parse a PayPal export and return ``(total_rows_read, records)``.

    ``total_rows_read`` counts non-blank data rows (header excluded), whether
    or not they turned out to be donations.
    """

    rows = _numbered_rows(data, file_name)
    if not rows:
        raise SourceFormatError(f"{file_name}: file is empty")

    (_, header), body = rows[0], rows[1:]
    if len(header) != PAYPAL_FIELD_COUNT:
        raise SourceFormatError(
            f"{file_name}: expected {PAYPAL_FIELD_COUNT} fields, found {len(header)}"
        )

    records: list[DonationRecord] = []
    for line_no, row in body:
        try:
            record = to_record(row)
        except ValueError as exc:
            raise SourceFormatError(f"{file_name}: row {line_no}: {exc}") from exc
        if record is not None:
            records.append(record)

    return len(body), records


__all__ = [
    "DONATION_TYPES",
    "PAYPAL_FIELD_COUNT",
    "payment_type_for",
    "read_paypal_export",
    "to_record",
]
