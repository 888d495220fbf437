"""Adapter for the manually maintained check/EFT/IRA ledger workbook.

The workbook mirrors the donation ledger's own layout: a named range (default
``donation_data``) marks the data region, and data starts at a configured
1-based sheet row (anything above it is header). Columns map 1:1 onto
:data:`~donation_ledger.models.CANONICAL_FIELDS`, starting at the first
column of the named range; ``payment_type`` and ``payment_source`` are
already spelled out as text.

Only date decoding and zip padding are applied; every other cell is taken
as typed. A missing named range, an unknown payment type, or an ``P4`` row
(annual rollups are never imported) raises
:class:`~donation_ledger.errors.SourceFormatError`.
"""

from __future__ import annotations

import io
from collections.abc import Sequence
from typing import Any

import openpyxl
from openpyxl.utils.cell import range_boundaries

from ...errors import SourceFormatError
from ...models import CANONICAL_FIELDS, DonationRecord, PaymentType
from ...normalize import clean_text, is_blank_row, pad_zip, parse_donation_date, to_decimal

DEFAULT_DATA_RANGE = "donation_data"

_TRUTHY = {"true", "yes", "y", "x", "1"}


def _find_region(wb: Any, name: str) -> tuple[Any, tuple[int, int | None]]:
    """Return ``(worksheet, (first_column, last_row))`` for a defined name."""

    defined = wb.defined_names.get(name)
    if defined is None:
        # Sheet-scoped names (openpyxl >= 3.1 keeps them on the worksheet).
        for ws in wb.worksheets:
            scoped = getattr(ws, "defined_names", None)
            if scoped and name in scoped:
                defined = scoped[name]
                break
    if defined is None:
        raise SourceFormatError(f"data range {name!r} is not defined")

    for title, coord in defined.destinations:
        if title not in wb.sheetnames:
            continue
        min_col, _min_row, _max_col, max_row = range_boundaries(coord.replace("$", ""))
        return wb[title], (min_col or 1, max_row)

    raise SourceFormatError(f"data range {name!r} does not point at a worksheet")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return clean_text(value).lower() in _TRUTHY


def to_record(cells: Sequence[Any]) -> DonationRecord:
    padded = list(cells) + [None] * (len(CANONICAL_FIELDS) - len(cells))
    values = dict(zip(CANONICAL_FIELDS, padded))

    raw_type = clean_text(values["payment_type"]).upper()
    try:
        payment_type = PaymentType(raw_type)
    except ValueError as exc:
        raise ValueError(f"unknown payment type {raw_type!r}") from exc
    if payment_type is PaymentType.ANNUAL_ROLLUP:
        raise ValueError("annual rollup rows cannot be imported")

    return DonationRecord(
        acknowledged=_to_bool(values["acknowledged"]),
        donation_date=parse_donation_date(values["donation_date"]),
        last_name=clean_text(values["last_name"]),
        first_name=clean_text(values["first_name"]),
        salutation=clean_text(values["salutation"]),
        gross=to_decimal(values["gross"]),
        fee=to_decimal(values["fee"]),
        net=to_decimal(values["net"]),
        payment_type=payment_type,
        payment_source=clean_text(values["payment_source"]),
        payment_note=clean_text(values["payment_note"]),
        email_address=clean_text(values["email_address"]),
        street_address=clean_text(values["street_address"]),
        city=clean_text(values["city"]),
        state=clean_text(values["state"]),
        zip_code=pad_zip(values["zip_code"]),
    )


def read_check_ledger(
    data: bytes,
    *,
    file_name: str = "<check ledger>",
    data_range: str = DEFAULT_DATA_RANGE,
    first_data_row: int = 1,
) -> tuple[int, list[DonationRecord]]:
    """Read a linked check ledger workbook and return ``(total_rows_read, records)``."""

    try:
        wb = openpyxl.load_workbook(io.BytesIO(data), data_only=True)
    except Exception as exc:  # openpyxl raises a zoo of zipfile/XML errors
        raise SourceFormatError(f"{file_name}: not a readable workbook: {exc}") from exc

    try:
        try:
            ws, (first_col, last_row) = _find_region(wb, data_range)
        except SourceFormatError as exc:
            raise SourceFormatError(f"{file_name}: {exc}") from exc

        rows = ws.iter_rows(
            min_row=max(1, first_data_row),
            max_row=last_row,
            min_col=first_col,
            max_col=first_col + len(CANONICAL_FIELDS) - 1,
            values_only=True,
        )

        total = 0
        records: list[DonationRecord] = []
        for offset, cells in enumerate(rows):
            if is_blank_row(cells):
                continue
            total += 1
            try:
                records.append(to_record(cells))
            except ValueError as exc:
                row_no = max(1, first_data_row) + offset
                raise SourceFormatError(f"{file_name}: row {row_no}: {exc}") from exc
        return total, records
    finally:
        wb.close()


__all__ = ["DEFAULT_DATA_RANGE", "read_check_ledger", "to_record"]
