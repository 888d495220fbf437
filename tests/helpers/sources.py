"""Builders for intake files: PayPal CSV exports and check-ledger workbooks."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import openpyxl
from openpyxl.workbook.defined_name import DefinedName

from donation_ledger.ingest.adapters.paypal_csv import (
    COL_ADDRESS_1,
    COL_ADDRESS_2,
    COL_CITY,
    COL_DATE,
    COL_FEE,
    COL_FROM_EMAIL,
    COL_GROSS,
    COL_NAME,
    COL_NET,
    COL_NOTE,
    COL_SHIPPING_NAME,
    COL_STATE,
    COL_TYPE,
    COL_ZIP,
    PAYPAL_FIELD_COUNT,
)
from donation_ledger.models import CANONICAL_FIELDS

_PAYPAL_COLUMNS = {
    "date": COL_DATE,
    "name": COL_NAME,
    "type": COL_TYPE,
    "gross": COL_GROSS,
    "fee": COL_FEE,
    "net": COL_NET,
    "email": COL_FROM_EMAIL,
    "shipping_name": COL_SHIPPING_NAME,
    "address_1": COL_ADDRESS_1,
    "address_2": COL_ADDRESS_2,
    "city": COL_CITY,
    "state": COL_STATE,
    "zip": COL_ZIP,
    "note": COL_NOTE,
}


def paypal_row(**fields: str) -> list[str]:
    row = [""] * PAYPAL_FIELD_COUNT
    for key, value in fields.items():
        row[_PAYPAL_COLUMNS[key]] = value
    return row


def paypal_csv(
    rows: Iterable[Mapping[str, str]], *, field_count: int = PAYPAL_FIELD_COUNT
) -> bytes:
    """Return an export (with BOM and header) containing one line per mapping."""

    buf = io.StringIO(newline="")
    writer = csv.writer(buf)
    writer.writerow([f"Column {i}" for i in range(field_count)])
    for fields in rows:
        writer.writerow(paypal_row(**fields)[:field_count])
    return ("\ufeff" + buf.getvalue()).encode("utf-8")


def check_ledger_xlsx(
    rows: Sequence[Sequence[Any]],
    *,
    range_name: str | None = "donation_data",
    sheet_title: str = "Ledger",
) -> bytes:
    """Return a workbook with a header on row 1 and ``rows`` from row 2.

    The defined name spans the header and data (``A1:P<last>``), as the
    linked ledger does; readers skip the header with ``first_data_row=2``.
    """

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = sheet_title
    ws.append(list(CANONICAL_FIELDS))
    for row in rows:
        ws.append(list(row))
    if range_name:
        last_row = max(2, len(rows) + 1)
        wb.defined_names.add(DefinedName(range_name, attr_text=f"{sheet_title}!$A$1:$P${last_row}"))
    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()
