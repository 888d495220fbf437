"""Field normalizers shared by the source adapters.

Pure, stateless helpers that turn raw source cells (strings, spreadsheet
numbers, encoded dates) into canonical values. Nothing here touches the
ledger or the file store.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ADDRESS_JOIN_SEPARATOR = ", "

_ENCODED_DATE_RE = re.compile(r"^\d{8}$")
_TRAILING_JUNK_RE = re.compile(r"[^0-9A-Za-z]+$")
_WHITESPACE_RE = re.compile(r"\s+")
_COMMA_RE = re.compile(r"\s*,\s*")

# Accepted textual date layouts, most specific first.
_DATE_FORMATS = ("%Y/%m/%d", "%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y")


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def decode_date(value: Any) -> Any:
    """Rewrite an 8-digit ``YYYYMMDD`` integer as ``"YYYY/MM/DD"``.

    Any other value is returned unchanged. Digit strings count as integers,
    since spreadsheet exports do not preserve the cell type.
    """

    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        text = str(value)
    elif isinstance(value, str) and _ENCODED_DATE_RE.fullmatch(value.strip()):
        text = value.strip()
    else:
        return value
    if not _ENCODED_DATE_RE.fullmatch(text):
        return value
    return f"{text[0:4]}/{text[4:6]}/{text[6:8]}"


def parse_donation_date(value: Any) -> date:
    """Return a ``date`` from a decoded or raw cell value.

    Raises ``ValueError`` when the value is empty or not a recognizable date.
    """

    value = decode_date(value)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value or "").strip()
    if not s:
        raise ValueError("donation date is empty")
    # Some exports append a time component ("MM/DD/YYYY HH:MM:SS").
    first = s.split()[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(first, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"invalid donation date: {value!r}")


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


def to_decimal(raw: Any) -> Decimal:
    """Parse a loosely formatted amount (``"$1,234.50"``, ``"(5.00)"``, ``12``).

    Blank cells are zero; the result is quantized to cents.
    """

    if raw is None:
        return Decimal("0.00")
    if isinstance(raw, Decimal):
        d = raw
    elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
        d = Decimal(str(raw))
    else:
        s = str(raw).strip()
        if not s:
            return Decimal("0.00")
        negative = False
        if s.startswith("(") and s.endswith(")"):
            negative = True
            s = s[1:-1].strip()
        if s.startswith("-"):
            negative = True
            s = s[1:].strip()
        s = s.lstrip("$").replace(",", "").strip()
        try:
            d = Decimal(s)
        except InvalidOperation as exc:
            raise ValueError(f"invalid amount: {raw!r}") from exc
        if negative:
            d = -abs(d)
    return d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


# ---------------------------------------------------------------------------
# Names and contact fields
# ---------------------------------------------------------------------------


def _capitalize(name: str) -> str:
    # Single-token names are lower-cased first so all-caps exports come out
    # as "Smith"; multi-token names keep their internal casing.
    if name and not _WHITESPACE_RE.search(name):
        name = name.lower()
    return name[:1].upper() + name[1:]


def split_name(
    shipping_name: str | None,
    payer_name: str | None,
    *,
    whole_surname: bool = False,
) -> tuple[str, str]:
    """Return ``(first_name, last_name)`` for a card-processor row.

    Preference order:

    1. ``shipping_name``, which the processor tokenizes as ``"First, Last"``.
    2. ``payer_name`` split on whitespace: the last token is the surname and
       the remainder the given name; a single token is all surname.

    ``whole_surname`` treats the entire payer name as the surname (mass
    payments from donor-advised funds carry an organization name there).
    """

    shipping = (shipping_name or "").strip()
    payer = (payer_name or "").strip()

    if shipping:
        tokens = _COMMA_RE.split(shipping)
        first = tokens[0]
        last = tokens[1] if len(tokens) > 1 else ""
    elif whole_surname:
        first, last = "", payer
    else:
        tokens = _WHITESPACE_RE.split(payer) if payer else [""]
        if len(tokens) > 1:
            first, last = " ".join(tokens[:-1]), tokens[-1]
        else:
            first, last = "", tokens[0]

    return _capitalize(first.strip()), _capitalize(last.strip())


def trim_email(value: Any) -> str:
    """Strip trailing non-alphanumeric characters and lower-case."""

    s = str(value or "").strip()
    return _TRAILING_JUNK_RE.sub("", s).lower()


def pad_zip(value: Any) -> str:
    """Restore a leading zero lost to numeric export (``"2134"`` -> ``"02134"``)."""

    if value is None:
        return ""
    s = str(value).strip()
    if s.endswith(".0") and s[:-2].isdigit():
        s = s[:-2]
    return "0" + s if len(s) == 4 else s


def join_address(line1: Any, line2: Any) -> str:
    first = str(line1 or "").strip()
    second = str(line2 or "").strip()
    if second:
        return first + ADDRESS_JOIN_SEPARATOR + second if first else second
    return first


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


def is_blank_row(row: Sequence[Any]) -> bool:
    """True when every cell is ``None`` or an empty string once stringified."""

    return all(cell is None or str(cell) == "" for cell in row)


__all__ = [
    "ADDRESS_JOIN_SEPARATOR",
    "clean_text",
    "decode_date",
    "is_blank_row",
    "join_address",
    "pad_zip",
    "parse_donation_date",
    "split_name",
    "to_decimal",
    "trim_email",
]
