"""Data models for ``donation_ledger``.

The canonical unit is :class:`DonationRecord`: sixteen fields in a fixed order
shared by the source adapters, the ledger table and the acknowledgement
engine. Run results (:class:`ImportBatchResult`, :class:`AckBatchResult`,
:class:`RollupResult`) are plain dataclasses consumed by ``reporting``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import StrEnum

# ---------------------------------------------------------------------------
# Payment classification
# ---------------------------------------------------------------------------


class PaymentType(StrEnum):
    """Ledger payment-type codes."""

    ONE_TIME = "P1"
    RECURRING = "P2"
    ONE_TIME_WITH_NOTE = "P3"
    ANNUAL_ROLLUP = "P4"
    CHECK = "C1"
    DONOR_ADVISED_FUND = "D1"
    IRA_DISTRIBUTION = "I1"


class PaymentSource(StrEnum):
    """Known payment sources. The ledger column itself is free text."""

    PAYPAL = "PayPal"
    CHECK = "Check"
    EFT = "EFT"


class SourceKind(StrEnum):
    """Classification of a file found in the intake area."""

    PAYPAL_EXPORT = "PayPalExport"
    CHECK_LEDGER = "CheckLedger"
    UNSUPPORTED = "Unsupported"


# Acknowledgement amount is the gross for card-processor gifts and the net for
# everything that arrives as a check or transfer.
GROSS_AMOUNT_TYPES: frozenset[PaymentType] = frozenset(
    {PaymentType.ONE_TIME, PaymentType.ONE_TIME_WITH_NOTE, PaymentType.ANNUAL_ROLLUP}
)
NET_AMOUNT_TYPES: frozenset[PaymentType] = frozenset(
    {PaymentType.DONOR_ADVISED_FUND, PaymentType.CHECK, PaymentType.IRA_DISTRIBUTION}
)


# ---------------------------------------------------------------------------
# Canonical record
# ---------------------------------------------------------------------------

CANONICAL_FIELDS: tuple[str, ...] = (
    "acknowledged",
    "donation_date",
    "last_name",
    "first_name",
    "salutation",
    "gross",
    "fee",
    "net",
    "payment_type",
    "payment_source",
    "payment_note",
    "email_address",
    "street_address",
    "city",
    "state",
    "zip_code",
)


@dataclass(frozen=True, slots=True)
class DonationRecord:
    """A single contribution in canonical form.

    Field order matches :data:`CANONICAL_FIELDS` exactly; any reordering breaks
    the ledger mapping and the check-ledger column layout.
    """

    acknowledged: bool
    donation_date: date
    last_name: str
    first_name: str
    salutation: str
    gross: Decimal
    fee: Decimal
    net: Decimal
    payment_type: PaymentType
    payment_source: str
    payment_note: str = ""
    email_address: str = ""
    street_address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""

    @property
    def has_postal_address(self) -> bool:
        return all(
            v.strip() for v in (self.street_address, self.city, self.state, self.zip_code)
        )

    @property
    def is_addressable(self) -> bool:
        """True when an email or a complete postal address is on file."""

        return bool(self.email_address.strip()) or self.has_postal_address

    def acknowledgement_amount(self) -> Decimal:
        if self.payment_type in NET_AMOUNT_TYPES:
            return self.net
        return self.gross

    def as_tuple(self) -> tuple[object, ...]:
        return tuple(getattr(self, name) for name in CANONICAL_FIELDS)


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """A persisted record together with its stable ledger identity."""

    id: int
    position: int
    record: DonationRecord


# ---------------------------------------------------------------------------
# Template bindings
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AcknowledgementBindings:
    """Variables bound into the acknowledgement email and letter templates."""

    donation_date: date
    first_name: str
    last_name: str
    salutation: str
    payment_type: str
    payment_source: str
    amount: Decimal
    email_address: str
    street_address: str
    city: str
    state: str
    zip_code: str

    @classmethod
    def from_record(cls, record: DonationRecord) -> AcknowledgementBindings:
        return cls(
            donation_date=record.donation_date,
            first_name=record.first_name,
            last_name=record.last_name,
            salutation=record.salutation,
            payment_type=str(record.payment_type),
            payment_source=record.payment_source,
            amount=record.acknowledgement_amount(),
            email_address=record.email_address,
            street_address=record.street_address,
            city=record.city,
            state=record.state,
            zip_code=record.zip_code,
        )

    def as_context(self) -> dict[str, object]:
        return {name: getattr(self, name) for name in self.__slots__}


# ---------------------------------------------------------------------------
# Run results
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ImportFileResult:
    """Outcome of importing one intake file."""

    file_name: str
    kind: SourceKind
    succeeded: bool
    total_rows_read: int = 0
    records_inserted: int = 0
    error: str | None = None
    payment_notes: list[DonationRecord] = field(default_factory=list)


@dataclass(slots=True)
class ImportBatchResult:
    files: list[ImportFileResult] = field(default_factory=list)

    @property
    def has_work(self) -> bool:
        return bool(self.files)

    @property
    def records_inserted(self) -> int:
        return sum(f.records_inserted for f in self.files)

    @property
    def payment_notes(self) -> list[DonationRecord]:
        """Every inserted record carrying a non-empty payment note, in file order."""

        return [r for f in self.files for r in f.payment_notes]


@dataclass(slots=True)
class AckBatchResult:
    total_eligible: int = 0
    emailed: int = 0
    documented: int = 0
    skipped_recurring: int = 0
    skipped_unaddressed: int = 0
    errors: list[tuple[int, str]] = field(default_factory=list)

    @property
    def has_work(self) -> bool:
        return self.total_eligible > 0 or bool(self.errors)


@dataclass(slots=True)
class RollupResult:
    tax_year: int
    records: list[DonationRecord] = field(default_factory=list)
    skipped_existing: int = 0

    @property
    def records_inserted(self) -> int:
        return len(self.records)

    @property
    def has_work(self) -> bool:
        return bool(self.records) or self.skipped_existing > 0
