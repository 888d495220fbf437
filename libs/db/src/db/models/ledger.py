from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: dl_donations
# ---------------------------


class DlDonation(Base):
    """One canonical donation record (a ledger row).

    The sixteen canonical columns are declared in wire order, between ``id``/
    ``position`` and the bookkeeping columns. ``position`` is display order
    only (0 = top of the ledger); identity is ``id``.
    """

    __tablename__ = "dl_donations"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    acknowledged: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    donation_date: Mapped[date] = mapped_column(Date, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    first_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    salutation: Mapped[str] = mapped_column(Text, nullable=False, default="")
    gross: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    net: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_type: Mapped[str] = mapped_column(String(2), nullable=False)
    payment_source: Mapped[str] = mapped_column(Text, nullable=False, default="")
    payment_note: Mapped[str] = mapped_column(Text, nullable=False, default="")
    email_address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    street_address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    city: Mapped[str] = mapped_column(Text, nullable=False, default="")
    state: Mapped[str] = mapped_column(Text, nullable=False, default="")
    zip_code: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Intake file name (or "rollup:<year>") that produced the row.
    source_file: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "payment_type in ('P1','P2','P3','P4','C1','D1','I1')",
            name="ck_dl_donation_payment_type",
        ),
        Index("ix_dl_donations_position", "position"),
        Index("ix_dl_donations_unacknowledged", "acknowledged", "position"),
        Index("ix_dl_donations_type_date", "payment_type", "donation_date"),
    )


# ---------------------------
# Reference: dl_settings
# ---------------------------


class DlSetting(Base):
    """A named configuration cell (folder references, templates, mail settings)."""

    __tablename__ = "dl_settings"

    name: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


__all__ = [
    "Base",
    "DlDonation",
    "DlSetting",
]
