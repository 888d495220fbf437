"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the donation ledger models used by ``donation_ledger``.
"""

from .ledger import Base, DlDonation, DlSetting

__all__ = [
    "Base",
    "DlDonation",
    "DlSetting",
]
