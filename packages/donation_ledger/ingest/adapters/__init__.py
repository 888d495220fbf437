"""Source adapters: one module per intake file format."""

from .check_ledger_xlsx import read_check_ledger
from .paypal_csv import read_paypal_export

__all__ = ["read_check_ledger", "read_paypal_export"]
