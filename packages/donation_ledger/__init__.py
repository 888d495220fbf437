"""Public interface for the ``donation_ledger`` package.

Symbol re-exports only: the batch entry points, the canonical record and run
result models, and the error hierarchy.
"""

from .api import (
    acknowledge_donations,
    generate_rollup,
    import_pending_donations,
)
from .errors import (
    AcknowledgementError,
    ConfigurationError,
    DonationLedgerError,
    SourceFormatError,
    UnsupportedSourceError,
)
from .models import (
    CANONICAL_FIELDS,
    AckBatchResult,
    DonationRecord,
    ImportBatchResult,
    ImportFileResult,
    PaymentSource,
    PaymentType,
    RollupResult,
    SourceKind,
)

__all__ = [
    # API
    "acknowledge_donations",
    "generate_rollup",
    "import_pending_donations",
    # Models
    "CANONICAL_FIELDS",
    "AckBatchResult",
    "DonationRecord",
    "ImportBatchResult",
    "ImportFileResult",
    "PaymentSource",
    "PaymentType",
    "RollupResult",
    "SourceKind",
    # Errors
    "AcknowledgementError",
    "ConfigurationError",
    "DonationLedgerError",
    "SourceFormatError",
    "UnsupportedSourceError",
]
