"""Core primitives for billrelay."""

from .canonical import (
    BillInput,
    canonical_message,
    compute_bill_hash,
    compute_hash,
    format_value,
    normalize_bill_input,
)
from .errors import (
    BillRelayError,
    ChainError,
    DecodeError,
    DuplicateSerial,
    InvalidInput,
    LookupTimeout,
    RelayError,
    ServiceUnavailable,
)
from .types import (
    BanknoteFields,
    BillRecord,
    Failed,
    Issued,
    LookupResult,
    NotIssued,
    RegistrationResult,
    ScanRequest,
    TreasuryPayload,
)

__all__ = [
    "BillInput",
    "canonical_message",
    "compute_bill_hash",
    "compute_hash",
    "format_value",
    "normalize_bill_input",
    "BillRelayError",
    "ChainError",
    "DecodeError",
    "DuplicateSerial",
    "InvalidInput",
    "LookupTimeout",
    "RelayError",
    "ServiceUnavailable",
    "BanknoteFields",
    "BillRecord",
    "Failed",
    "Issued",
    "LookupResult",
    "NotIssued",
    "RegistrationResult",
    "ScanRequest",
    "TreasuryPayload",
]
