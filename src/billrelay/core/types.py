"""Data model for bills, scan requests and lookup outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class BillRecord:
    """A committed ledger entry. ``content_hash`` and ``issued_at`` never change."""

    serial: str
    content_hash: str
    issued_at: int
    currency: str = ""
    value: Optional[Decimal] = None
    tx_id: Optional[str] = None
    block_height: Optional[int] = None


@dataclass(frozen=True)
class RegistrationResult:
    record: BillRecord
    already: bool

    def to_response(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "ok": True,
            "already": self.already,
            "issued": True,
            "serial": self.record.serial,
            "billHash": self.record.content_hash,
            "issuedAt": self.record.issued_at,
        }
        if not self.already:
            payload["txHash"] = self.record.tx_id
            payload["blockNumber"] = self.record.block_height
        return payload


@dataclass(frozen=True)
class ScanRequest:
    id: str
    serial: str
    currency: str
    denomination: int
    blockchain_check_enabled: bool

    @property
    def dedupe_key(self) -> tuple:
        return (self.serial, self.currency, self.denomination, self.blockchain_check_enabled)


@dataclass(frozen=True)
class Issued:
    hash: str
    issued_at: int


@dataclass(frozen=True)
class NotIssued:
    pass


@dataclass(frozen=True)
class Failed:
    message: str


LookupResult = Union[Issued, NotIssued, Failed]


@dataclass(frozen=True)
class TreasuryPayload:
    """Signed bill attributes as written to a physical tag."""

    serial: str
    currency: str
    value: int | str
    sig: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "serial": self.serial,
            "currency": self.currency,
            "value": self.value,
            "sig": self.sig,
        }


@dataclass(frozen=True)
class BanknoteFields:
    """Fields recognised on a banknote image; any of them may be missing."""

    currency: Optional[str] = None
    denomination: Optional[int] = None
    serial: Optional[str] = None
