"""Idempotent bill registration and lookup against a ledger.

The gateway keeps no state between calls. Uniqueness of serials is the
ledger's job: when two registrations for the same serial race past the
``is_issued`` check, the ledger rejects the loser and the gateway answers it
with the record that won, exactly as it would answer a plain repeat call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from billrelay.core.canonical import (
    compute_bill_hash,
    normalize_currency,
    normalize_serial,
    to_decimal,
)
from billrelay.core.errors import ChainError, DuplicateSerial, InvalidInput
from billrelay.core.types import BillRecord, RegistrationResult
from billrelay.ledger.base import LedgerInfo, LedgerRegistry
from billrelay.observability import log_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupOutcome:
    serial: str
    record: Optional[BillRecord] = None

    @property
    def issued(self) -> bool:
        return self.record is not None

    def to_response(self) -> dict:
        payload: dict = {"ok": True, "issued": self.issued, "serial": self.serial}
        if self.record is not None:
            payload["billHash"] = self.record.content_hash
            payload["issuedAt"] = self.record.issued_at
        return payload


class LedgerGateway:
    def __init__(self, ledger: LedgerRegistry) -> None:
        self.ledger = ledger

    def register_bill(self, serial: Any, currency: Any, value: Any) -> RegistrationResult:
        serial_norm, currency_norm, amount = _validate_bill(serial, currency, value)
        content_hash = compute_bill_hash(serial_norm, currency_norm, amount)

        if self.ledger.is_issued(serial_norm):
            log_event("register.already", serial=serial_norm)
            return RegistrationResult(record=self.ledger.get_record(serial_norm), already=True)

        try:
            submission = self.ledger.submit_registration(serial_norm, content_hash)
            receipt = self.ledger.wait_for_commit(submission)
        except DuplicateSerial:
            return self._resolve_duplicate(serial_norm)

        # Re-read: the committed record is the source of truth, not our hash.
        stored = self.ledger.get_record(serial_norm)
        record = BillRecord(
            serial=stored.serial,
            content_hash=stored.content_hash,
            issued_at=stored.issued_at,
            currency=currency_norm,
            value=amount,
            tx_id=receipt.tx_id,
            block_height=receipt.block_height,
        )
        log_event(
            "register.committed",
            serial=serial_norm,
            tx_id=receipt.tx_id,
            block_height=receipt.block_height,
        )
        return RegistrationResult(record=record, already=False)

    def lookup_bill(self, serial: Any) -> LookupOutcome:
        serial_norm = normalize_serial(serial)
        if not serial_norm:
            raise InvalidInput("Missing serial")
        if not self.ledger.is_issued(serial_norm):
            return LookupOutcome(serial=serial_norm)
        return LookupOutcome(serial=serial_norm, record=self.ledger.get_record(serial_norm))

    def health(self) -> LedgerInfo:
        return self.ledger.describe()

    def _resolve_duplicate(self, serial: str) -> RegistrationResult:
        log_event("register.duplicate_rejected", serial=serial)
        if not self.ledger.is_issued(serial):
            raise ChainError(f"Ledger rejected {serial} as duplicate but reports it unissued")
        return RegistrationResult(record=self.ledger.get_record(serial), already=True)


def _validate_bill(serial: Any, currency: Any, value: Any) -> tuple[str, str, Decimal]:
    serial_norm = normalize_serial(serial)
    currency_norm = normalize_currency(currency)
    try:
        amount = to_decimal(value)
    except InvalidInput:
        amount = None
    if not serial_norm or not currency_norm or amount is None:
        raise InvalidInput("Missing serial/currency/value")
    if amount <= 0:
        raise InvalidInput("Value must be > 0")
    return serial_norm, currency_norm, amount
