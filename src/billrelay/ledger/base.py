"""Capability interface for the external bill registry.

A ledger is an append-only key-value registry keyed by serial. Registration
is a two-step affair: a submission is accepted and later confirmed. The
ledger, not its callers, guarantees that at most one record is committed per
serial; a losing submission is rejected with
:class:`~billrelay.core.errors.DuplicateSerial`, either when submitted or when
its commit is awaited.

Adapters raise :class:`~billrelay.core.errors.ServiceUnavailable` when the
provider cannot be reached and :class:`~billrelay.core.errors.ChainError` when
a call fails or reverts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from billrelay.core.types import BillRecord


@dataclass(frozen=True)
class Submission:
    serial: str
    content_hash: str
    tx_id: str


@dataclass(frozen=True)
class CommitReceipt:
    tx_id: str
    block_height: int


@dataclass(frozen=True)
class LedgerInfo:
    treasury_address: str
    balance: str
    contract: str
    chain_id: int


@runtime_checkable
class LedgerRegistry(Protocol):
    def is_issued(self, serial: str) -> bool:
        ...

    def get_record(self, serial: str) -> BillRecord:
        """Return the committed record; raise ChainError if it does not exist."""
        ...

    def submit_registration(self, serial: str, content_hash: str) -> Submission:
        ...

    def wait_for_commit(self, submission: Submission) -> CommitReceipt:
        ...

    def describe(self) -> LedgerInfo:
        ...
