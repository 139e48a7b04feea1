"""In-process ledger used for development and tests.

Submissions are queued as pending transactions; uniqueness is enforced when
the commit is awaited, which is where a real chain would order them.
"""

from __future__ import annotations

import secrets
import threading
import time
from typing import Callable, Dict

from billrelay.core.errors import ChainError, DuplicateSerial
from billrelay.core.types import BillRecord
from billrelay.ledger.base import CommitReceipt, LedgerInfo, Submission


class InMemoryLedger:
    """Thread-safe registry with a monotonically increasing block height."""

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        treasury_address: str = "",
        contract: str = "",
        chain_id: int = 31337,
        balance: str = "0",
    ) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._records: Dict[str, BillRecord] = {}
        self._pending: Dict[str, Submission] = {}
        self._block_height = 0
        self._info = LedgerInfo(
            treasury_address=treasury_address or "0x" + "0" * 40,
            balance=balance,
            contract=contract or "memory",
            chain_id=chain_id,
        )

    @property
    def block_height(self) -> int:
        with self._lock:
            return self._block_height

    def is_issued(self, serial: str) -> bool:
        with self._lock:
            return serial in self._records

    def get_record(self, serial: str) -> BillRecord:
        with self._lock:
            record = self._records.get(serial)
        if record is None:
            raise ChainError(f"Bill not found: {serial}")
        return record

    def submit_registration(self, serial: str, content_hash: str) -> Submission:
        if not serial:
            raise ChainError("Empty serial")
        submission = Submission(
            serial=serial, content_hash=content_hash, tx_id="0x" + secrets.token_hex(32)
        )
        with self._lock:
            self._pending[submission.tx_id] = submission
        return submission

    def wait_for_commit(self, submission: Submission) -> CommitReceipt:
        with self._lock:
            if self._pending.pop(submission.tx_id, None) is None:
                raise ChainError(f"Unknown transaction: {submission.tx_id}")
            if submission.serial in self._records:
                raise DuplicateSerial(submission.serial)
            self._block_height += 1
            self._records[submission.serial] = BillRecord(
                serial=submission.serial,
                content_hash=submission.content_hash,
                issued_at=int(self._clock()),
                tx_id=submission.tx_id,
                block_height=self._block_height,
            )
            return CommitReceipt(tx_id=submission.tx_id, block_height=self._block_height)

    def describe(self) -> LedgerInfo:
        return self._info

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
