"""Relational ledger backed by SQLAlchemy.

Submissions are inserted and committed in one transaction, so a losing
concurrent writer is rejected by the ``uq_bills_serial`` constraint at
submission time.
"""

from __future__ import annotations

import logging
import secrets
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from billrelay.core.errors import ChainError, DuplicateSerial, ServiceUnavailable
from billrelay.core.types import BillRecord
from billrelay.db.models import BillRow
from billrelay.db.session import build_engine, build_session_factory, init_db, standalone_session
from billrelay.ledger.base import CommitReceipt, LedgerInfo, Submission

logger = logging.getLogger(__name__)


class SqlLedger:
    def __init__(
        self,
        session_factory: sessionmaker,
        info: LedgerInfo,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._sessions = session_factory
        self._info = info
        self._clock = clock

    @classmethod
    def from_url(cls, database_url: str, info: LedgerInfo, create: bool = True) -> "SqlLedger":
        engine = build_engine(database_url)
        if create:
            init_db(engine)
        return cls(build_session_factory(engine), info)

    def is_issued(self, serial: str) -> bool:
        return self._find(serial) is not None

    def get_record(self, serial: str) -> BillRecord:
        record = self._find(serial)
        if record is None:
            raise ChainError(f"Bill not found: {serial}")
        return record

    def submit_registration(self, serial: str, content_hash: str) -> Submission:
        tx_id = "0x" + secrets.token_hex(32)
        row = BillRow(
            serial=serial,
            content_hash=content_hash,
            issued_at=int(self._clock()),
            tx_hash=tx_id,
        )
        with _translate_errors(serial=serial):
            with standalone_session(self._sessions) as session:
                session.add(row)
        return Submission(serial=serial, content_hash=content_hash, tx_id=tx_id)

    def wait_for_commit(self, submission: Submission) -> CommitReceipt:
        with _translate_errors(), standalone_session(self._sessions) as session:
            block_height = session.execute(
                select(BillRow.id).where(BillRow.tx_hash == submission.tx_id)
            ).scalar_one_or_none()
        if block_height is None:
            raise ChainError(f"Transaction not committed: {submission.tx_id}")
        return CommitReceipt(tx_id=submission.tx_id, block_height=block_height)

    def describe(self) -> LedgerInfo:
        return self._info

    def _find(self, serial: str) -> Optional[BillRecord]:
        with _translate_errors(), standalone_session(self._sessions) as session:
            row = session.execute(
                select(BillRow).where(BillRow.serial == serial)
            ).scalar_one_or_none()
            if row is None:
                return None
            return BillRecord(
                serial=row.serial,
                content_hash=row.content_hash,
                issued_at=row.issued_at,
                tx_id=row.tx_hash,
                block_height=row.id,
            )


@contextmanager
def _translate_errors(serial: Optional[str] = None) -> Iterator[None]:
    """Map SQLAlchemy failures onto the error taxonomy.

    With *serial* set, a constraint violation is reported as that serial's
    duplicate registration.
    """

    try:
        yield
    except IntegrityError as exc:
        if serial is None:
            raise ChainError(str(exc)) from exc
        logger.info("Registration for %s rejected by uniqueness constraint", serial)
        raise DuplicateSerial(serial) from exc
    except OperationalError as exc:
        raise ServiceUnavailable(f"Ledger database unavailable: {exc.orig}") from exc
    except SQLAlchemyError as exc:
        raise ChainError(str(exc)) from exc
