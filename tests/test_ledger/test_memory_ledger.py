import pytest

from billrelay.core.errors import ChainError, DuplicateSerial
from billrelay.ledger.base import LedgerRegistry, Submission
from billrelay.ledger.memory import InMemoryLedger


def test_memory_ledger_satisfies_protocol() -> None:
    assert isinstance(InMemoryLedger(), LedgerRegistry)


def test_commit_records_bill_and_advances_height() -> None:
    ledger = InMemoryLedger(clock=lambda: 1234.9)
    submission = ledger.submit_registration("A1", "0xabc")
    assert not ledger.is_issued("A1")

    receipt = ledger.wait_for_commit(submission)

    assert receipt.block_height == 1
    assert receipt.tx_id == submission.tx_id
    record = ledger.get_record("A1")
    assert record.content_hash == "0xabc"
    assert record.issued_at == 1234
    assert ledger.block_height == 1
    assert len(ledger) == 1


def test_second_commit_for_same_serial_is_rejected() -> None:
    ledger = InMemoryLedger()
    first = ledger.submit_registration("A1", "0x01")
    second = ledger.submit_registration("A1", "0x02")
    ledger.wait_for_commit(first)

    with pytest.raises(DuplicateSerial):
        ledger.wait_for_commit(second)

    assert ledger.get_record("A1").content_hash == "0x01"
    assert ledger.block_height == 1


def test_unknown_transaction_and_missing_record() -> None:
    ledger = InMemoryLedger()
    with pytest.raises(ChainError):
        ledger.wait_for_commit(Submission(serial="A1", content_hash="0x", tx_id="0xdead"))
    with pytest.raises(ChainError):
        ledger.get_record("missing")
    with pytest.raises(ChainError):
        ledger.submit_registration("", "0x")


def test_describe_defaults() -> None:
    info = InMemoryLedger().describe()
    assert info.treasury_address == "0x" + "0" * 40
    assert info.contract == "memory"
    assert info.chain_id == 31337
