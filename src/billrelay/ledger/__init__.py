"""Ledger capability and its adapters."""

from __future__ import annotations

from billrelay.config import GatewaySettings
from billrelay.ledger.base import CommitReceipt, LedgerInfo, LedgerRegistry, Submission
from billrelay.ledger.memory import InMemoryLedger


def build_ledger(settings: GatewaySettings) -> LedgerRegistry:
    """Instantiate the ledger adapter selected by ``settings.ledger_backend``."""

    info = LedgerInfo(
        treasury_address=settings.treasury_address,
        balance=settings.treasury_balance,
        contract=settings.contract_address,
        chain_id=settings.chain_id,
    )
    if settings.ledger_backend == "memory":
        return InMemoryLedger(
            treasury_address=info.treasury_address,
            contract=info.contract,
            chain_id=info.chain_id,
            balance=info.balance,
        )
    if settings.ledger_backend == "sql":
        from billrelay.ledger.sql import SqlLedger

        return SqlLedger.from_url(settings.database_url, info)
    raise ValueError(f"Unknown ledger backend: {settings.ledger_backend}")


__all__ = [
    "CommitReceipt",
    "InMemoryLedger",
    "LedgerInfo",
    "LedgerRegistry",
    "Submission",
    "build_ledger",
]
