"""SQLAlchemy models for the relational ledger backend."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class BillRow(Base):
    """One committed bill registration.

    The autoincrement ``id`` doubles as the block height of the commit and
    the unique constraint on ``serial`` is the ledger's uniqueness guarantee.
    """

    __tablename__ = "bills"

    id = Column(Integer, primary_key=True, autoincrement=True)
    serial = Column(String(128), nullable=False)
    content_hash = Column(String(66), nullable=False)
    issued_at = Column(Integer, nullable=False)
    tx_hash = Column(String(66), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("serial", name="uq_bills_serial"),
        UniqueConstraint("tx_hash", name="uq_bills_tx_hash"),
    )
