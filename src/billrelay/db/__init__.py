"""Database layer for the relational ledger backend."""

from billrelay.db.models import Base, BillRow
from billrelay.db.session import (
    build_engine,
    build_session_factory,
    init_db,
    standalone_session,
)

__all__ = [
    "Base",
    "BillRow",
    "build_engine",
    "build_session_factory",
    "init_db",
    "standalone_session",
]
