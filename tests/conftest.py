from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from billrelay.api.app import create_app
from billrelay.gateway.service import LedgerGateway
from billrelay.ledger.memory import InMemoryLedger

FIXED_TIME = 1_700_000_000


@pytest.fixture()
def ledger() -> InMemoryLedger:
    return InMemoryLedger(
        clock=lambda: FIXED_TIME,
        treasury_address="0xTreasury",
        contract="0xContract",
        chain_id=11155111,
        balance="1.5",
    )


@pytest.fixture()
def gateway(ledger) -> LedgerGateway:
    return LedgerGateway(ledger)


@pytest.fixture()
def api_client(gateway) -> Iterator[TestClient]:
    with TestClient(create_app(gateway)) as client:
        yield client
