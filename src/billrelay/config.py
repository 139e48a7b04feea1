"""Environment-driven settings for the gateway, the relay client and the signer."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_RELAY_URL = "http://localhost:8787"
DEFAULT_LOOKUP_TIMEOUT = 6.0
DEFAULT_DATABASE_URL = "sqlite:///data/ledger.db"
DEFAULT_KEY_PATH = Path.home() / ".billrelay" / "treasury_ed25519.key"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class GatewaySettings:
    """Settings for the relay gateway process."""

    ledger_backend: str = "memory"
    database_url: str = DEFAULT_DATABASE_URL
    treasury_address: str = ""
    contract_address: str = ""
    chain_id: int = 31337
    treasury_balance: str = "0"
    host: str = "0.0.0.0"
    port: int = 8787
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "GatewaySettings":
        return cls(
            ledger_backend=os.getenv("BILLRELAY_LEDGER", "memory").strip().lower(),
            database_url=os.getenv("BILLRELAY_DATABASE_URL", DEFAULT_DATABASE_URL),
            treasury_address=os.getenv("BILLRELAY_TREASURY_ADDRESS", ""),
            contract_address=os.getenv("BILLRELAY_CONTRACT_ADDRESS", ""),
            chain_id=_env_int("BILLRELAY_CHAIN_ID", 31337),
            treasury_balance=os.getenv("BILLRELAY_TREASURY_BALANCE", "0"),
            host=os.getenv("BILLRELAY_HOST", "0.0.0.0"),
            port=_env_int("BILLRELAY_PORT", 8787),
            log_level=os.getenv("BILLRELAY_LOG_LEVEL", "INFO").upper(),
        )


@dataclass
class RelayConfig:
    """Configuration for :class:`billrelay.sdk.client.RelayClient`."""

    base_url: Optional[str] = None
    timeout: Optional[float] = None

    @property
    def resolved_base_url(self) -> str:
        if self.base_url:
            return self.base_url.rstrip("/")
        env_value = os.getenv("BILLRELAY_RELAY_URL")
        if env_value:
            return env_value.rstrip("/")
        return DEFAULT_RELAY_URL

    @property
    def resolved_timeout(self) -> float:
        if self.timeout is not None:
            return self.timeout
        return _env_float("BILLRELAY_RELAY_TIMEOUT", DEFAULT_LOOKUP_TIMEOUT)


@dataclass
class SignerSettings:
    seed_b64: Optional[str] = None
    key_path: Path = DEFAULT_KEY_PATH

    @classmethod
    def from_env(cls) -> "SignerSettings":
        key_path = os.getenv("BILLRELAY_SIGNING_KEY_PATH")
        return cls(
            seed_b64=os.getenv("BILLRELAY_SIGNING_SEED") or None,
            key_path=Path(key_path) if key_path else DEFAULT_KEY_PATH,
        )
