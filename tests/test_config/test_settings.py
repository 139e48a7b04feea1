import pytest

from billrelay.config import DEFAULT_RELAY_URL, GatewaySettings, RelayConfig, SignerSettings
from billrelay.ledger import InMemoryLedger, build_ledger


def test_gateway_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("BILLRELAY_LEDGER", " SQL ")
    monkeypatch.setenv("BILLRELAY_CHAIN_ID", "11155111")
    monkeypatch.setenv("BILLRELAY_PORT", "not-a-port")
    monkeypatch.setenv("BILLRELAY_LOG_LEVEL", "debug")

    settings = GatewaySettings.from_env()

    assert settings.ledger_backend == "sql"
    assert settings.chain_id == 11155111
    assert settings.port == 8787
    assert settings.log_level == "DEBUG"


def test_relay_config_resolution(monkeypatch) -> None:
    monkeypatch.delenv("BILLRELAY_RELAY_URL", raising=False)
    monkeypatch.delenv("BILLRELAY_RELAY_TIMEOUT", raising=False)
    assert RelayConfig().resolved_base_url == DEFAULT_RELAY_URL
    assert RelayConfig().resolved_timeout == 6.0

    monkeypatch.setenv("BILLRELAY_RELAY_URL", "http://relay.local:9000/")
    monkeypatch.setenv("BILLRELAY_RELAY_TIMEOUT", "2.5")
    assert RelayConfig().resolved_base_url == "http://relay.local:9000"
    assert RelayConfig().resolved_timeout == 2.5
    assert RelayConfig(base_url="http://explicit/", timeout=1).resolved_base_url == "http://explicit"


def test_signer_settings_from_env(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("BILLRELAY_SIGNING_SEED", "")
    monkeypatch.setenv("BILLRELAY_SIGNING_KEY_PATH", str(tmp_path / "key"))
    settings = SignerSettings.from_env()
    assert settings.seed_b64 is None
    assert settings.key_path == tmp_path / "key"


def test_build_ledger_selects_backend(tmp_path) -> None:
    assert isinstance(build_ledger(GatewaySettings()), InMemoryLedger)

    sql = build_ledger(GatewaySettings(ledger_backend="sql", database_url=f"sqlite:///{tmp_path / 'l.db'}"))
    assert type(sql).__name__ == "SqlLedger"

    with pytest.raises(ValueError):
        build_ledger(GatewaySettings(ledger_backend="ethereum"))
