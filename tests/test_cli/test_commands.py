import base64
import json

from click.testing import CliRunner

from billrelay.cli.main import cli
from billrelay.core.canonical import compute_bill_hash
from billrelay.provenance.verify import verify_signature

SEED_B64 = base64.b64encode(bytes(range(1, 33))).decode()


def test_cli_hash():
    result = CliRunner().invoke(cli, ["hash", "TEST123", "usd", "10"])
    assert result.exit_code == 0, result.output
    body = json.loads(result.output)
    assert body["message"] == "serial=TEST123|currency=USD|value=10"
    assert body["billHash"] == compute_bill_hash("TEST123", "USD", 10)


def test_cli_hash_rejects_bad_value():
    result = CliRunner().invoke(cli, ["hash", "TEST123", "USD", "1.001"])
    assert result.exit_code != 0


def test_cli_sign(monkeypatch, tmp_path):
    monkeypatch.setenv("BILLRELAY_SIGNING_SEED", SEED_B64)
    monkeypatch.setenv("BILLRELAY_SIGNING_KEY_PATH", str(tmp_path / "unused.key"))

    result = CliRunner().invoke(cli, ["sign", "TEST123", "USD", "10"])

    assert result.exit_code == 0, result.output
    body = json.loads(result.output)
    assert body["tag"]["value"] == 10
    assert verify_signature(body["tag"], body["pubkeyB64"])
    assert not (tmp_path / "unused.key").exists()


def test_cli_sign_rejects_zero_seed(monkeypatch):
    monkeypatch.setenv("BILLRELAY_SIGNING_SEED", base64.b64encode(bytes(32)).decode())
    result = CliRunner().invoke(cli, ["sign", "TEST123", "USD", "10"])
    assert result.exit_code != 0
    assert "all-zero" in result.output


def test_cli_lookup_unreachable_relay():
    result = CliRunner().invoke(cli, ["lookup", "TEST123", "--relay-url", "http://127.0.0.1:9"])
    assert result.exit_code == 1
    body = json.loads(result.output)
    assert body["ok"] is False
    assert body["serial"] == "TEST123"


def test_cli_register_through_relay(monkeypatch, gateway):
    import billrelay.cli.main as cli_main
    from fastapi.testclient import TestClient

    from billrelay.api.app import create_app
    from billrelay.config import RelayConfig
    from billrelay.sdk.client import RelayClient

    session = TestClient(create_app(gateway))
    monkeypatch.setattr(
        cli_main,
        "RelayClient",
        lambda cfg: RelayClient(cfg=RelayConfig(base_url="http://testserver"), session=session),
    )

    first = CliRunner().invoke(cli, ["register", "TEST123", "USD", "10"])
    again = CliRunner().invoke(cli, ["register", "TEST123", "USD", "10"])
    bad = CliRunner().invoke(cli, ["register", "TEST124", "USD", "0"])

    assert first.exit_code == 0, first.output
    assert json.loads(first.output)["already"] is False
    assert json.loads(again.output)["already"] is True
    assert bad.exit_code != 0
    assert "Value must be > 0" in bad.output
