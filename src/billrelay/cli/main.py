"""Command-line interface for billrelay."""

from __future__ import annotations

import json

import click

from billrelay.config import GatewaySettings, RelayConfig
from billrelay.core.canonical import canonical_message, compute_hash
from billrelay.core.errors import BillRelayError
from billrelay.core.types import Issued, NotIssued
from billrelay.observability import configure_logging
from billrelay.provenance.ndef import payload_to_json
from billrelay.provenance.signer import ProvenanceSigner
from billrelay.sdk.client import RelayClient

relay_url_option = click.option(
    "--relay-url",
    default=None,
    help="Relay base URL (defaults to BILLRELAY_RELAY_URL or http://localhost:8787).",
)


@click.group()
def cli() -> None:
    """billrelay command suite."""


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to BILLRELAY_HOST).")
@click.option("--port", default=None, type=int, help="Bind port (defaults to BILLRELAY_PORT).")
def serve(host: str | None, port: int | None) -> None:
    """Run the relay gateway."""

    import uvicorn

    settings = GatewaySettings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(
        "billrelay.api.app:app",
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@cli.command("hash")
@click.argument("serial")
@click.argument("currency")
@click.argument("value")
def hash_cmd(serial: str, currency: str, value: str) -> None:
    """Print the canonical message and content hash of a bill."""

    try:
        message = canonical_message(serial, currency, value)
    except BillRelayError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(json.dumps({"message": message, "billHash": compute_hash(message)}, indent=2))


@cli.command()
@click.argument("serial")
@relay_url_option
def lookup(serial: str, relay_url: str | None) -> None:
    """Look a serial up on the relay."""

    result = RelayClient(RelayConfig(base_url=relay_url)).lookup_bill(serial)
    if isinstance(result, Issued):
        payload = {"ok": True, "issued": True, "billHash": result.hash, "issuedAt": result.issued_at}
    elif isinstance(result, NotIssued):
        payload = {"ok": True, "issued": False}
    else:
        payload = {"ok": False, "error": result.message}
    click.echo(json.dumps({"serial": serial, **payload}, indent=2))
    if not payload["ok"]:
        raise SystemExit(1)


@cli.command()
@click.argument("serial")
@click.argument("currency")
@click.argument("value")
@relay_url_option
def register(serial: str, currency: str, value: str, relay_url: str | None) -> None:
    """Register a bill on the ledger through the relay."""

    client = RelayClient(RelayConfig(base_url=relay_url))
    try:
        resp = client.register_bill(serial, currency, value)
    except BillRelayError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(json.dumps(resp.model_dump(exclude_none=True), indent=2))


@cli.command()
@click.argument("serial")
@click.argument("currency")
@click.argument("value")
def sign(serial: str, currency: str, value: str) -> None:
    """Sign a bill and print the tag JSON with the signer public key."""

    try:
        signed = ProvenanceSigner.from_settings().sign(serial, currency, value)
    except BillRelayError as exc:
        raise click.ClickException(exc.message) from exc
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(
        json.dumps(
            {
                "tag": json.loads(payload_to_json(signed.payload)),
                "message": signed.message,
                "pubkeyB64": signed.public_key_b64,
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    cli()
