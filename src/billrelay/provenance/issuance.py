"""Treasury-side issuance: sign a bill, register it, write its tag.

Ledger registration and the tag write are independent success paths. A
failed write does not undo a registration and a failed registration does
not stop the write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from billrelay.core.errors import BillRelayError
from billrelay.provenance.ndef import encode_text_record, payload_to_json
from billrelay.provenance.signer import ProvenanceSigner, SignedPayload
from billrelay.sdk.client import RegisterResp, RelayClient

logger = logging.getLogger(__name__)


class TagWriter(Protocol):
    def write(self, ndef_message: bytes) -> None:
        """Write an encoded NDEF message; raise on failure."""
        ...


class TagCapacityError(Exception):
    pass


class MemoryTagWriter:
    """Tag writer that keeps the last message in memory, with a fixed capacity."""

    def __init__(self, capacity: int = 492) -> None:
        self.capacity = capacity
        self.written: Optional[bytes] = None

    def write(self, ndef_message: bytes) -> None:
        if len(ndef_message) > self.capacity:
            raise TagCapacityError(
                f"Tag too small ({self.capacity} bytes). Need {len(ndef_message)}."
            )
        self.written = ndef_message


@dataclass
class IssueOutcome:
    signed: SignedPayload
    tag_json: str
    registration: Optional[RegisterResp] = None
    registration_error: Optional[str] = None
    tag_written: bool = False
    tag_error: Optional[str] = None

    @property
    def registered(self) -> bool:
        return self.registration is not None


class TreasuryIssuer:
    def __init__(
        self,
        signer: ProvenanceSigner,
        relay: Optional[RelayClient],
        writer: Optional[TagWriter],
        lang: str = "en",
    ) -> None:
        self.signer = signer
        self.relay = relay
        self.writer = writer
        self.lang = lang

    def issue(self, serial: Any, currency: Any, value: Any) -> IssueOutcome:
        signed = self.signer.sign(serial, currency, value)
        outcome = IssueOutcome(signed=signed, tag_json=payload_to_json(signed.payload))
        self._register(outcome)
        self._write(outcome)
        return outcome

    def _register(self, outcome: IssueOutcome) -> None:
        if self.relay is None:
            return
        payload = outcome.signed.payload
        try:
            outcome.registration = self.relay.register_bill(
                payload.serial,
                payload.currency,
                payload.value,
                pubkey_b64=outcome.signed.public_key_b64,
            )
        except BillRelayError as exc:
            logger.warning("Registration of %s failed: %s", payload.serial, exc.message)
            outcome.registration_error = exc.message

    def _write(self, outcome: IssueOutcome) -> None:
        if self.writer is None:
            return
        try:
            self.writer.write(encode_text_record(outcome.tag_json, self.lang))
        except Exception as exc:
            logger.warning("Tag write for %s failed: %s", outcome.signed.payload.serial, exc)
            outcome.tag_error = str(exc) or exc.__class__.__name__
            return
        outcome.tag_written = True
