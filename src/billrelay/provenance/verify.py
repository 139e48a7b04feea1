"""Device-side verification of treasury tags against the last scan notification."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from billrelay.core.canonical import (
    canonical_message,
    format_value,
    normalize_currency,
    normalize_serial,
)
from billrelay.core.errors import InvalidInput
from billrelay.provenance.ndef import extract_json

logger = logging.getLogger(__name__)

PUBLIC_KEY_BYTES = 32
SIGNATURE_BYTES = 64


@dataclass(frozen=True)
class TagVerdict:
    ok: bool
    reason: str


@dataclass(frozen=True)
class ExpectedBill:
    serial: str
    currency: str
    value: str


def _b64(value: str, size: int) -> Optional[bytes]:
    try:
        raw = base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError):
        return None
    return raw if len(raw) == size else None


def verify_signature(payload: Mapping[str, Any], public_key_b64: str) -> bool:
    """Check the tag signature over the canonical message of its own fields."""

    key_raw = _b64(public_key_b64, PUBLIC_KEY_BYTES)
    sig_raw = _b64(str(payload.get("sig") or ""), SIGNATURE_BYTES)
    if key_raw is None or sig_raw is None:
        return False
    try:
        message = canonical_message(payload.get("serial"), payload.get("currency"), payload.get("value"))
    except InvalidInput:
        return False
    try:
        Ed25519PublicKey.from_public_bytes(key_raw).verify(sig_raw, message.encode("utf-8"))
    except InvalidSignature:
        return False
    return True


class TagVerifier:
    """Matches tags read off a note with the scan the phone announced."""

    def __init__(self, public_key_b64: str) -> None:
        self.public_key_b64 = public_key_b64
        self.expected: Optional[ExpectedBill] = None

    def expect(self, notification: Mapping[str, Any]) -> bool:
        """Arm the verifier from a scan notification; other messages are ignored."""

        if notification.get("type", "scan") != "scan":
            return False
        serial = normalize_serial(notification.get("serial"))
        currency = normalize_currency(notification.get("currency"))
        denomination = notification.get("denomination")
        valid_denomination = isinstance(denomination, int) and not isinstance(denomination, bool)
        if not serial or not currency or not valid_denomination or denomination <= 0:
            logger.info("Scan notification missing fields: %s", dict(notification))
            return False
        self.expected = ExpectedBill(serial=serial, currency=currency, value=format_value(denomination))
        return True

    def verify_tag(self, raw: bytes) -> TagVerdict:
        verdict = self._verdict(raw)
        logger.info("Tag verdict: %s", verdict.reason)
        if verdict.reason not in ("No JSON found", "Bad JSON"):
            self.expected = None
        return verdict

    def _verdict(self, raw: bytes) -> TagVerdict:
        text = extract_json(raw)
        if not text:
            return TagVerdict(False, "No JSON found")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            return TagVerdict(False, "Bad JSON")
        if not isinstance(payload, dict):
            return TagVerdict(False, "Bad JSON")

        if not str(payload.get("sig") or "").strip():
            return TagVerdict(False, "Missing sig")
        if not verify_signature(payload, self.public_key_b64):
            return TagVerdict(False, "INVALID SIG")

        expected = self.expected
        if expected is None:
            return TagVerdict(False, "No app data")
        if normalize_serial(payload.get("serial")) != expected.serial:
            return TagVerdict(False, "Serial mismatch")
        if normalize_currency(payload.get("currency")) != expected.currency:
            return TagVerdict(False, "Currency mismatch")
        if format_value(payload.get("value")) != expected.value:
            return TagVerdict(False, "Value mismatch")
        return TagVerdict(True, "OK")
