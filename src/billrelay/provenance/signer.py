"""Ed25519 signing of canonical bill messages for physical tags.

Each install signs with its own key. A seed may be supplied explicitly or
through ``BILLRELAY_SIGNING_SEED``; otherwise the key lives in a per-install
key file that is generated on first use.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from billrelay.config import SignerSettings
from billrelay.core.canonical import (
    canonical_message,
    normalize_currency,
    normalize_serial,
    payload_value,
)
from billrelay.core.errors import InvalidInput
from billrelay.core.types import TreasuryPayload

logger = logging.getLogger(__name__)

SEED_BYTES = 32


@dataclass(frozen=True)
class SignedPayload:
    payload: TreasuryPayload
    public_key_b64: str
    message: str


def _raw_private_bytes(key: Ed25519PrivateKey) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _key_from_seed(seed: bytes) -> Ed25519PrivateKey:
    if len(seed) != SEED_BYTES:
        raise ValueError(f"Signing seed must be {SEED_BYTES} bytes, got {len(seed)}")
    if not any(seed):
        raise ValueError("Refusing an all-zero signing seed")
    return Ed25519PrivateKey.from_private_bytes(seed)


def decode_seed(seed_b64: str) -> bytes:
    try:
        return base64.b64decode(seed_b64.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Signing seed is not valid base64") from exc


def load_or_create_key(path: Path) -> Ed25519PrivateKey:
    """Load the install key from *path*, generating and persisting one if absent."""

    if path.exists():
        return _key_from_seed(path.read_bytes())
    key = Ed25519PrivateKey.generate()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "wb") as handle:
        handle.write(_raw_private_bytes(key))
    logger.info("Generated new treasury signing key at %s", path)
    return key


class ProvenanceSigner:
    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._key = private_key
        self._public_raw = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    @classmethod
    def from_seed(cls, seed: bytes) -> "ProvenanceSigner":
        return cls(_key_from_seed(seed))

    @classmethod
    def from_settings(cls, settings: Optional[SignerSettings] = None) -> "ProvenanceSigner":
        settings = settings or SignerSettings.from_env()
        if settings.seed_b64:
            return cls.from_seed(decode_seed(settings.seed_b64))
        return cls(load_or_create_key(settings.key_path))

    @property
    def public_key_b64(self) -> str:
        return base64.b64encode(self._public_raw).decode("ascii")

    def sign_message(self, message: str) -> str:
        return base64.b64encode(self._key.sign(message.encode("utf-8"))).decode("ascii")

    def sign(self, serial: Any, currency: Any, value: Any) -> SignedPayload:
        serial_norm = normalize_serial(serial)
        currency_norm = normalize_currency(currency)
        if not serial_norm or not currency_norm:
            raise InvalidInput("Missing serial/currency/value")
        message = canonical_message(serial_norm, currency_norm, value)
        payload = TreasuryPayload(
            serial=serial_norm,
            currency=currency_norm,
            value=payload_value(value),
            sig=self.sign_message(message),
        )
        return SignedPayload(payload=payload, public_key_b64=self.public_key_b64, message=message)
