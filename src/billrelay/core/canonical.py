"""Canonical bill message construction and content hashing."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from hashlib import sha3_256
from typing import Any, Mapping, Optional

from billrelay.core.errors import InvalidInput

HASH_PREFIX = "0x"
VALUE_FRACTION_DIGITS = 2
MAX_VALUE_DIGITS = 18

_CENTS = Decimal(1).scaleb(-VALUE_FRACTION_DIGITS)


@dataclass(frozen=True)
class BillInput:
    serial: str
    currency: str
    value: Optional[Decimal]
    pubkey_b64: str = ""


def normalize_serial(serial: Any) -> str:
    return serial.strip() if isinstance(serial, str) else ""


def normalize_currency(currency: Any) -> str:
    return currency.strip().upper() if isinstance(currency, str) else ""


def to_decimal(value: Any) -> Decimal:
    """Convert *value* to a finite :class:`Decimal` or raise :class:`InvalidInput`."""

    if isinstance(value, bool) or value is None:
        raise InvalidInput("Value must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidInput("Value must be finite")
        # str() keeps the shortest repr, so 10.1 stays 10.1
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as exc:
            raise InvalidInput("Value must be a number") from exc
    else:
        raise InvalidInput("Value must be a number")
    if not result.is_finite():
        raise InvalidInput("Value must be finite")
    return result


def format_value(value: Any) -> str:
    """Render a bill value with the fixed-precision encoding used in messages.

    Integral amounts are plain digits (``10``); other amounts carry exactly
    two fractional digits (``2.50``). Anything finer than a cent is rejected,
    as is anything with more than ``MAX_VALUE_DIGITS`` integer digits.
    """

    amount = to_decimal(value)
    if amount.adjusted() >= MAX_VALUE_DIGITS:
        raise InvalidInput("Value is not representable")
    if amount == amount.to_integral_value():
        return str(int(amount))
    try:
        quantized = amount.quantize(_CENTS)
    except InvalidOperation as exc:
        raise InvalidInput("Value is not representable") from exc
    if quantized != amount:
        raise InvalidInput(
            f"Value must have at most {VALUE_FRACTION_DIGITS} fractional digits"
        )
    return f"{quantized:f}"


def payload_value(value: Any) -> int | str:
    """Value as stored on a physical tag: an int when integral, else its encoding."""

    encoded = format_value(value)
    return int(encoded) if "." not in encoded else encoded


def canonical_message(serial: Any, currency: Any, value: Any) -> str:
    return (
        f"serial={normalize_serial(serial)}"
        f"|currency={normalize_currency(currency)}"
        f"|value={format_value(value)}"
    )


def compute_hash(message: str) -> str:
    """Return the ``0x``-prefixed SHA3-256 hex digest of *message*."""

    return HASH_PREFIX + sha3_256(message.encode("utf-8")).hexdigest()


def compute_bill_hash(serial: Any, currency: Any, value: Any) -> str:
    return compute_hash(canonical_message(serial, currency, value))


def normalize_bill_input(payload: Mapping[str, Any]) -> BillInput:
    """Leniently normalize a registration body.

    Non-string serial or currency become empty strings and an unparseable
    value becomes ``None`` so that validation can report a single message.
    """

    raw_value = payload.get("value")
    try:
        value: Optional[Decimal] = to_decimal(raw_value)
    except InvalidInput:
        value = None
    pubkey = payload.get("pubkeyB64")
    return BillInput(
        serial=normalize_serial(payload.get("serial")),
        currency=normalize_currency(payload.get("currency")),
        value=value,
        pubkey_b64=pubkey.strip() if isinstance(pubkey, str) else "",
    )
