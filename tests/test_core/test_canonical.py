from decimal import Decimal

import pytest

from billrelay.core.canonical import (
    canonical_message,
    compute_bill_hash,
    compute_hash,
    format_value,
    normalize_bill_input,
    payload_value,
)
from billrelay.core.errors import InvalidInput


def test_canonical_message_fixed_format() -> None:
    assert canonical_message("TEST123", "USD", 10) == "serial=TEST123|currency=USD|value=10"


def test_canonical_message_normalizes_fields() -> None:
    assert canonical_message("  AB12 \n", " usd ", 5) == "serial=AB12|currency=USD|value=5"


def test_canonical_message_does_not_escape() -> None:
    assert canonical_message("A|B=C", "EUR", 1) == "serial=A|B=C|currency=EUR|value=1"


@pytest.mark.parametrize(
    "value, expected",
    [
        (10, "10"),
        (10.0, "10"),
        ("10.00", "10"),
        (Decimal("10"), "10"),
        (2.5, "2.50"),
        ("0.1", "0.10"),
        (10.1, "10.10"),
        ("1e2", "100"),
    ],
)
def test_format_value_fixed_precision(value, expected) -> None:
    assert format_value(value) == expected


@pytest.mark.parametrize("value", [float("nan"), float("inf"), "abc", None, True, 1.005, "0.001"])
def test_format_value_rejects_unrepresentable(value) -> None:
    with pytest.raises(InvalidInput):
        format_value(value)


def test_payload_value_keeps_ints() -> None:
    assert payload_value(20) == 20
    assert payload_value("20.0") == 20
    assert payload_value(2.5) == "2.50"


def test_hash_is_prefixed_sha3_digest() -> None:
    digest = compute_hash("serial=TEST123|currency=USD|value=10")
    assert digest.startswith("0x")
    assert len(digest) == 66
    int(digest[2:], 16)


def test_hash_is_deterministic() -> None:
    first = compute_bill_hash("TEST123", "USD", 10)
    assert all(compute_bill_hash("TEST123", "USD", 10) == first for _ in range(5))
    assert compute_bill_hash(" TEST123 ", "usd", "10.00") == first


@pytest.mark.parametrize(
    "serial, currency, value",
    [("TEST124", "USD", 10), ("TEST123", "EUR", 10), ("TEST123", "USD", 20), ("TEST123", "USD", 10.5)],
)
def test_hash_changes_with_any_field(serial, currency, value) -> None:
    assert compute_bill_hash(serial, currency, value) != compute_bill_hash("TEST123", "USD", 10)


def test_normalize_bill_input_is_lenient() -> None:
    bill = normalize_bill_input({"serial": 123, "currency": " usd ", "value": "10", "pubkeyB64": " key "})
    assert bill.serial == ""
    assert bill.currency == "USD"
    assert bill.value == Decimal("10")
    assert bill.pubkey_b64 == "key"

    missing = normalize_bill_input({"serial": "X", "currency": "USD", "value": "ten"})
    assert missing.value is None
    assert missing.pubkey_b64 == ""


@pytest.mark.parametrize("value", ["1e5000", "1e30000000", Decimal("1E+18"), 10**19])
def test_format_value_rejects_huge_magnitudes(value) -> None:
    with pytest.raises(InvalidInput) as excinfo:
        format_value(value)
    assert excinfo.value.message == "Value is not representable"


def test_format_value_accepts_eighteen_digits() -> None:
    assert format_value("999999999999999999") == "999999999999999999"
    assert format_value("999999999999999999.99") == "999999999999999999.99"
