from billrelay.core.types import Failed, Issued, NotIssued, ScanRequest
from billrelay.scanner.notifications import chain_notification, scan_notification, to_wire, truncate

REQUEST = ScanRequest(id="r1", serial="TEST123", currency="USD", denomination=10, blockchain_check_enabled=True)


def test_truncate_boundaries():
    assert truncate("a" * 18, 18) == "a" * 18
    assert truncate("a" * 19, 18) == "a" * 18 + "..."
    assert truncate("", 60) == ""


def test_short_values_are_not_truncated():
    issued = chain_notification(REQUEST, Issued(hash="0x1234", issued_at=3))
    assert issued["hash"] == "0x1234"

    failed = chain_notification(REQUEST, Failed("Timeout after 6s"))
    assert failed == {"type": "chain", "serial": "TEST123", "ok": False, "issued": False, "error": "Timeout after 6s"}


def test_not_issued_notification():
    assert chain_notification(REQUEST, NotIssued()) == {
        "type": "chain",
        "serial": "TEST123",
        "ok": True,
        "issued": False,
    }


def test_wire_format_is_compact_json():
    assert to_wire(scan_notification(REQUEST)) == (
        '{"type":"scan","serial":"TEST123","currency":"USD","denomination":10,"blockchain_check":true}'
    )
