"""Scan and chain notifications sent to the verification device."""

from __future__ import annotations

import json
from typing import Any, Dict

from billrelay.core.types import Failed, Issued, LookupResult, NotIssued, ScanRequest

HASH_DISPLAY_LIMIT = 18
ERROR_DISPLAY_LIMIT = 60
ELLIPSIS = "..."


def truncate(text: str, limit: int) -> str:
    return text[:limit] + ELLIPSIS if len(text) > limit else text


def scan_notification(request: ScanRequest) -> Dict[str, Any]:
    return {
        "type": "scan",
        "serial": request.serial,
        "currency": request.currency,
        "denomination": request.denomination,
        "blockchain_check": request.blockchain_check_enabled,
    }


def chain_notification(request: ScanRequest, result: LookupResult) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"type": "chain", "serial": request.serial}
    if isinstance(result, Issued):
        payload.update(
            ok=True,
            issued=True,
            hash=truncate(result.hash, HASH_DISPLAY_LIMIT),
            issuedAt=result.issued_at,
        )
    elif isinstance(result, NotIssued):
        payload.update(ok=True, issued=False)
    elif isinstance(result, Failed):
        payload.update(ok=False, issued=False, error=truncate(result.message, ERROR_DISPLAY_LIMIT))
    else:
        raise TypeError(f"Unknown lookup result: {result!r}")
    return payload


def to_wire(notification: Dict[str, Any]) -> str:
    return json.dumps(notification, separators=(",", ":"), ensure_ascii=False)
