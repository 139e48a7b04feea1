"""Boundary with the field-extraction service."""

from __future__ import annotations

import json
from typing import Any, Optional, Protocol

from billrelay.core.errors import DecodeError
from billrelay.core.types import BanknoteFields


class FieldExtractor(Protocol):
    async def extract(self, image: bytes) -> BanknoteFields:
        ...


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def parse_extraction_text(text: str) -> BanknoteFields:
    """Decode the model's answer, tolerating prose around the JSON object."""

    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        raise DecodeError("No JSON object in extraction response")
    try:
        data = json.loads(text[start : end + 1])
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Extraction response is not valid JSON: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise DecodeError("Extraction response is not a JSON object")
    return BanknoteFields(
        currency=_optional_str(data.get("currency")),
        denomination=_optional_int(data.get("denomination")),
        serial=_optional_str(data.get("serial")),
    )
