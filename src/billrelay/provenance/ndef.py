"""NDEF text-record encoding for treasury tags."""

from __future__ import annotations

import json

from billrelay.core.errors import DecodeError
from billrelay.core.types import TreasuryPayload

TEXT_RECORD_TYPE = b"T"
TNF_WELL_KNOWN = 0x01

# record header flags
_MB = 0x80
_ME = 0x40
_SR = 0x10

_UTF16_FLAG = 0x80
_LANG_LENGTH_MASK = 0x3F


def payload_to_json(payload: TreasuryPayload) -> str:
    return json.dumps(payload.to_dict(), separators=(",", ":"), ensure_ascii=False)


def encode_text_payload(text: str, lang: str = "en") -> bytes:
    """Text record payload: status byte (language-code length), language, UTF-8 text."""

    lang_bytes = lang.encode("ascii")
    if len(lang_bytes) > _LANG_LENGTH_MASK:
        raise ValueError("Language code too long")
    status = len(lang_bytes) & _LANG_LENGTH_MASK
    return bytes([status]) + lang_bytes + text.encode("utf-8")


def decode_text_payload(data: bytes) -> tuple[str, str]:
    if not data:
        raise DecodeError("Empty text record")
    status = data[0]
    if status & _UTF16_FLAG:
        raise DecodeError("UTF-16 text records are not supported")
    lang_len = status & _LANG_LENGTH_MASK
    if len(data) < 1 + lang_len:
        raise DecodeError("Truncated text record")
    try:
        lang = data[1 : 1 + lang_len].decode("ascii")
        text = data[1 + lang_len :].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"Text record is not valid UTF-8: {exc}") from exc
    return lang, text


def encode_text_record(text: str, lang: str = "en") -> bytes:
    """Encode a single-record NDEF message holding one well-known text record."""

    payload = encode_text_payload(text, lang)
    header = _MB | _ME | TNF_WELL_KNOWN
    if len(payload) < 256:
        return (
            bytes([header | _SR, len(TEXT_RECORD_TYPE), len(payload)])
            + TEXT_RECORD_TYPE
            + payload
        )
    return (
        bytes([header, len(TEXT_RECORD_TYPE)])
        + len(payload).to_bytes(4, "big")
        + TEXT_RECORD_TYPE
        + payload
    )


def extract_json(raw: bytes) -> str:
    """Pull the JSON object out of raw tag memory.

    Takes the span from the first ``{`` to the last ``}``, drops NUL bytes
    and trims whitespace. Returns an empty string when no object is found.
    """

    start = raw.find(b"{")
    if start < 0:
        return ""
    end = raw.rfind(b"}")
    if end <= start:
        return ""
    span = raw[start : end + 1].replace(b"\x00", b"")
    return span.decode("utf-8", errors="replace").strip()
