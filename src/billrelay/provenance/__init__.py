"""Signed physical-tag payloads: signing, encoding, verification and issuance."""

from billrelay.provenance.issuance import IssueOutcome, MemoryTagWriter, TagWriter, TreasuryIssuer
from billrelay.provenance.ndef import (
    decode_text_payload,
    encode_text_payload,
    encode_text_record,
    extract_json,
    payload_to_json,
)
from billrelay.provenance.signer import ProvenanceSigner, SignedPayload
from billrelay.provenance.verify import TagVerdict, TagVerifier, verify_signature

__all__ = [
    "IssueOutcome",
    "MemoryTagWriter",
    "TagWriter",
    "TreasuryIssuer",
    "decode_text_payload",
    "encode_text_payload",
    "encode_text_record",
    "extract_json",
    "payload_to_json",
    "ProvenanceSigner",
    "SignedPayload",
    "TagVerdict",
    "TagVerifier",
    "verify_signature",
]
