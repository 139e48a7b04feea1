import base64
import os
import stat

import pytest

from billrelay.config import SignerSettings
from billrelay.core.errors import InvalidInput
from billrelay.provenance.ndef import payload_to_json
from billrelay.provenance.signer import ProvenanceSigner, decode_seed, load_or_create_key
from billrelay.provenance.verify import verify_signature

SEED = bytes(range(1, 33))


def test_sign_produces_verifiable_payload():
    signer = ProvenanceSigner.from_seed(SEED)
    signed = signer.sign(" TEST123 ", "usd", 10)

    assert signed.message == "serial=TEST123|currency=USD|value=10"
    assert signed.payload.serial == "TEST123"
    assert signed.payload.value == 10
    assert len(base64.b64decode(signed.payload.sig)) == 64
    assert verify_signature(signed.payload.to_dict(), signed.public_key_b64)


def test_signing_is_deterministic_per_key():
    first = ProvenanceSigner.from_seed(SEED).sign("A1", "USD", "20.00")
    second = ProvenanceSigner.from_seed(SEED).sign("A1", "USD", 20)
    assert first.payload == second.payload
    assert payload_to_json(first.payload) == f'{{"serial":"A1","currency":"USD","value":20,"sig":"{first.payload.sig}"}}'


def test_fractional_value_is_signed_as_string():
    signed = ProvenanceSigner.from_seed(SEED).sign("A1", "USD", 2.5)
    assert signed.payload.value == "2.50"
    assert signed.message.endswith("value=2.50")


def test_tampered_payload_fails_verification():
    signed = ProvenanceSigner.from_seed(SEED).sign("A1", "USD", 20)
    tampered = {**signed.payload.to_dict(), "value": 100}
    assert not verify_signature(tampered, signed.public_key_b64)

    other_key = ProvenanceSigner.from_seed(bytes(range(2, 34))).public_key_b64
    assert not verify_signature(signed.payload.to_dict(), other_key)
    assert not verify_signature(signed.payload.to_dict(), "not-base64!")


@pytest.mark.parametrize("seed", [bytes(32), b"short"])
def test_rejects_weak_or_malformed_seed(seed):
    with pytest.raises(ValueError):
        ProvenanceSigner.from_seed(seed)


def test_sign_requires_serial_and_currency():
    signer = ProvenanceSigner.from_seed(SEED)
    with pytest.raises(InvalidInput):
        signer.sign("", "USD", 10)
    with pytest.raises(InvalidInput):
        signer.sign("A1", "USD", 1.234)


def test_decode_seed():
    assert decode_seed(base64.b64encode(SEED).decode()) == SEED
    with pytest.raises(ValueError):
        decode_seed("***")


def test_from_settings_prefers_seed(tmp_path):
    settings = SignerSettings(seed_b64=base64.b64encode(SEED).decode(), key_path=tmp_path / "key")
    signer = ProvenanceSigner.from_settings(settings)
    assert signer.public_key_b64 == ProvenanceSigner.from_seed(SEED).public_key_b64
    assert not (tmp_path / "key").exists()


def test_key_file_created_once(tmp_path):
    path = tmp_path / "keys" / "treasury.key"
    created = load_or_create_key(path)
    reloaded = ProvenanceSigner(load_or_create_key(path))

    assert ProvenanceSigner(created).public_key_b64 == reloaded.public_key_b64
    assert len(path.read_bytes()) == 32
    if os.name == "posix":
        assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_from_settings_uses_key_file(tmp_path):
    settings = SignerSettings(seed_b64=None, key_path=tmp_path / "k")
    first = ProvenanceSigner.from_settings(settings)
    second = ProvenanceSigner.from_settings(settings)
    assert first.public_key_b64 == second.public_key_b64
