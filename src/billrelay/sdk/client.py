"""Typed Python SDK for the billrelay gateway."""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from billrelay.config import RelayConfig
from billrelay.core.errors import RelayError
from billrelay.core.types import Failed, Issued, LookupResult, NotIssued

logger = logging.getLogger(__name__)


class LookupResp(BaseModel):
    ok: Optional[bool] = None
    issued: Optional[bool] = None
    serial: Optional[str] = None
    billHash: Optional[str] = None
    issuedAt: Optional[int] = None
    error: Optional[str] = None


class RegisterResp(BaseModel):
    ok: bool
    already: Optional[bool] = None
    issued: Optional[bool] = None
    serial: Optional[str] = None
    billHash: Optional[str] = None
    issuedAt: Optional[int] = None
    txHash: Optional[str] = None
    blockNumber: Optional[int] = None
    error: Optional[str] = None


class HealthResp(BaseModel):
    ok: bool
    treasuryAddress: Optional[str] = None
    balance: Optional[str] = None
    contract: Optional[str] = None
    chainId: Optional[int] = None
    error: Optional[str] = None


def interpret_lookup(resp: LookupResp) -> LookupResult:
    """Map a decoded lookup body onto a :data:`LookupResult`."""

    if resp.ok is False:
        return Failed(resp.error or "Relay ok=false")
    if resp.issued is False:
        return NotIssued()
    if resp.issued is True:
        if resp.billHash is None or resp.issuedAt is None:
            return Failed("Issued but missing billHash/issuedAt")
        return Issued(hash=resp.billHash, issued_at=resp.issuedAt)
    # older relays omitted the flag and only sent the record fields
    if resp.billHash is not None and resp.issuedAt is not None:
        return Issued(hash=resp.billHash, issued_at=resp.issuedAt)
    return Failed("Lookup response missing issued flag")


class RelayClient:
    """Synchronous client for the relay gateway.

    ``session`` can be any requests-compatible object, which lets tests pass
    a FastAPI ``TestClient`` bound to the app.
    """

    def __init__(self, cfg: Optional[RelayConfig] = None, session: Any = None) -> None:
        self.cfg = cfg or RelayConfig()
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self.cfg.resolved_base_url

    @property
    def timeout(self) -> float:
        return self.cfg.resolved_timeout

    def lookup_bill(self, serial: str) -> LookupResult:
        """Look *serial* up on the relay. Never raises; failures become :class:`Failed`."""

        url = f"{self.base_url}/bill/{quote(serial, safe='')}"
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.Timeout:
            return Failed(f"Timeout after {self.timeout:g}s")
        except (requests.RequestException, OSError) as exc:
            logger.info("Relay lookup for %s failed: %s", serial, exc)
            return Failed(str(exc) or exc.__class__.__name__)

        body = response.text
        if not 200 <= response.status_code < 300:
            return Failed(f"HTTP {response.status_code}: {body or '(no body)'}")
        try:
            decoded = LookupResp.model_validate(response.json())
        except (ValueError, ValidationError):
            return Failed(f"Decode failed: {body or '(unreadable)'}")
        return interpret_lookup(decoded)

    def register_bill(
        self,
        serial: str,
        currency: str,
        value: Any,
        pubkey_b64: Optional[str] = None,
    ) -> RegisterResp:
        """Register a bill on the ledger through the relay.

        Args:
            serial: Banknote serial number.
            currency: ISO currency code.
            value: Face value; ints and decimal strings are accepted.
            pubkey_b64: Optional signer public key, logged by the relay.
        Returns:
            Parsed :class:`RegisterResp`.
        Raises:
            RelayError: on transport errors, non-2xx status or ``ok: false``.
        """

        payload: dict = {"serial": serial, "currency": currency, "value": value}
        if pubkey_b64:
            payload["pubkeyB64"] = pubkey_b64
        response = self._request("post", "/register", json=payload)
        decoded = self._decode(response, RegisterResp)
        if not decoded.ok:
            raise RelayError(decoded.error or "Relay ok=false", status_code=response.status_code)
        return decoded

    def health(self) -> HealthResp:
        response = self._request("get", "/health")
        return self._decode(response, HealthResp)

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            return getattr(self._session, method)(
                f"{self.base_url}{path}", timeout=self.timeout, **kwargs
            )
        except requests.Timeout as exc:
            raise RelayError(f"Timeout after {self.timeout:g}s", status_code=504) from exc
        except (requests.RequestException, OSError) as exc:
            raise RelayError(str(exc) or exc.__class__.__name__, status_code=503) from exc

    @staticmethod
    def _decode(response: Any, model: type[BaseModel]) -> Any:
        try:
            data = response.json()
        except ValueError as exc:
            raise RelayError(
                f"HTTP {response.status_code}: {response.text or '(no body)'}",
                status_code=response.status_code,
            ) from exc
        if not 200 <= response.status_code < 300:
            message = data.get("error") if isinstance(data, dict) else None
            raise RelayError(
                message or f"HTTP {response.status_code}", status_code=response.status_code
            )
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise RelayError(f"Decode failed: {response.text}", status_code=502) from exc
