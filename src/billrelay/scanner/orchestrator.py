"""Scan cycle sequencing on the client.

Every accepted extraction becomes the current :class:`ScanRequest`. Its scan
notification is sent right away; when ledger checking is on, a lookup runs as
a separate task and its chain notification is sent only if the request is
still current when the lookup finishes. Older lookups run to completion and
are dropped.

All transport writes go through one ``asyncio.Lock`` so that a request's scan
and chain notifications are never split by another request's messages.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import uuid
from enum import Enum
from typing import Any, Optional, Protocol, Set

from billrelay.config import DEFAULT_LOOKUP_TIMEOUT
from billrelay.core.canonical import normalize_currency, normalize_serial
from billrelay.core.errors import LookupTimeout
from billrelay.core.types import BanknoteFields, Failed, LookupResult, ScanRequest
from billrelay.observability import log_event
from billrelay.scanner.extraction import FieldExtractor
from billrelay.scanner.notifications import chain_notification, scan_notification, to_wire
from billrelay.scanner.transport import Transport

logger = logging.getLogger(__name__)


class ScanState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    EXTRACTING = "extracting"
    LEDGER_CHECKING = "ledger_checking"
    NOTIFYING = "notifying"


class LedgerLookup(Protocol):
    def lookup_bill(self, serial: str) -> Any:
        """Return a LookupResult, or an awaitable of one."""
        ...


class ScanOrchestrator:
    def __init__(
        self,
        relay: LedgerLookup,
        transport: Transport,
        extractor: Optional[FieldExtractor] = None,
        blockchain_check_enabled: bool = False,
        lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT,
    ) -> None:
        self.relay = relay
        self.transport = transport
        self.extractor = extractor
        self.blockchain_check_enabled = blockchain_check_enabled
        self.lookup_timeout = lookup_timeout
        self.state = ScanState.IDLE
        self._lane = asyncio.Lock()
        self._last_key: Optional[tuple] = None
        self._current_id: Optional[str] = None
        self._lookups: Set[asyncio.Task] = set()

    @property
    def current_request_id(self) -> Optional[str]:
        return self._current_id

    def reset(self) -> None:
        """Forget the last accepted scan so the next identical one is sent again."""

        self._last_key = None

    async def capture_and_extract(self, image: bytes) -> Optional[ScanRequest]:
        if self.extractor is None:
            raise RuntimeError("No field extractor configured")
        self.state = ScanState.CAPTURING
        try:
            self.state = ScanState.EXTRACTING
            fields = await self.extractor.extract(image)
        except Exception:
            logger.exception("Field extraction failed")
            self.state = ScanState.IDLE
            raise
        return await self.on_extraction(fields)

    async def on_extraction(self, fields: BanknoteFields) -> Optional[ScanRequest]:
        serial = normalize_serial(fields.serial)
        currency = normalize_currency(fields.currency)
        denomination = fields.denomination or 0
        if not serial or not currency or denomination <= 0:
            self.state = ScanState.IDLE
            return None

        key = (serial, currency, denomination, self.blockchain_check_enabled)
        if key == self._last_key:
            log_event("scan.duplicate_suppressed", serial=serial)
            return None
        self._last_key = key

        request = ScanRequest(
            id=uuid.uuid4().hex,
            serial=serial,
            currency=currency,
            denomination=denomination,
            blockchain_check_enabled=self.blockchain_check_enabled,
        )
        self._current_id = request.id

        async with self._lane:
            self.state = ScanState.NOTIFYING
            self._emit(scan_notification(request))

        if not request.blockchain_check_enabled:
            self.state = ScanState.IDLE
            return request

        self.state = ScanState.LEDGER_CHECKING
        task = asyncio.create_task(self._check_ledger(request))
        self._lookups.add(task)
        task.add_done_callback(self._lookups.discard)
        return request

    async def wait_idle(self) -> None:
        """Wait for every outstanding ledger lookup, including superseded ones."""

        while self._lookups:
            await asyncio.gather(*list(self._lookups))

    async def _check_ledger(self, request: ScanRequest) -> None:
        result = await self._lookup(request.serial)
        async with self._lane:
            if request.id != self._current_id:
                log_event("scan.superseded", request_id=request.id, serial=request.serial)
                return
            self.state = ScanState.NOTIFYING
            self._emit(chain_notification(request, result))
            self.state = ScanState.IDLE

    async def _lookup(self, serial: str) -> LookupResult:
        if inspect.iscoroutinefunction(self.relay.lookup_bill):
            call = self.relay.lookup_bill(serial)
        else:
            call = asyncio.to_thread(self.relay.lookup_bill, serial)
        try:
            try:
                return await asyncio.wait_for(call, timeout=self.lookup_timeout)
            except asyncio.TimeoutError as exc:
                raise LookupTimeout(f"Timeout after {self.lookup_timeout:g}s") from exc
        except Exception as exc:
            logger.warning("Ledger lookup for %s raised: %s", serial, exc)
            return Failed(str(exc) or exc.__class__.__name__)

    def _emit(self, notification: dict) -> None:
        self.transport.send(to_wire(notification))
        log_event("scan.sent", kind=notification["type"], serial=notification["serial"])
