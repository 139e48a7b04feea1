"""Outbound transport to the verification device."""

from __future__ import annotations

import logging
from typing import List, Protocol

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def send(self, message: str) -> None:
        ...


class RecordingTransport:
    """Keeps every message in order; used by tests and dry runs."""

    def __init__(self) -> None:
        self.messages: List[str] = []

    def send(self, message: str) -> None:
        self.messages.append(message)


class LoggingTransport:
    def send(self, message: str) -> None:
        logger.info("transport send: %s", message)
