"""Run-scoped logging helpers shared by the gateway and the scan client."""

from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar
from typing import Optional

logger = logging.getLogger("billrelay")

_run_id_ctx: ContextVar[Optional[str]] = ContextVar("run_id", default=None)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler for command-line entry points."""

    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def new_run_id() -> str:
    """Generate a run identifier without binding it."""

    return uuid.uuid4().hex


def bind_run_id(value: Optional[str]) -> ContextVar.Token | None:
    """Bind a run_id for the current context and return the reset token."""

    if value is None:
        return None
    return _run_id_ctx.set(value)


def reset_run_id(token: Optional[ContextVar.Token]) -> None:
    if token is None:
        return
    _run_id_ctx.reset(token)


def current_run_id() -> Optional[str]:
    return _run_id_ctx.get()


def log_event(message: str, level: int = logging.INFO, **extra: object) -> None:
    """Log an event with the active run_id attached as a ``payload`` extra."""

    payload = {"run_id": current_run_id(), **extra}
    logger.log(level, "%s %s", message, _format_fields(extra), extra={"payload": payload})


def _format_fields(fields: dict) -> str:
    return " ".join(f"{key}={value}" for key, value in fields.items())
