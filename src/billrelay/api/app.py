from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from billrelay import __version__
from billrelay.config import GatewaySettings
from billrelay.core.canonical import normalize_bill_input
from billrelay.core.errors import BillRelayError, ChainError
from billrelay.gateway.service import LedgerGateway
from billrelay.ledger import build_ledger
from billrelay.observability import (
    bind_run_id,
    current_run_id,
    log_event,
    new_run_id,
    reset_run_id,
)

# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


class RegisterReq(BaseModel):
    """Registration body. Types are loose on purpose; normalization validates."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    serial: Any = None
    currency: Any = None
    value: Any = None
    pubkey_b64: Any = Field(default=None, alias="pubkeyB64")


class RegisterResp(BaseModel):
    ok: bool = True
    already: bool
    issued: bool = True
    serial: str
    billHash: str
    issuedAt: int
    txHash: Optional[str] = None
    blockNumber: Optional[int] = None


class BillResp(BaseModel):
    ok: bool = True
    issued: bool
    serial: str
    billHash: Optional[str] = None
    issuedAt: Optional[int] = None


class HealthResp(BaseModel):
    ok: bool = True
    treasuryAddress: str
    balance: str
    contract: str
    chainId: int


# -----------------------------------------------------------------------------
# Error rendering
# -----------------------------------------------------------------------------
def _error_body(message: str, **extra: Any) -> Dict[str, Any]:
    return {"ok": False, "error": message, **extra}


def _normalize_validation_errors(raw_errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    fields: List[Dict[str, str]] = []
    for err in raw_errors:
        loc_parts = [str(part) for part in err.get("loc", []) if part != "body"]
        path = ".".join(["request", *loc_parts]) if loc_parts else "request"
        fields.append({"path": path, "message": err.get("msg", "Invalid request")})
    return fields


@contextmanager
def _ledger_call(operation: str) -> Iterator[None]:
    """Let taxonomy errors through; anything else becomes a ChainError."""

    try:
        yield
    except BillRelayError as exc:
        log_event(f"{operation}.failed", level=logging.WARNING, error=exc.message)
        raise
    except Exception as exc:
        logger.exception("%s failed (run_id=%s)", operation, current_run_id())
        raise ChainError(str(exc) or exc.__class__.__name__) from exc


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------
def create_app(gateway: Optional[LedgerGateway] = None) -> FastAPI:
    """Build the relay application; without *gateway* one is built from env."""

    app = FastAPI(title="billrelay gateway", version=__version__)
    app.state.gateway = gateway
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def attach_run_id(request: Request, call_next):
        run_id = new_run_id()
        token = bind_run_id(run_id)
        log_event("request.start", method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
            response.headers["X-Run-ID"] = run_id
            log_event("request.end", path=request.url.path, status=response.status_code)
            return response
        finally:
            reset_run_id(token)

    @app.exception_handler(BillRelayError)
    async def handle_relay_error(request: Request, exc: BillRelayError):
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=_error_body(
                "Invalid request payload", fields=_normalize_validation_errors(exc.errors())
            ),
        )

    def get_gateway(request: Request) -> LedgerGateway:
        current = request.app.state.gateway
        if current is None:
            current = LedgerGateway(build_ledger(GatewaySettings.from_env()))
            request.app.state.gateway = current
        return current

    @app.get("/health", response_model=HealthResp)
    def health(gw: LedgerGateway = Depends(get_gateway)) -> HealthResp:
        with _ledger_call("health"):
            info = gw.health()
        return HealthResp(
            treasuryAddress=info.treasury_address,
            balance=info.balance,
            contract=info.contract,
            chainId=info.chain_id,
        )

    @app.post("/register", response_model=RegisterResp, response_model_exclude_none=True)
    def register(req: RegisterReq, gw: LedgerGateway = Depends(get_gateway)) -> Dict[str, Any]:
        bill = normalize_bill_input(req.model_dump(by_alias=True))
        if bill.pubkey_b64:
            log_event("register.pubkey", serial=bill.serial, pubkey_b64=bill.pubkey_b64)
        with _ledger_call("register"):
            result = gw.register_bill(bill.serial, bill.currency, bill.value)
        return result.to_response()

    @app.get("/bill", response_model=BillResp, response_model_exclude_none=True)
    def bill_by_query(
        serial: Optional[str] = Query(default=None), gw: LedgerGateway = Depends(get_gateway)
    ) -> Dict[str, Any]:
        with _ledger_call("lookup"):
            outcome = gw.lookup_bill(serial)
        return outcome.to_response()

    @app.get("/bill/{serial}", response_model=BillResp, response_model_exclude_none=True)
    def bill_by_path(
        serial: str,
        query_serial: Optional[str] = Query(default=None, alias="serial"),
        gw: LedgerGateway = Depends(get_gateway),
    ) -> Dict[str, Any]:
        # a blank path segment defers to ?serial=
        with _ledger_call("lookup"):
            outcome = gw.lookup_bill(serial if serial.strip() else query_serial)
        return outcome.to_response()

    return app


app = create_app()
