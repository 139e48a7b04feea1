"""Error taxonomy shared by the gateway, the ledger adapters and the SDK."""

from __future__ import annotations


class BillRelayError(Exception):
    """Base class for every failure surfaced by billrelay.

    ``status_code`` is the HTTP status the gateway renders the error with.
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(BillRelayError):
    """Missing or malformed bill fields, or a non-positive value."""

    status_code = 400


class ServiceUnavailable(BillRelayError):
    """The ledger provider could not be reached."""

    status_code = 503


class ChainError(BillRelayError):
    """A ledger call failed or was reverted."""

    status_code = 500


class DuplicateSerial(ChainError):
    """The ledger rejected a registration because the serial is already committed."""

    def __init__(self, serial: str) -> None:
        super().__init__(f"Serial already registered: {serial}")
        self.serial = serial


class DecodeError(BillRelayError):
    """A response or tag payload could not be decoded."""

    status_code = 502


class LookupTimeout(BillRelayError):
    """A relay lookup exceeded its time bound."""

    status_code = 504


class RelayError(BillRelayError):
    """The relay answered a client call with a failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
