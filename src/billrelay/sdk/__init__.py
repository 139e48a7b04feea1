"""Client SDK for the billrelay gateway."""

from billrelay.sdk.client import HealthResp, LookupResp, RegisterResp, RelayClient, interpret_lookup

__all__ = ["HealthResp", "LookupResp", "RegisterResp", "RelayClient", "interpret_lookup"]
