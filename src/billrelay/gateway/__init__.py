from billrelay.gateway.service import LedgerGateway, LookupOutcome

__all__ = ["LedgerGateway", "LookupOutcome"]
