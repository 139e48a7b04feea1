"""Client-side scan orchestration."""

from billrelay.scanner.extraction import FieldExtractor, parse_extraction_text
from billrelay.scanner.notifications import chain_notification, scan_notification, to_wire, truncate
from billrelay.scanner.orchestrator import ScanOrchestrator, ScanState
from billrelay.scanner.transport import LoggingTransport, RecordingTransport, Transport

__all__ = [
    "FieldExtractor",
    "parse_extraction_text",
    "chain_notification",
    "scan_notification",
    "to_wire",
    "truncate",
    "ScanOrchestrator",
    "ScanState",
    "LoggingTransport",
    "RecordingTransport",
    "Transport",
]
