"""Record store, AI extraction client and shared parsing helpers."""

from .extraction import ExtractionClient, encode_document
from .store import FirebaseRestStore, InMemoryStore, RecordStore
from .utils import format_report_date, parse_report_date, record_date, safe_float, to_number

__all__ = [
    "ExtractionClient",
    "encode_document",
    "FirebaseRestStore",
    "InMemoryStore",
    "RecordStore",
    "format_report_date",
    "parse_report_date",
    "record_date",
    "safe_float",
    "to_number",
]
