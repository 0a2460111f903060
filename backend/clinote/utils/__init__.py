from .document import (
    DocumentValue,
    create_empty_document,
    document_to_plain_text,
    text_to_document,
)
from .id_generator import generate_id, imported_note_id
from .logging import get_logger, setup_logging
from .time_utils import get_timestamp_ms

__all__ = [
    "DocumentValue",
    "create_empty_document",
    "document_to_plain_text",
    "text_to_document",
    "generate_id",
    "imported_note_id",
    "get_logger",
    "setup_logging",
    "get_timestamp_ms",
]
