"""Document tree binding: segments, containers, skip filter and change events."""

from .document import Document, parse_fragment
from .filters import (
    ORIGINAL_TEXT_ATTR,
    PROCESSED_ATTR,
    SKIPPED_TAGS,
    is_editable,
    is_processed,
    is_text_segment,
    should_skip,
)
from .observer import ChangeEvent, ChangeKind, ChangeNotificationAdapter, DocumentObserver

__all__ = [
    "Document",
    "parse_fragment",
    "ORIGINAL_TEXT_ATTR",
    "PROCESSED_ATTR",
    "SKIPPED_TAGS",
    "is_editable",
    "is_processed",
    "is_text_segment",
    "should_skip",
    "ChangeEvent",
    "ChangeKind",
    "ChangeNotificationAdapter",
    "DocumentObserver",
]
