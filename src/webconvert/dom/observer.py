"""Change notification: turns document mutations into batched change events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional, Protocol

from bs4.element import PageElement

from .filters import is_text_segment

if TYPE_CHECKING:
    from ..engine.host import HostLoop
    from .document import Document

logger = logging.getLogger(__name__)


class ChangeKind(Enum):
    """Kind of tree change reported to the engine."""

    STRUCTURAL_INSERT = "structural-insert"
    STRUCTURAL_REMOVE = "structural-remove"
    CONTENT_CHANGE = "content-change"


@dataclass(frozen=True, eq=False)
class ChangeEvent:
    """One tree change.

    ``node`` is the inserted subtree root, the removed node, or the changed
    text segment, depending on ``kind``.
    """

    kind: ChangeKind
    node: PageElement


ChangeListener = Callable[[List[ChangeEvent]], None]


class ChangeNotificationAdapter(Protocol):
    """Source of batched change events consumed by the engine."""

    def connect(self, listener: ChangeListener) -> None:
        """Start delivering event batches to ``listener``."""
        ...

    def disconnect(self) -> None:
        """Stop recording and delivering events."""
        ...


class DocumentObserver:
    """Records mutations made through a ``Document`` and delivers them in batches.

    Records accumulate synchronously; one delivery per batch is scheduled
    with ``loop.call_soon`` so a burst of mutations arrives as a single list,
    in mutation order.
    """

    def __init__(self, document: "Document", loop: "HostLoop") -> None:
        self.document = document
        self.loop = loop
        self._listener: Optional[ChangeListener] = None
        self._records: List[ChangeEvent] = []
        self._delivery_scheduled = False

    @property
    def connected(self) -> bool:
        return self._listener is not None

    def connect(self, listener: ChangeListener) -> None:
        self._listener = listener
        self.document.add_mutation_listener(self._record)

    def disconnect(self) -> None:
        self.document.remove_mutation_listener(self._record)
        self._listener = None
        self._records.clear()

    def take_records(self) -> List[ChangeEvent]:
        """Drain pending records without delivering them."""
        records, self._records = self._records, []
        return records

    def _record(self, kind: str, node: PageElement) -> None:
        if self._listener is None:
            return
        if kind == "remove":
            event = ChangeEvent(ChangeKind.STRUCTURAL_REMOVE, node)
        elif kind == "text" or is_text_segment(node):
            event = ChangeEvent(ChangeKind.CONTENT_CHANGE, node)
        else:
            event = ChangeEvent(ChangeKind.STRUCTURAL_INSERT, node)
        self._records.append(event)

        if not self._delivery_scheduled:
            self._delivery_scheduled = True
            self.loop.call_soon(self._deliver)

    def _deliver(self) -> None:
        self._delivery_scheduled = False
        listener = self._listener
        if listener is None or not self._records:
            return
        batch = self.take_records()
        logger.debug(f"Delivering {len(batch)} change records")
        listener(batch)


__all__ = [
    "ChangeKind",
    "ChangeEvent",
    "ChangeListener",
    "ChangeNotificationAdapter",
    "DocumentObserver",
]
