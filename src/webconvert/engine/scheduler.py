"""Mutation engine: turns change events into batched, budgeted conversion passes.

Flow: change events -> skip filter -> pending set -> idle-time flush ->
converter registry -> write back + container stamp. At most one flush is
outstanding at any time; a flush that runs out of budget re-queues the
rest of its batch and requests exactly one follow-up flush.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from bs4.element import NavigableString, PageElement, Tag

from ..converters.base import Converter
from ..converters.registry import ConverterRegistry
from ..core.errors import EngineStateError
from ..dom.document import Document
from ..dom.filters import should_skip
from ..dom.observer import ChangeEvent, ChangeKind, ChangeNotificationAdapter, DocumentObserver
from .host import Deadline, HostLoop, ManualHostLoop
from .pending import PendingSet
from .types import EngineState, EngineStats

logger = logging.getLogger(__name__)

# Below this many milliseconds a slice is treated as spent.
MIN_SLICE_MS = 1.0


class MutationEngine:
    """Observes a document and converts its text segments cooperatively."""

    def __init__(
        self,
        document: Document,
        registry: Optional[ConverterRegistry] = None,
        host: Optional[HostLoop] = None,
        adapter: Optional[ChangeNotificationAdapter] = None,
    ) -> None:
        if host is None:
            host = ManualHostLoop()
        self.document = document
        self.registry = registry if registry is not None else ConverterRegistry()
        self.host = host
        self.adapter = adapter if adapter is not None else DocumentObserver(document, host)
        self.stats = EngineStats()

        self._pending = PendingSet()
        self._observing = False
        self._flush_requested = False
        self._processing = False

    # Lifecycle

    @property
    def state(self) -> EngineState:
        if self._processing:
            return EngineState.PROCESSING
        if self._flush_requested:
            return EngineState.SCHEDULED
        if self._observing:
            return EngineState.OBSERVING
        return EngineState.IDLE

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def register_converter(self, converter: Converter) -> None:
        self.registry.register(converter)

    def start(self) -> None:
        """Attach to the change adapter and scan the existing tree."""
        if self._observing:
            return
        self._observing = True
        self.adapter.connect(self.handle_events)
        logger.info(f"Mutation engine started with converters {self.registry.names}")
        self.scan(self.document.root)

    def stop(self) -> None:
        """Detach from the change adapter. Safe to call repeatedly."""
        if not self._observing:
            return
        self.adapter.disconnect()
        self._observing = False
        logger.info("Mutation engine stopped")

    # Admission

    def handle_events(self, events: Iterable[ChangeEvent]) -> None:
        """Consume one batch of change events, in delivery order."""
        for event in events:
            if event.kind is ChangeKind.STRUCTURAL_INSERT:
                if isinstance(event.node, Tag):
                    self._admit_subtree(event.node)
                else:
                    self.enqueue(event.node)
            elif event.kind is ChangeKind.CONTENT_CHANGE:
                self.enqueue(event.node)
        self.request_flush()

    def scan(self, root: Optional[PageElement] = None) -> int:
        """Queue every eligible segment under ``root`` and request a flush."""
        admitted = self._admit_subtree(self.document.root if root is None else root)
        logger.debug(f"Scan admitted {admitted} segments")
        self.request_flush()
        return admitted

    def rescan(self) -> int:
        return self.scan(self.document.root)

    def enqueue(self, segment: PageElement) -> bool:
        """Admit a single segment through the skip filter."""
        if should_skip(segment):
            return False
        return self._pending.add(segment)

    def _admit_subtree(self, root: PageElement) -> int:
        return sum(1 for segment in self.document.iter_text_segments(root) if self.enqueue(segment))

    # Flushing

    def request_flush(self) -> bool:
        """Ask the host for an idle slice. Coalesces with an outstanding request."""
        if self._flush_requested or self._processing or not self._pending:
            return False
        self._flush_requested = True
        self.host.request_idle(self._flush)
        return True

    def _flush(self, deadline: Optional[Deadline] = None) -> None:
        if self._processing:
            raise EngineStateError("Flush started while another flush is running")

        self._flush_requested = False
        self._processing = True
        self.stats.flushes += 1
        batch = self._pending.snapshot_and_clear()
        logger.debug(f"Processing {len(batch)} segments")

        try:
            for index, segment in enumerate(batch):
                # The first segment always runs so every flush makes progress.
                if index > 0 and deadline is not None and deadline.time_remaining() < MIN_SLICE_MS:
                    self._defer(batch[index:])
                    break
                try:
                    self._process_segment(segment)
                except Exception:
                    logger.exception("Failed to write back converted segment")
        finally:
            self._processing = False

        if self._pending:
            self.request_flush()

    def _defer(self, remainder: List[NavigableString]) -> None:
        self._pending.requeue_front(remainder)
        self.stats.segments_deferred += len(remainder)
        logger.debug(f"Time slice exhausted, deferring {len(remainder)} segments")

    def _process_segment(self, segment: NavigableString) -> bool:
        if not self.document.is_connected(segment):
            self.stats.segments_skipped_detached += 1
            return False

        container = segment.parent
        original = str(segment)
        result = self.registry.apply(original)
        self.stats.segments_processed += 1
        if not result.modified:
            return False

        self.document.stamp(container, original)
        self.document.set_text(segment, result.text)
        self.stats.segments_converted += 1
        logger.debug(f"Converted segment in <{container.name}> via {', '.join(result.applied)}")
        return True


__all__ = ["MutationEngine", "MIN_SLICE_MS"]
