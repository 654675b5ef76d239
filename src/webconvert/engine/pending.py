"""Deduplicating, insertion-ordered set of segments awaiting a flush.

Text segments compare equal by their string value, so membership is by
object identity.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List

from bs4.element import NavigableString


class PendingSet:
    def __init__(self) -> None:
        self._items: Dict[int, NavigableString] = {}

    def add(self, segment: NavigableString) -> bool:
        """Queue ``segment``; returns False if it was already queued."""
        key = id(segment)
        if key in self._items:
            return False
        self._items[key] = segment
        return True

    def snapshot_and_clear(self) -> List[NavigableString]:
        snapshot = list(self._items.values())
        self._items = {}
        return snapshot

    def requeue_front(self, segments: Iterable[NavigableString]) -> None:
        """Put deferred segments back ahead of anything queued since the snapshot."""
        items: Dict[int, NavigableString] = {}
        for segment in segments:
            items.setdefault(id(segment), segment)
        for key, segment in self._items.items():
            items.setdefault(key, segment)
        self._items = items

    def __contains__(self, segment: object) -> bool:
        return id(segment) in self._items and self._items[id(segment)] is segment

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[NavigableString]:
        return iter(list(self._items.values()))

    def __bool__(self) -> bool:
        return bool(self._items)


__all__ = ["PendingSet"]
