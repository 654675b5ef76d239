"""HTML document wrapper: the single mutation surface of the engine.

Every mutation made through ``Document`` is announced to registered
mutation listeners (see ``DocumentObserver``), which is how tree changes
become change events.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator, List, Optional, Union

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, Tag

from .filters import ORIGINAL_TEXT_ATTR, PROCESSED_ATTR, is_text_segment

logger = logging.getLogger(__name__)

# (kind, node) where kind is "insert", "remove" or "text"
MutationListener = Callable[[str, PageElement], None]


def parse_fragment(markup: str) -> List[PageElement]:
    """Parse an HTML fragment into detached top-level nodes."""
    fragment = BeautifulSoup(markup, "html.parser")
    return [node.extract() for node in list(fragment.contents)]


class Document:
    """A parsed HTML document with observable mutations."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self.soup = soup
        self._listeners: List[MutationListener] = []

    @classmethod
    def from_html(cls, html: str, parser: str = "lxml") -> "Document":
        return cls(BeautifulSoup(html, parser))

    @property
    def root(self) -> Tag:
        """Observed root: ``<body>`` when present, else the whole document."""
        return self.soup.body or self.soup

    # Mutation listeners

    def add_mutation_listener(self, listener: MutationListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_mutation_listener(self, listener: MutationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, kind: str, node: PageElement) -> None:
        for listener in list(self._listeners):
            listener(kind, node)

    # Queries

    def find(self, *args, **kwargs):
        return self.soup.find(*args, **kwargs)

    def select_one(self, selector: str):
        return self.soup.select_one(selector)

    def is_connected(self, node: Optional[PageElement]) -> bool:
        """True if ``node`` is still attached to this document."""
        if node is None:
            return False
        if node is self.soup:
            return True
        return any(parent is self.soup for parent in node.parents)

    def iter_text_segments(self, root: Optional[PageElement] = None) -> Iterator[NavigableString]:
        """Yield every text segment under ``root`` (inclusive), in document order."""
        root = self.root if root is None else root
        if isinstance(root, NavigableString):
            if is_text_segment(root):
                yield root
            return
        for node in list(root.descendants):
            if is_text_segment(node):
                yield node

    def render(self) -> str:
        return self.soup.decode()

    # Mutations

    def insert(
        self, parent: Tag, content: Union[str, PageElement], index: Optional[int] = None
    ) -> List[PageElement]:
        """Insert markup (parsed as a fragment) or a node under ``parent``."""
        nodes = parse_fragment(content) if isinstance(content, str) else [content]
        position = len(parent.contents) if index is None else index
        for offset, node in enumerate(nodes):
            parent.insert(position + offset, node)
            self._notify("insert", node)
        return nodes

    def append_html(self, parent: Tag, html: str) -> List[PageElement]:
        return self.insert(parent, html)

    def remove(self, node: PageElement) -> None:
        node.extract()
        self._notify("remove", node)

    def set_text(self, segment: NavigableString, text: str) -> NavigableString:
        """Replace a segment's text; returns the segment now in the tree."""
        replacement = NavigableString(text)
        segment.replace_with(replacement)
        self._notify("text", replacement)
        return replacement

    # Container metadata

    def is_processed(self, container: Tag) -> bool:
        return container.has_attr(PROCESSED_ATTR)

    def original_text(self, container: Tag) -> Optional[str]:
        return container.get(ORIGINAL_TEXT_ATTR)

    def stamp(self, container: Tag, original_text: str) -> bool:
        """Mark ``container`` converted, recording its original text once.

        Returns True when this call recorded the original text.
        """
        recorded = not container.has_attr(ORIGINAL_TEXT_ATTR)
        if recorded:
            container[ORIGINAL_TEXT_ATTR] = original_text
        container[PROCESSED_ATTR] = "true"
        container["title"] = f"Original: {container[ORIGINAL_TEXT_ATTR]}"
        return recorded

    def clear_marker(self, container: Tag) -> None:
        """Allow ``container`` to be converted again. The original text is kept."""
        if container.has_attr(PROCESSED_ATTR):
            del container[PROCESSED_ATTR]
            logger.debug(f"Cleared processed marker on <{container.name}>")


__all__ = ["Document", "MutationListener", "parse_fragment"]
