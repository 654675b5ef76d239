#!/usr/bin/env python3
"""Converter contract shared by the currency, unit and date/time converters.

A converter is anything with ``process(text) -> text``. Converters built on
``BaseConverter`` additionally load their configuration asynchronously and
behave as the identity function until that has happened.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Protocol, runtime_checkable

from babel.core import UnknownLocaleError
from intervaltree import IntervalTree

from ..core.settings import Settings, SettingsStore, load_settings

logger = logging.getLogger(__name__)


@runtime_checkable
class Converter(Protocol):
    """Anything the pipeline can feed text through."""

    def process(self, text: str) -> str:
        """Return ``text`` with every recognized span rewritten."""
        ...


@runtime_checkable
class InitializableConverter(Converter, Protocol):
    """Converter that loads its configuration before becoming active."""

    initialized: bool

    async def initialize(self, store: SettingsStore) -> None:
        """Load configuration from ``store`` and mark the converter ready."""
        ...


@dataclass(frozen=True)
class ConversionMatch:
    """A recognized span of a text segment.

    ``value`` is whatever the tokenizer parsed (raw literal, number, date),
    ``token`` the unit/currency marker or pattern family that matched.
    """

    start: int
    end: int
    text: str
    value: Any = None
    token: Optional[str] = None


def resolve_overlaps(matches: Iterable[ConversionMatch]) -> List[ConversionMatch]:
    """Keep the first-claimed match for every span, in text order.

    Matches are claimed in the order given, so callers list higher-priority
    pattern families first.
    """
    tree = IntervalTree()
    kept: List[ConversionMatch] = []
    for match in matches:
        if match.end <= match.start:
            continue
        if tree.overlaps(match.start, match.end):
            logger.debug(f"Dropping overlapping match '{match.text}' at [{match.start}:{match.end}]")
            continue
        tree.addi(match.start, match.end, match)
        kept.append(match)
    return sorted(kept, key=lambda m: m.start)


class BaseConverter(ABC):
    """Base class for converters driven by a settings snapshot.

    Subclasses implement ``configure`` (apply a snapshot), ``find_matches``
    (tokenize) and ``render`` (replacement text for one match, or None to
    leave it unchanged).
    """

    name = "converter"
    # Segments shorter than this cannot contain a match.
    min_length = 1

    def __init__(self) -> None:
        self.initialized = False
        self.settings: Settings | None = None

    async def initialize(self, store: SettingsStore) -> None:
        """Load settings from ``store`` and activate the converter.

        A failing load keeps the last good configuration. On first load the
        converter falls back to the default snapshot instead.
        """
        try:
            settings = await load_settings(store)
            self.configure(settings)
        except Exception:
            logger.exception(f"{type(self).__name__}: failed to load configuration")
            if self.initialized:
                return
            try:
                self.configure(Settings())
            except Exception:
                logger.exception(f"{type(self).__name__}: default configuration unusable, staying inactive")
                return
        self.initialized = True
        logger.info(f"{type(self).__name__} initialized")

    def configure(self, settings: Settings) -> None:
        """Apply a settings snapshot. Subclasses extend this."""
        self.settings = settings

    @abstractmethod
    def find_matches(self, text: str) -> List[ConversionMatch]:
        """Tokenize ``text`` into candidate matches, highest priority first."""

    @abstractmethod
    def render(self, match: ConversionMatch) -> Optional[str]:
        """Replacement for ``match``; None leaves the original text."""

    def _render_safely(self, match: ConversionMatch) -> str:
        try:
            replacement = self.render(match)
        except (ValueError, LookupError, ArithmeticError, TypeError, UnknownLocaleError) as exc:
            logger.debug(f"{self.name}: leaving '{match.text}' unchanged ({exc})")
            return match.text
        except Exception:
            logger.exception(f"{self.name}: unexpected failure converting '{match.text}'")
            return match.text
        return match.text if replacement is None else replacement

    def process(self, text: str) -> str:
        if not self.initialized or not text or len(text) < self.min_length:
            return text

        try:
            matches = resolve_overlaps(self.find_matches(text))
        except Exception:
            logger.exception(f"{self.name}: tokenizer failed, segment left unchanged")
            return text
        if not matches:
            return text

        parts: List[str] = []
        last_end = 0
        for match in matches:
            parts.append(text[last_end : match.start])
            parts.append(self._render_safely(match))
            last_end = match.end
        parts.append(text[last_end:])
        return "".join(parts)


__all__ = [
    "Converter",
    "InitializableConverter",
    "ConversionMatch",
    "resolve_overlaps",
    "BaseConverter",
]
