#!/usr/bin/env python3
"""Ordered converter pipeline.

Registration order is application order; each converter receives the
previous converter's output.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List

from ..core.settings import SettingsStore
from .base import Converter, InitializableConverter

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of running one segment's text through the pipeline."""

    text: str
    modified: bool = False
    applied: List[str] = field(default_factory=list)


def converter_name(converter: Converter) -> str:
    return getattr(converter, "name", None) or type(converter).__name__


class ConverterRegistry:
    """Typed, ordered list of converters."""

    def __init__(self, converters: Iterable[Converter] = ()) -> None:
        self._converters: List[Converter] = []
        for converter in converters:
            self.register(converter)

    def register(self, converter: Converter) -> None:
        if not isinstance(converter, Converter):
            raise TypeError(f"{type(converter).__name__} does not implement process(text) -> str")
        self._converters.append(converter)
        logger.debug(f"Registered converter {converter_name(converter)} at position {len(self._converters)}")

    def __iter__(self) -> Iterator[Converter]:
        return iter(self._converters)

    def __len__(self) -> int:
        return len(self._converters)

    @property
    def names(self) -> List[str]:
        return [converter_name(c) for c in self._converters]

    async def initialize_all(self, store: SettingsStore) -> None:
        """Initialize every converter that supports it, concurrently."""
        pending = [c.initialize(store) for c in self._converters if isinstance(c, InitializableConverter)]
        if pending:
            await asyncio.gather(*pending)

    def apply(self, text: str) -> PipelineResult:
        """Feed ``text`` through every converter in order.

        A converter that raises is skipped for this text; the rest still run.
        """
        result = PipelineResult(text=text)
        current = text
        for converter in self._converters:
            try:
                output = converter.process(current)
            except Exception:
                logger.exception(f"Converter {converter_name(converter)} failed, skipping it for this segment")
                continue
            if isinstance(output, str) and output and output != current:
                current = output
                result.modified = True
                result.applied.append(converter_name(converter))
        result.text = current
        return result


__all__ = ["ConverterRegistry", "PipelineResult", "converter_name"]
