#!/usr/bin/env python3
"""Public API for regex patterns used by the converters."""

from .components import (
    CURRENCY_CODES,
    CURRENCY_SYMBOLS,
    IMPERIAL_UNIT_TOKENS,
    IMPERIAL_UNITS,
    METRIC_UNIT_TOKENS,
    METRIC_UNITS,
    MONTH_LOOKUP,
    MONTH_NAMES,
    create_alternation_pattern,
    longest_first,
)
from .static import (
    CURRENCY_PATTERN,
    ISO_DATE_PATTERN,
    SLASH_DATE_PATTERN,
    TEXT_DATE_PATTERN,
    UNIT_PATTERN,
)

__all__ = [
    "CURRENCY_CODES",
    "CURRENCY_SYMBOLS",
    "IMPERIAL_UNIT_TOKENS",
    "IMPERIAL_UNITS",
    "METRIC_UNIT_TOKENS",
    "METRIC_UNITS",
    "MONTH_LOOKUP",
    "MONTH_NAMES",
    "create_alternation_pattern",
    "longest_first",
    "CURRENCY_PATTERN",
    "ISO_DATE_PATTERN",
    "SLASH_DATE_PATTERN",
    "TEXT_DATE_PATTERN",
    "UNIT_PATTERN",
]
