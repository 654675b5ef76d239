#!/usr/bin/env python3
"""Data constants and helper functions for regex patterns.

This module contains the closed vocabularies (currency markers, unit tokens,
month names) used to build the converters' lexical patterns. It is the
foundation layer with no regex pattern compilation.
"""

import re
from typing import Dict, Iterable, List


# ==============================================================================
# CURRENCY MARKERS
# ==============================================================================

# Symbols recognized in front of an amount. Multi-character symbols must be
# tried before their single-character suffixes ("R$" before "$").
CURRENCY_SYMBOLS: List[str] = ["US$", "R$", "S$", "A$", "C$", "$", "€", "£", "¥", "₹"]

# ISO codes recognized in front of an amount.
CURRENCY_CODES: List[str] = ["USD", "EUR", "GBP", "INR", "JPY", "CAD", "AUD", "CNY", "BRL", "SGD"]


# ==============================================================================
# UNIT VOCABULARY
# ==============================================================================

IMPERIAL_UNIT_TOKENS: List[str] = [
    # Length
    "mi",
    "mile",
    "miles",
    "ft",
    "foot",
    "feet",
    "in",
    "inch",
    "inches",
    "yd",
    "yard",
    "yards",
    # Mass
    "lb",
    "lbs",
    "pound",
    "pounds",
    "oz",
    "ounce",
    "ounces",
    # Temperature
    "°F",
    "F",
    # Speed
    "mph",
]

METRIC_UNIT_TOKENS: List[str] = ["km", "m", "cm", "kg", "g", "°C", "km/h"]

# Lower-cased membership set used to classify a matched token.
IMPERIAL_UNITS = frozenset(token.lower() for token in IMPERIAL_UNIT_TOKENS)
METRIC_UNITS = frozenset(token.lower() for token in METRIC_UNIT_TOKENS)


# ==============================================================================
# MONTH NAMES
# ==============================================================================

MONTH_NAMES: List[str] = [
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
]

MONTH_ABBREVIATIONS: List[str] = [name[:3] for name in MONTH_NAMES]

# Every spelling accepted for a month, mapped to its number.
MONTH_LOOKUP: Dict[str, int] = {}
for _index, _name in enumerate(MONTH_NAMES, start=1):
    MONTH_LOOKUP[_name] = _index
    MONTH_LOOKUP[_name[:3]] = _index
MONTH_LOOKUP["sept"] = 9


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def longest_first(items: Iterable[str]) -> List[str]:
    """Order alternatives so longer tokens win over their prefixes."""
    return sorted(set(items), key=lambda item: (-len(item), item))


def create_alternation_pattern(items: Iterable[str], word_boundaries: bool = True) -> str:
    """Create a regex alternation pattern from a list of items."""
    escaped_items = [re.escape(item) for item in longest_first(items)]
    pattern = "|".join(escaped_items)
    if word_boundaries:
        pattern = rf"\b(?:{pattern})\b"
    return pattern
