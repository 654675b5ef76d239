#!/usr/bin/env python3
"""Pre-compiled static regex patterns.

One pattern family per converter. Patterns expose named groups so the
converters' tokenizers can build structured match records from them.
"""

import re

from .components import (
    CURRENCY_CODES,
    CURRENCY_SYMBOLS,
    IMPERIAL_UNIT_TOKENS,
    METRIC_UNIT_TOKENS,
    MONTH_ABBREVIATIONS,
    create_alternation_pattern,
)


# ==============================================================================
# CURRENCY PATTERNS
# ==============================================================================

# Marker (symbol or code) + optional space + amount.
# The grouped alternative needs at least one separator group so that "$1000"
# is read as one amount rather than "$100" followed by "0".
CURRENCY_PATTERN = re.compile(
    rf"""
    (?<![A-Za-z])                                   # Codes must start a word
    (?P<marker>{create_alternation_pattern(CURRENCY_SYMBOLS + CURRENCY_CODES, word_boundaries=False)})
    \s?
    (?P<amount>
        \d{{1,3}}(?:,\d{{3}})+(?:\.\d+)?           # 1,234,567.89
        | \d+(?:\.\d+)?                             # 1234567.89
    )
    """,
    re.VERBOSE | re.IGNORECASE,
)


# ==============================================================================
# UNIT PATTERNS
# ==============================================================================

UNIT_PATTERN = re.compile(
    rf"""
    (?<![\d.,/-])                                   # Not the tail of a longer number or a date
    (?P<value>\d+(?:\.\d+)?)
    \s?
    (?P<unit>{create_alternation_pattern(IMPERIAL_UNIT_TOKENS + METRIC_UNIT_TOKENS, word_boundaries=False)})
    \b
    """,
    re.VERBOSE | re.IGNORECASE,
)


# ==============================================================================
# DATE PATTERNS
# ==============================================================================

_MONTH_ALTERNATION = "|".join(MONTH_ABBREVIATIONS)

# ISO-8601: 2024-05-20, 2024-05-20T12:00:00Z, 2024-05-20T12:00:00.123+05:30
ISO_DATE_PATTERN = re.compile(
    r"\b\d{4}-\d{2}-\d{2}(?:T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})?)?\b"
)

# 20/05/2024 or 05/20/2024 - day/month order is ambiguous
SLASH_DATE_PATTERN = re.compile(r"\b\d{1,2}/\d{1,2}/\d{4}\b")

# May 20, 2024 / Sept. 3 2024 / 20 May 2024
TEXT_DATE_PATTERN = re.compile(
    rf"""
    \b(?P<month_first>{_MONTH_ALTERNATION})(?P<month_first_tail>[a-z]*)\.?\s(?P<day_second>\d{{1,2}}),?\s(?P<year_a>\d{{4}})\b
    |
    \b(?P<day_first>\d{{1,2}})\s(?P<month_second>{_MONTH_ALTERNATION})(?P<month_second_tail>[a-z]*)\.?\s(?P<year_b>\d{{4}})\b
    """,
    re.VERBOSE | re.IGNORECASE,
)
