#!/usr/bin/env python3
"""Date and time literal converter.

Three lexical families are recognized, in priority order: ISO-8601, slash
dates and month-name dates. Slash dates are claimed but never rewritten
because day/month order cannot be told apart ("05/06/2024").
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, tzinfo
from typing import List, Optional, Tuple

from babel.dates import format_date, format_time, get_datetime_format, get_timezone

from ..core.settings import Settings
from ..patterns import ISO_DATE_PATTERN, MONTH_LOOKUP, SLASH_DATE_PATTERN, TEXT_DATE_PATTERN
from .base import BaseConverter, ConversionMatch

logger = logging.getLogger(__name__)

ISO = "iso"
SLASH = "slash"
TEXTUAL = "textual"


def parse_iso(literal: str) -> Tuple[date | datetime, bool]:
    """Parse an ISO literal into a date, or a datetime plus whether it has a time of day."""
    if "T" not in literal:
        return date.fromisoformat(literal), False
    parsed = datetime.fromisoformat(literal)
    return parsed, parsed.time() != time(0, 0)


def parse_textual(match_groups: dict) -> date:
    """Build a calendar date from TEXT_DATE_PATTERN groups."""
    if match_groups.get("month_first"):
        month_word = match_groups["month_first"] + (match_groups.get("month_first_tail") or "")
        day, year = match_groups["day_second"], match_groups["year_a"]
    else:
        month_word = match_groups["month_second"] + (match_groups.get("month_second_tail") or "")
        day, year = match_groups["day_first"], match_groups["year_b"]

    month = MONTH_LOOKUP.get(month_word.lower())
    if month is None:
        raise ValueError(f"Unknown month name '{month_word}'")
    return date(int(year), month, int(day))


class DateTimeConverter(BaseConverter):
    """Reformats date literals using the configured style and timezone."""

    name = "datetime"
    min_length = 8

    def __init__(self) -> None:
        super().__init__()
        self.date_format = "medium"
        self.time_format = "short"
        self.timezone: Optional[str] = None
        self.locale = "en_US"

    def configure(self, settings: Settings) -> None:
        super().configure(settings)
        self.date_format = settings.date_format
        self.time_format = settings.time_format
        self.timezone = settings.timezone
        self.locale = settings.locale

    def find_matches(self, text: str) -> List[ConversionMatch]:
        matches = [
            ConversionMatch(m.start(), m.end(), m.group(0), token=ISO) for m in ISO_DATE_PATTERN.finditer(text)
        ]
        matches.extend(
            ConversionMatch(m.start(), m.end(), m.group(0), token=SLASH) for m in SLASH_DATE_PATTERN.finditer(text)
        )
        matches.extend(
            ConversionMatch(m.start(), m.end(), m.group(0), value=m.groupdict(), token=TEXTUAL)
            for m in TEXT_DATE_PATTERN.finditer(text)
        )
        return matches

    def resolve_timezone(self) -> tzinfo:
        """Configured zone, or the host's local zone when unset."""
        return get_timezone(self.timezone)

    def format_value(self, value: date | datetime, with_time: bool) -> str:
        zone = self.resolve_timezone()
        if not with_time:
            day = value.date() if isinstance(value, datetime) else value
            return format_date(day, format=self.date_format, locale=self.locale)

        if value.tzinfo is not None:
            moment = value
        elif hasattr(zone, "localize"):
            # pytz zones must localize rather than replace
            moment = zone.localize(value)
        else:
            moment = value.replace(tzinfo=zone)
        local = moment.astimezone(zone)
        date_part = format_date(local.date(), format=self.date_format, locale=self.locale)
        time_part = format_time(local, format=self.time_format, tzinfo=zone, locale=self.locale)
        return (
            get_datetime_format(self.date_format, locale=self.locale)
            .replace("'", "")
            .replace("{0}", time_part)
            .replace("{1}", date_part)
        )

    def render(self, match: ConversionMatch) -> Optional[str]:
        if match.token == SLASH:
            logger.debug(f"Leaving ambiguous slash date '{match.text}' unchanged")
            return None
        if match.token == ISO:
            value, with_time = parse_iso(match.text)
        else:
            value, with_time = parse_textual(match.value), False

        formatted = self.format_value(value, with_time)
        return f"{formatted} (was {match.text})"
