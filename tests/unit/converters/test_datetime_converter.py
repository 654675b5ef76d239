"""Unit tests for DateTimeConverter."""

from datetime import date, datetime

import pytest

from webconvert.converters import DateTimeConverter
from webconvert.converters.datetime_converter import parse_iso, parse_textual
from webconvert.patterns import TEXT_DATE_PATTERN


@pytest.fixture
def utc_medium(configure):
    return configure(DateTimeConverter(), date_format="medium", time_format="short", timezone="UTC")


class TestIsoDates:
    """Test ISO-8601 literals."""

    def test_date_only(self, utc_medium):
        assert utc_medium.process("2024-05-20") == "May 20, 2024 (was 2024-05-20)"

    def test_invalid_calendar_date_unchanged(self, utc_medium):
        assert utc_medium.process("2024-99-99") == "2024-99-99"

    def test_date_in_sentence(self, utc_medium):
        result = utc_medium.process("Released on 2024-05-20.")
        assert result == "Released on May 20, 2024 (was 2024-05-20)."

    def test_datetime_with_time_uses_time_style(self, utc_medium):
        result = utc_medium.process("2024-05-20T15:30:00Z")
        assert "May 20, 2024" in result
        assert "3:30" in result
        assert result.endswith("(was 2024-05-20T15:30:00Z)")

    def test_datetime_is_shifted_into_configured_zone(self, configure):
        converter = configure(DateTimeConverter(), timezone="Asia/Kolkata")
        result = converter.process("2024-05-20T23:30:00Z")
        assert "May 21, 2024" in result
        assert "5:00" in result

    def test_midnight_renders_date_only(self, utc_medium):
        result = utc_medium.process("2024-05-20T00:00:00")
        assert result == "May 20, 2024 (was 2024-05-20T00:00:00)"

    def test_annotation_is_not_matched_again(self, utc_medium):
        """The formatted date inside the annotation is not a second match."""
        result = utc_medium.process("2024-05-20")
        assert result.count("(was") == 1


class TestTextualDates:
    """Test month-name literals."""

    def test_month_first_full_style(self, configure):
        converter = configure(DateTimeConverter(), date_format="full", timezone="UTC")
        assert converter.process("May 20, 2024") == "Monday, May 20, 2024 (was May 20, 2024)"

    def test_day_first_short_style(self, configure):
        converter = configure(DateTimeConverter(), date_format="short", timezone="UTC")
        assert converter.process("20 May 2024") == "5/20/24 (was 20 May 2024)"

    def test_abbreviation_with_dot(self, utc_medium):
        assert utc_medium.process("Sept. 3 2024") == "Sep 3, 2024 (was Sept. 3 2024)"

    def test_unknown_month_word_unchanged(self, utc_medium):
        assert utc_medium.process("Mayday 3 2024") == "Mayday 3 2024"

    def test_impossible_day_unchanged(self, utc_medium):
        assert utc_medium.process("Feb 30, 2024") == "Feb 30, 2024"

    def test_parse_textual_groups(self):
        match = TEXT_DATE_PATTERN.search("due 3 March 2025")
        assert parse_textual(match.groupdict()) == date(2025, 3, 3)


class TestAmbiguousAndFailures:
    """Test literals that must be left alone."""

    def test_slash_dates_are_not_rewritten(self, utc_medium):
        assert utc_medium.process("05/06/2024") == "05/06/2024"

    def test_unknown_timezone_leaves_text(self, configure):
        converter = configure(DateTimeConverter(), timezone="Mars/Olympus_Mons")
        assert converter.process("2024-05-20") == "2024-05-20"

    def test_unknown_locale_leaves_text(self, configure):
        converter = configure(DateTimeConverter(), timezone="UTC", locale="xx_XX")
        assert converter.process("2024-05-20") == "2024-05-20"

    def test_short_text_skipped(self, utc_medium):
        assert utc_medium.process("May 1") == "May 1"

    def test_identity_until_initialized(self):
        assert DateTimeConverter().process("2024-05-20") == "2024-05-20"


class TestParseIso:
    """Test the ISO literal parser."""

    def test_date_only_has_no_time(self):
        assert parse_iso("2024-05-20") == (date(2024, 5, 20), False)

    def test_datetime_with_time(self):
        value, with_time = parse_iso("2024-05-20T08:15:00")
        assert value == datetime(2024, 5, 20, 8, 15)
        assert with_time is True

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            parse_iso("2024-13-01")
