#!/usr/bin/env python3
"""Converters module.

Each converter owns its pattern table, conversion arithmetic and output
formatting, and exposes ``process(text) -> text``. The registry chains them.
"""

from .base import BaseConverter, ConversionMatch, Converter, InitializableConverter, resolve_overlaps
from .currency_converter import CurrencyConverter
from .datetime_converter import DateTimeConverter
from .registry import ConverterRegistry, PipelineResult
from .unit_converter import UnitConversion, UnitConverter

__all__ = [
    "BaseConverter",
    "ConversionMatch",
    "Converter",
    "InitializableConverter",
    "resolve_overlaps",
    "CurrencyConverter",
    "DateTimeConverter",
    "UnitConverter",
    "UnitConversion",
    "ConverterRegistry",
    "PipelineResult",
]
