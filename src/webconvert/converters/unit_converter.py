#!/usr/bin/env python3
"""Measurement unit converter (length, mass, temperature, speed)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..core.settings import Settings
from ..patterns import IMPERIAL_UNITS, UNIT_PATTERN
from .base import BaseConverter, ConversionMatch


@dataclass(frozen=True)
class UnitConversion:
    """How to turn a value in one unit into ``target``.

    Linear units carry a ``factor``; temperature carries a ``func``.
    """

    target: str
    factor: Optional[float] = None
    func: Optional[Callable[[float], float]] = None

    def apply(self, value: float) -> float:
        if self.func is not None:
            return self.func(value)
        if self.factor is None:
            raise ValueError(f"No conversion defined towards {self.target}")
        return value * self.factor


def fahrenheit_to_celsius(f: float) -> float:
    return (f - 32) * 5 / 9


def celsius_to_fahrenheit(c: float) -> float:
    return (c * 9 / 5) + 32


IMPERIAL_TO_METRIC: Dict[str, UnitConversion] = {
    # Length
    "mi": UnitConversion("km", 1.60934),
    "mile": UnitConversion("km", 1.60934),
    "miles": UnitConversion("km", 1.60934),
    "ft": UnitConversion("m", 0.3048),
    "foot": UnitConversion("m", 0.3048),
    "feet": UnitConversion("m", 0.3048),
    "in": UnitConversion("cm", 2.54),
    "inch": UnitConversion("cm", 2.54),
    "inches": UnitConversion("cm", 2.54),
    "yd": UnitConversion("m", 0.9144),
    "yard": UnitConversion("m", 0.9144),
    "yards": UnitConversion("m", 0.9144),
    # Mass
    "lb": UnitConversion("kg", 0.453592),
    "lbs": UnitConversion("kg", 0.453592),
    "pound": UnitConversion("kg", 0.453592),
    "pounds": UnitConversion("kg", 0.453592),
    "oz": UnitConversion("g", 28.3495),
    "ounce": UnitConversion("g", 28.3495),
    "ounces": UnitConversion("g", 28.3495),
    # Temperature
    "°F": UnitConversion("°C", func=fahrenheit_to_celsius),
    "F": UnitConversion("°C", func=fahrenheit_to_celsius),
    # Speed
    "mph": UnitConversion("km/h", 1.60934),
}

METRIC_TO_IMPERIAL: Dict[str, UnitConversion] = {
    "km": UnitConversion("mi", 0.621371),
    "m": UnitConversion("ft", 3.28084),
    "cm": UnitConversion("in", 0.393701),
    "kg": UnitConversion("lb", 2.20462),
    "g": UnitConversion("oz", 0.035274),
    "°C": UnitConversion("°F", func=celsius_to_fahrenheit),
    "km/h": UnitConversion("mph", 0.621371),
}


def _case_insensitive(table: Dict[str, UnitConversion]) -> Dict[str, UnitConversion]:
    return {unit.lower(): conversion for unit, conversion in table.items()}


class UnitConverter(BaseConverter):
    """Converts "<number> <unit>" spans into the configured unit system."""

    name = "unit"

    def __init__(self) -> None:
        super().__init__()
        self.target_system = "metric"
        self._to_metric = _case_insensitive(IMPERIAL_TO_METRIC)
        self._to_imperial = _case_insensitive(METRIC_TO_IMPERIAL)

    def configure(self, settings: Settings) -> None:
        super().configure(settings)
        self.target_system = settings.unit_system

    def find_matches(self, text: str) -> List[ConversionMatch]:
        return [
            ConversionMatch(
                start=m.start(),
                end=m.end(),
                text=m.group(0),
                value=m.group("value"),
                token=m.group("unit"),
            )
            for m in UNIT_PATTERN.finditer(text)
        ]

    def lookup(self, unit: str) -> Optional[UnitConversion]:
        """Conversion for ``unit`` towards the target system, if one applies."""
        unit_lower = unit.lower()
        is_imperial = unit_lower in IMPERIAL_UNITS
        if self.target_system == "metric" and is_imperial:
            return self._to_metric.get(unit_lower)
        if self.target_system == "imperial" and not is_imperial:
            return self._to_imperial.get(unit_lower)
        return None

    def render(self, match: ConversionMatch) -> Optional[str]:
        conversion = self.lookup(match.token or "")
        if conversion is None:
            return None
        value = conversion.apply(float(match.value))
        return f"{value:.1f} {conversion.target} ({match.text})"
