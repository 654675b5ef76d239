#!/usr/bin/env python3
"""Currency amount converter.

Rewrites "$100" into "₹8,579.00 (was $100)" for a configured target currency.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Mapping, Optional

from babel.numbers import format_currency

from ..core.settings import Settings
from ..patterns import CURRENCY_PATTERN
from ..services.rates import RateSnapshot, load_currency_symbols, load_default_rates
from .base import BaseConverter, ConversionMatch

logger = logging.getLogger(__name__)


class CurrencyConverter(BaseConverter):
    """Converts symbol/code-prefixed amounts into the target currency.

    Rate precedence, highest first: custom overrides, freshly fetched rates,
    the bundled default snapshot.
    """

    name = "currency"
    min_length = 2

    def __init__(
        self,
        default_rates: RateSnapshot | None = None,
        symbols: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__()
        self._default_rates = default_rates
        self._symbols = dict(symbols) if symbols is not None else None
        self.rates: Dict[str, float] = {}
        self.symbol_map: Dict[str, str] = {}
        self.base_currency = "USD"
        self.target_currency = "USD"
        self.locale = "en_US"

    def configure(self, settings: Settings) -> None:
        super().configure(settings)
        defaults = self._default_rates or load_default_rates()
        symbols = self._symbols if self._symbols is not None else load_currency_symbols()

        rates = dict(defaults.rates)
        if settings.exchange_rates:
            rates = dict(settings.exchange_rates)
            if settings.exchange_rates_last_fetch:
                age = f"{round((time.time() * 1000 - settings.exchange_rates_last_fetch) / 3_600_000)} hours old"
            else:
                age = "age unknown"
            logger.info(f"CurrencyConverter: Using fresh exchange rates from {settings.exchange_rates_date or 'API'} ({age})")
        else:
            logger.info(f"CurrencyConverter: Using default exchange rates from {defaults.date}")

        if settings.custom_rates:
            rates.update(settings.custom_rates)
            logger.info(f"CurrencyConverter: Applied {len(settings.custom_rates)} custom rates")

        rates.setdefault(defaults.base, 1.0)

        self.rates = rates
        self.base_currency = defaults.base
        self.symbol_map = dict(symbols)
        self.target_currency = settings.target_currency
        self.locale = settings.locale
        logger.info(
            f"CurrencyConverter configured with target: {self.target_currency}, "
            f"{len(self.rates)} currencies loaded"
        )

    def resolve_code(self, marker: str) -> str:
        """Map a symbol or code marker to its canonical currency code."""
        return self.symbol_map.get(marker) or self.symbol_map.get(marker.upper()) or marker.upper()

    def find_matches(self, text: str) -> List[ConversionMatch]:
        return [
            ConversionMatch(
                start=m.start(),
                end=m.end(),
                text=m.group(0),
                value=m.group("amount"),
                token=m.group("marker"),
            )
            for m in CURRENCY_PATTERN.finditer(text)
        ]

    def convert_amount(self, amount: float, source: str) -> Optional[float]:
        """Convert ``amount`` of ``source`` into the target currency via the base."""
        rate_from = self.rates.get(source)
        rate_to = self.rates.get(self.target_currency)
        if not rate_from or not rate_to:
            return None
        value_in_base = amount / rate_from
        return value_in_base * rate_to

    def render(self, match: ConversionMatch) -> Optional[str]:
        code = self.resolve_code(match.token or "")
        amount = float(str(match.value).replace(",", ""))

        if code == self.target_currency:
            return None

        converted = self.convert_amount(amount, code)
        if converted is None:
            return None

        formatted = format_currency(converted, self.target_currency, locale=self.locale, currency_digits=False)
        return f"{formatted} (was {match.text})"
