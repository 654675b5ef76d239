"""Collaborator services around the conversion engine."""

from .rates import (
    RateSnapshot,
    fetch_latest_rates,
    load_currency_symbols,
    load_default_rates,
    refresh_rates_if_stale,
)

__all__ = [
    "RateSnapshot",
    "fetch_latest_rates",
    "load_currency_symbols",
    "load_default_rates",
    "refresh_rates_if_stale",
]
