"""Exchange-rate snapshots: bundled defaults and fresh fetches.

Rates are "units of this currency per one unit of the base currency"; the
base itself is always present with rate 1.
"""

from __future__ import annotations

import json
import logging
import time
from functools import lru_cache
from importlib import resources
from typing import Any, Awaitable, Callable

import aiohttp
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..core.errors import RateFetchError
from ..core.settings import SettingsStore, load_settings

logger = logging.getLogger(__name__)

DEFAULT_RATES_URL = "https://api.frankfurter.app/latest"
MS_PER_HOUR = 1000 * 60 * 60


class RateSnapshot(BaseModel):
    """Rate source format: ``{base, date, rates}``."""

    base: str
    date: str | None = None
    rates: dict[str, float] = Field(default_factory=dict)

    @field_validator("base", mode="before")
    @classmethod
    def _upper_base(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("rates", mode="before")
    @classmethod
    def _upper_codes(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(code).strip().upper(): rate for code, rate in value.items()}
        return value

    @model_validator(mode="after")
    def _ensure_base_rate(self) -> "RateSnapshot":
        # Feeds usually omit the base currency itself.
        self.rates[self.base] = 1.0
        return self


def _asset_text(name: str) -> str:
    return resources.files("webconvert").joinpath("assets").joinpath(name).read_text(encoding="utf-8")


@lru_cache(maxsize=1)
def _default_rates_json() -> str:
    return _asset_text("rates_default.json")


def load_default_rates() -> RateSnapshot:
    """Bundled rate snapshot shipped with the package."""
    return RateSnapshot.model_validate_json(_default_rates_json())


@lru_cache(maxsize=1)
def load_currency_symbols() -> dict[str, str]:
    """Symbol/marker -> currency code table."""
    data = json.loads(_asset_text("currencies.json"))
    return {str(symbol): str(code).upper() for symbol, code in data.items()}


async def fetch_latest_rates(
    base: str = "USD",
    *,
    url: str = DEFAULT_RATES_URL,
    session: aiohttp.ClientSession | None = None,
    timeout: float = 10.0,
) -> RateSnapshot:
    """Fetch the latest rates relative to ``base``.

    Raises:
        RateFetchError: on transport errors, non-200 responses or a malformed body.

    """
    owns_session = session is None
    if session is None:
        session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout))
    try:
        logger.info(f"Fetching latest exchange rates from {url}")
        async with session.get(url, params={"from": base.upper()}) as resp:
            if resp.status != 200:
                raise RateFetchError(f"Rate source returned HTTP {resp.status}", status=resp.status)
            data = await resp.json(content_type=None)
    except aiohttp.ClientError as exc:
        raise RateFetchError(f"Rate source unreachable: {exc}") from exc
    except TimeoutError as exc:
        raise RateFetchError("Rate source timed out") from exc
    finally:
        if owns_session:
            await session.close()

    try:
        snapshot = RateSnapshot.model_validate(data)
    except ValidationError as exc:
        raise RateFetchError(f"Malformed rate payload: {exc}") from exc
    logger.info(f"Fetched rates for {len(snapshot.rates)} currencies ({snapshot.date})")
    return snapshot


RateFetcher = Callable[..., Awaitable[RateSnapshot]]


async def refresh_rates_if_stale(
    store: SettingsStore,
    *,
    max_age_hours: float = 24,
    base: str = "USD",
    url: str = DEFAULT_RATES_URL,
    timeout: float = 10.0,
    force: bool = False,
    now_ms: int | None = None,
    fetcher: RateFetcher = fetch_latest_rates,
) -> bool:
    """Fetch fresh rates into ``store`` when the cached ones are too old.

    Returns True when new rates were stored. Privacy mode disables fetching,
    and a failed fetch keeps whatever rates are already stored.
    """
    settings = await load_settings(store)
    if settings.privacy_mode:
        logger.info("Privacy mode enabled, skipping rate fetch")
        return False

    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    last_fetch = settings.exchange_rates_last_fetch or 0
    hours_since = (now_ms - last_fetch) / MS_PER_HOUR
    if not force and last_fetch and hours_since < max_age_hours:
        logger.info(f"Rates are fresh ({round(hours_since)} hours old)")
        return False

    if last_fetch:
        logger.info(f"Rates are stale ({round(hours_since)} hours old), fetching fresh rates")
    try:
        snapshot = await fetcher(base, url=url, timeout=timeout)
    except RateFetchError as exc:
        logger.error(f"Failed to fetch exchange rates: {exc}")
        return False

    await store.set(
        {
            "exchangeRates": snapshot.rates,
            "exchangeRatesDate": snapshot.date,
            "exchangeRatesLastFetch": now_ms,
        }
    )
    logger.info(f"Exchange rates updated successfully: {snapshot.date}")
    return True


__all__ = [
    "DEFAULT_RATES_URL",
    "RateSnapshot",
    "load_default_rates",
    "load_currency_symbols",
    "fetch_latest_rates",
    "refresh_rates_if_stale",
]
