"""Settings snapshot model and key-value settings stores.

Converters read a read-only ``Settings`` snapshot when they initialize. The
snapshot is built from whatever the settings store holds; unknown keys are
ignored and invalid values fall back to their defaults one field at a time.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, Literal, Mapping, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DateStyle = Literal["full", "long", "medium", "short"]
UnitSystem = Literal["metric", "imperial"]


def _coerce_rate(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(rate) or rate <= 0:
        return None
    return rate


def clean_rate_mapping(raw: Any, source: str = "rates") -> dict[str, float]:
    """Normalize a code -> rate mapping, dropping entries that are not positive numbers."""
    if not isinstance(raw, Mapping):
        return {}
    cleaned: dict[str, float] = {}
    for code, value in raw.items():
        rate = _coerce_rate(value)
        if rate is None or not isinstance(code, str) or not code.strip():
            logger.warning(f"Ignoring invalid {source} entry {code!r}={value!r}")
            continue
        cleaned[code.strip().upper()] = rate
    return cleaned


class Settings(BaseModel):
    """Read-only configuration snapshot consumed by converters at init time."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    target_currency: str = Field(default="USD", alias="targetCurrency")
    unit_system: UnitSystem = Field(default="metric", alias="unitSystem")
    date_format: DateStyle = Field(default="medium", alias="dateFormat")
    time_format: DateStyle = Field(default="short", alias="timeFormat")
    timezone: str | None = Field(default=None, alias="timezone")
    locale: str = Field(default="en_US", alias="locale")
    custom_rates: dict[str, float] | None = Field(default=None, alias="customRates")
    privacy_mode: bool = Field(default=False, alias="privacyMode")
    enabled: bool = Field(default=True, alias="enabled")
    exchange_rates: dict[str, float] | None = Field(default=None, alias="exchangeRates")
    exchange_rates_date: str | None = Field(default=None, alias="exchangeRatesDate")
    exchange_rates_last_fetch: int | None = Field(default=None, alias="exchangeRatesLastFetch")

    @field_validator("target_currency", mode="before")
    @classmethod
    def _upper_code(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("unit_system", "date_format", "time_format", mode="before")
    @classmethod
    def _lower_choice(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("custom_rates", mode="before")
    @classmethod
    def _clean_custom_rates(cls, value: Any) -> Any:
        if value is None:
            return None
        return clean_rate_mapping(value, source="custom rate") or None

    @field_validator("exchange_rates", mode="before")
    @classmethod
    def _clean_exchange_rates(cls, value: Any) -> Any:
        if value is None:
            return None
        return clean_rate_mapping(value, source="exchange rate") or None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "Settings":
        """Build a snapshot, discarding invalid fields instead of raising."""
        payload = dict(data or {})
        while True:
            try:
                return cls.model_validate(payload)
            except ValidationError as exc:
                bad_keys = set()
                for err in exc.errors():
                    if not err.get("loc"):
                        continue
                    field_name = str(err["loc"][0])
                    bad_keys.update(k for k in _KEY_ALIASES.get(field_name, {field_name}) if k in payload)
                if not bad_keys:
                    logger.warning(f"Settings rejected, using defaults: {exc}")
                    return cls()
                for key in bad_keys:
                    rejected = payload.pop(key)
                    logger.warning(f"Ignoring invalid setting {key}={rejected!r}")


SETTINGS_KEYS: tuple[str, ...] = tuple(field.alias or name for name, field in Settings.model_fields.items())

# Either spelling of a field (python name or storage alias) maps to both.
_KEY_ALIASES: dict[str, set[str]] = {}
for _name, _field in Settings.model_fields.items():
    _spellings = {_name, _field.alias or _name}
    for _spelling in _spellings:
        _KEY_ALIASES[_spelling] = _spellings


@runtime_checkable
class SettingsStore(Protocol):
    """Asynchronous key-value storage holding settings and cached rates."""

    async def get(self, keys: Iterable[str] | None = None) -> dict[str, Any]:
        """Return stored values for ``keys`` (all values when None)."""
        ...

    async def set(self, items: Mapping[str, Any]) -> None:
        """Store ``items``, replacing existing values."""
        ...

    async def remove(self, keys: Iterable[str]) -> None:
        """Delete ``keys`` if present."""
        ...


def _select(data: Mapping[str, Any], keys: Iterable[str] | None) -> dict[str, Any]:
    if keys is None:
        return dict(data)
    if isinstance(keys, str):
        keys = [keys]
    return {key: data[key] for key in keys if key in data}


class MemorySettingsStore:
    """In-process settings store.

    ``defaults`` are returned for keys that were never set.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None, defaults: Mapping[str, Any] | None = None):
        self._defaults = dict(defaults or {})
        self._data: dict[str, Any] = dict(initial or {})

    async def get(self, keys: Iterable[str] | None = None) -> dict[str, Any]:
        return _select({**self._defaults, **self._data}, keys)

    async def set(self, items: Mapping[str, Any]) -> None:
        self._data.update(items)

    async def remove(self, keys: Iterable[str]) -> None:
        if isinstance(keys, str):
            keys = [keys]
        for key in keys:
            self._data.pop(key, None)


class JsonSettingsStore:
    """Settings store persisted as a JSON object on disk.

    Every read goes back to the file so changes made by another process (for
    example a rates refresh) are picked up by the next converter init.
    """

    def __init__(self, path: str | Path, defaults: Mapping[str, Any] | None = None):
        self.path = Path(path).expanduser()
        self._defaults = dict(defaults or {})
        self._lock = asyncio.Lock()

    def _read(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.error(f"Settings file {self.path} is corrupt, ignoring its contents")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Mapping[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".state-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def get(self, keys: Iterable[str] | None = None) -> dict[str, Any]:
        data = await asyncio.to_thread(self._read)
        return _select({**self._defaults, **data}, keys)

    async def set(self, items: Mapping[str, Any]) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            data.update(items)
            await asyncio.to_thread(self._write, data)

    async def remove(self, keys: Iterable[str]) -> None:
        if isinstance(keys, str):
            keys = [keys]
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            for key in keys:
                data.pop(key, None)
            await asyncio.to_thread(self._write, data)


async def load_settings(store: SettingsStore, keys: Iterable[str] | None = None) -> Settings:
    """Read a settings snapshot from ``store``."""
    return Settings.from_mapping(await store.get(keys))


__all__ = [
    "DateStyle",
    "UnitSystem",
    "Settings",
    "SETTINGS_KEYS",
    "SettingsStore",
    "MemorySettingsStore",
    "JsonSettingsStore",
    "clean_rate_mapping",
    "load_settings",
]
