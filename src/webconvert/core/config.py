"""Configuration loader that reads from config files."""

import os
from copy import deepcopy
from pathlib import Path
from typing import Any

import tomllib

from .errors import ConfigurationError

DEFAULT_CONFIG: dict[str, Any] = {
    "settings": {
        "targetCurrency": "USD",
        "unitSystem": "metric",
        "dateFormat": "medium",
        "timeFormat": "short",
        "timezone": None,
        "locale": "en_US",
        "privacyMode": False,
        "enabled": True,
        "customRates": None,
    },
    "engine": {
        "budget_ms": 16.0,
        "idle_delay_s": 0.2,
    },
    "rates": {
        "url": "https://api.frankfurter.app/latest",
        "base": "USD",
        "max_age_hours": 24,
        "timeout_s": 10.0,
    },
    "paths": {
        "state_file": "~/.webconvert/state.json",
    },
}

# Environment variables that override individual settings keys.
ENV_OVERRIDES = {
    "WEBCONVERT_TARGET_CURRENCY": "targetCurrency",
    "WEBCONVERT_UNIT_SYSTEM": "unitSystem",
    "WEBCONVERT_TIMEZONE": "timezone",
    "WEBCONVERT_LOCALE": "locale",
}


def default_config_path() -> Path:
    env_path = os.environ.get("WEBCONVERT_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".webconvert" / "config.toml"


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively overlay ``override`` on a copy of ``base``."""
    merged = deepcopy(base)
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = _deep_merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
    section = document.get("webconvert", {})
    if not isinstance(section, dict):
        raise ConfigurationError(f"[webconvert] in {path} must be a table")
    return section


class ConfigLoader:
    """Defaults, then the ``[webconvert]`` table of config.toml, then env overrides."""

    def __init__(self, config_path: str | Path | None = None) -> None:
        path = Path(config_path) if config_path is not None else default_config_path()
        self.config_file = str(path)
        self._config = _deep_merge(DEFAULT_CONFIG, _read_toml(path) if path.exists() else {})

        for env_name, key in ENV_OVERRIDES.items():
            env_value = os.environ.get(env_name)
            if env_value:
                self._config["settings"][key] = env_value

    def get(self, key_path: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``rates.max_age_hours``."""
        node: Any = self._config
        for part in key_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    @property
    def settings_defaults(self) -> dict[str, Any]:
        """Settings snapshot values used when the store has no entry."""
        return {key: value for key, value in self.get("settings", {}).items() if value is not None}

    @property
    def engine_budget_ms(self) -> float:
        return float(self.get("engine.budget_ms", 16.0))

    @property
    def engine_idle_delay(self) -> float:
        return float(self.get("engine.idle_delay_s", 0.2))

    @property
    def rates_url(self) -> str:
        return str(self.get("rates.url", DEFAULT_CONFIG["rates"]["url"]))

    @property
    def rates_base(self) -> str:
        return str(self.get("rates.base", "USD")).upper()

    @property
    def rates_max_age_hours(self) -> float:
        return float(self.get("rates.max_age_hours", 24))

    @property
    def rates_timeout(self) -> float:
        return float(self.get("rates.timeout_s", 10.0))

    @property
    def state_file(self) -> Path:
        env_path = os.environ.get("WEBCONVERT_STATE_FILE")
        if env_path:
            return Path(env_path).expanduser()
        return Path(str(self.get("paths.state_file", DEFAULT_CONFIG["paths"]["state_file"]))).expanduser()


# Global singleton instance
_config_loader: ConfigLoader | None = None


def get_config() -> ConfigLoader:
    """Get the global config loader instance"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def reset_config() -> None:
    """Forget the cached loader so the next get_config() re-reads files."""
    global _config_loader
    _config_loader = None


# Re-export logging functions
from .logging import get_logger, setup_logging  # noqa: E402, F401
