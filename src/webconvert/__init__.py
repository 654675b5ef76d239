"""WebConvert+ - rewrites currency, unit and date/time text in live documents."""

from importlib import import_module, metadata
from pathlib import Path
import tomllib
from typing import TYPE_CHECKING


def _get_version() -> str:
    try:
        return metadata.version("webconvert-plus")
    except metadata.PackageNotFoundError:
        pass

    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        return str(data["project"]["version"])
    except (OSError, KeyError, tomllib.TOMLDecodeError):
        return "unknown"


__version__ = _get_version()

if TYPE_CHECKING:
    from .app import WebConvertApp, convert_html, convert_text
    from .converters import ConverterRegistry, CurrencyConverter, DateTimeConverter, UnitConverter
    from .core.settings import JsonSettingsStore, MemorySettingsStore, Settings
    from .dom import Document, DocumentObserver
    from .engine import AsyncioHostLoop, EngineState, ManualHostLoop, MutationEngine

__all__ = [
    "__version__",
    "WebConvertApp",
    "convert_html",
    "convert_text",
    "ConverterRegistry",
    "CurrencyConverter",
    "DateTimeConverter",
    "UnitConverter",
    "Settings",
    "MemorySettingsStore",
    "JsonSettingsStore",
    "Document",
    "DocumentObserver",
    "AsyncioHostLoop",
    "EngineState",
    "ManualHostLoop",
    "MutationEngine",
]

_LAZY_EXPORTS = {
    "WebConvertApp": (".app", "WebConvertApp"),
    "convert_html": (".app", "convert_html"),
    "convert_text": (".app", "convert_text"),
    "ConverterRegistry": (".converters", "ConverterRegistry"),
    "CurrencyConverter": (".converters", "CurrencyConverter"),
    "DateTimeConverter": (".converters", "DateTimeConverter"),
    "UnitConverter": (".converters", "UnitConverter"),
    "Settings": (".core.settings", "Settings"),
    "MemorySettingsStore": (".core.settings", "MemorySettingsStore"),
    "JsonSettingsStore": (".core.settings", "JsonSettingsStore"),
    "Document": (".dom", "Document"),
    "DocumentObserver": (".dom", "DocumentObserver"),
    "AsyncioHostLoop": (".engine", "AsyncioHostLoop"),
    "EngineState": (".engine", "EngineState"),
    "ManualHostLoop": (".engine", "ManualHostLoop"),
    "MutationEngine": (".engine", "MutationEngine"),
}


def __getattr__(name):
    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, attr_name = _LAZY_EXPORTS[name]
    module = import_module(module_name, __name__)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
