"""Application wiring: converters, registry, engine and settings store."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from .converters import ConverterRegistry, CurrencyConverter, DateTimeConverter, UnitConverter
from .core.config import get_config
from .core.settings import MemorySettingsStore, Settings, SettingsStore, load_settings
from .dom import Document
from .engine import AsyncioHostLoop, EngineState, HostLoop, ManualHostLoop, MutationEngine

logger = logging.getLogger(__name__)

SettingsLike = Union[Settings, Mapping[str, Any], None]


def build_registry() -> ConverterRegistry:
    """Currency, unit and date/time converters, in application order."""
    return ConverterRegistry([CurrencyConverter(), UnitConverter(), DateTimeConverter()])


def settings_store_for(settings: SettingsLike) -> SettingsStore:
    if isinstance(settings, Settings):
        return MemorySettingsStore(settings.model_dump(by_alias=True, exclude_none=True))
    return MemorySettingsStore(dict(settings or {}))


class WebConvertApp:
    """One conversion session bound to a document.

    Owns the converters and the engine; ``start()`` must be awaited before
    the engine converts anything.
    """

    def __init__(
        self,
        document: Document,
        store: SettingsStore,
        host: Optional[HostLoop] = None,
        registry: Optional[ConverterRegistry] = None,
    ) -> None:
        self.document = document
        self.store = store
        if host is None:
            config = get_config()
            host = AsyncioHostLoop(budget_ms=config.engine_budget_ms, idle_delay=config.engine_idle_delay)
        self.host = host
        self.registry = registry if registry is not None else build_registry()
        self.engine = MutationEngine(document, self.registry, self.host)
        self.settings: Optional[Settings] = None

    @property
    def running(self) -> bool:
        return self.engine.state is not EngineState.IDLE

    async def start(self, force: bool = False) -> bool:
        """Initialize converters and start the engine unless disabled.

        Returns True when the engine was started.
        """
        await self.registry.initialize_all(self.store)
        self.settings = await load_settings(self.store)
        logger.info(f"Converters registered: {', '.join(self.registry.names)}")
        if not self.settings.enabled and not force:
            logger.info("Conversion disabled in settings, engine not started")
            return False
        self.engine.start()
        return True

    def stop(self) -> None:
        self.engine.stop()

    async def toggle(self, enabled: bool) -> None:
        """Persist the enabled flag and start or stop the engine accordingly."""
        await self.store.set({"enabled": enabled})
        if enabled:
            self.engine.start()
        else:
            self.engine.stop()

    async def reload(self) -> None:
        """Re-read settings into every converter. Already converted text stays as is."""
        await self.registry.initialize_all(self.store)
        self.settings = await load_settings(self.store)

    def convert_selection(self) -> int:
        """Re-scan the whole document for segments not yet converted."""
        admitted = self.engine.rescan()
        logger.info(f"Manual conversion queued {admitted} segments")
        return admitted


async def convert_html(html: str, settings: SettingsLike = None, *, parser: str = "lxml") -> str:
    """Convert every eligible segment of ``html`` and return the rendered document."""
    document = Document.from_html(html, parser=parser)
    host = ManualHostLoop()
    app = WebConvertApp(document, settings_store_for(settings), host)
    await app.start(force=True)
    executed = host.run_until_idle()
    app.stop()
    logger.debug(f"Conversion finished after {executed} host callbacks, stats={app.engine.stats.to_dict()}")
    return document.render()


async def convert_text(text: str, settings: SettingsLike = None) -> str:
    """Run the converter pipeline over a bare string."""
    registry = build_registry()
    await registry.initialize_all(settings_store_for(settings))
    return registry.apply(text).text


__all__ = ["WebConvertApp", "build_registry", "convert_html", "convert_text", "settings_store_for"]
