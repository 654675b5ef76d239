#!/usr/bin/env python3
"""WebConvert+ command line interface."""

import rich_click as click

# Configure rich-click to enable markup - MUST be first!
click.rich_click.USE_RICH_MARKUP = True

click.rich_click.STYLE_OPTION = "#ff79c6"
click.rich_click.STYLE_ARGUMENT = "#8be9fd"
click.rich_click.STYLE_COMMAND = "#50fa7b"
click.rich_click.STYLE_USAGE = "#bd93f9"
click.rich_click.STYLE_HELPTEXT = "#b3b8c0"

import asyncio
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .app import convert_html, convert_text
from .core.config import ConfigLoader, setup_logging
from .core.errors import WebConvertError
from .core.settings import JsonSettingsStore, Settings, SettingsStore
from .services.rates import load_default_rates, refresh_rates_if_stale

console = Console()
err_console = Console(stderr=True)

DATE_STYLES = ["full", "long", "medium", "short"]


def conversion_options(func):
    """Settings overrides shared by ``convert`` and ``text``."""
    options = [
        click.option("--currency", metavar="CODE", help=" 💱 Target currency code (e.g. EUR, INR)"),
        click.option("--units", type=click.Choice(["metric", "imperial"]), help=" 📏 Target unit system"),
        click.option("--date-format", type=click.Choice(DATE_STYLES), help=" 📅 Date style"),
        click.option("--timezone", "tz", metavar="ZONE", help=" 🌍 IANA timezone, e.g. Europe/Berlin"),
        click.option("--locale", metavar="LOCALE", help=" 🔤 Formatting locale, e.g. de_DE"),
        click.option("--settings", "settings_path", type=click.Path(dir_okay=False), help=" 🗂️  Settings state file"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def open_store(config: ConfigLoader, settings_path) -> JsonSettingsStore:
    path = Path(settings_path) if settings_path else config.state_file
    return JsonSettingsStore(path, defaults=config.settings_defaults)


async def effective_settings(store: SettingsStore, **overrides) -> dict:
    """Stored settings with command line overrides applied."""
    data = await store.get()
    keys = {
        "currency": "targetCurrency",
        "units": "unitSystem",
        "date_format": "dateFormat",
        "tz": "timezone",
        "locale": "locale",
    }
    for option, key in keys.items():
        value = overrides.get(option)
        if value:
            data[key] = value
    return data


def run(coro, debug: bool):
    try:
        return asyncio.run(coro)
    except WebConvertError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        if debug:
            console.print_exception()
        sys.exit(1)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="WebConvert+")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help=" ⚙️  Configuration file path")
@click.option("--debug", is_flag=True, help=" 🐛 Enable detailed debug logging")
@click.pass_context
def main(ctx, config_path, debug):
    """💱 [bold cyan]WebConvert+ v1.0.0[/bold cyan] - Rewrite prices, units and dates into your preferred format

    \b
    [bold yellow]🎯 Quick Start:[/bold yellow]
    \b
      [green]webconvert convert page.html -o out.html[/green]      [italic]# Convert an HTML document[/italic]
      [green]webconvert text "Only $100!" --currency EUR[/green]   [italic]# Convert a string[/italic]
      [green]webconvert rates refresh[/green]                      [italic]# Fetch today's exchange rates[/italic]
      [green]webconvert status[/green]                             [italic]# Show effective settings[/italic]
    """
    ctx.ensure_object(dict)
    setup_logging("webconvert", log_level="DEBUG" if debug else "INFO", include_console=True if debug else None)
    try:
        ctx.obj["config"] = ConfigLoader(config_path)
    except WebConvertError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    ctx.obj["debug"] = debug


@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, allow_dash=True))
@click.option("-o", "--output", type=click.Path(dir_okay=False), help=" 💾 Write result here instead of stdout")
@conversion_options
@click.pass_context
def convert(ctx, source, output, currency, units, date_format, tz, locale, settings_path):
    """Convert every eligible text segment of an HTML document."""
    config = ctx.obj["config"]
    html = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")

    async def _convert():
        store = open_store(config, settings_path)
        data = await effective_settings(
            store, currency=currency, units=units, date_format=date_format, tz=tz, locale=locale
        )
        return await convert_html(html, data)

    result = run(_convert(), ctx.obj["debug"])
    if output:
        Path(output).write_text(result, encoding="utf-8")
        console.print(f"[green]✅ Wrote {output}[/green]")
    else:
        click.echo(result)


@main.command()
@click.argument("value")
@conversion_options
@click.pass_context
def text(ctx, value, currency, units, date_format, tz, locale, settings_path):
    """Convert a single string."""
    config = ctx.obj["config"]

    async def _convert():
        store = open_store(config, settings_path)
        data = await effective_settings(
            store, currency=currency, units=units, date_format=date_format, tz=tz, locale=locale
        )
        return await convert_text(value, data)

    click.echo(run(_convert(), ctx.obj["debug"]))


@main.group()
def rates():
    """Exchange-rate cache management."""


@rates.command("refresh")
@click.option("--force", is_flag=True, help=" 🔄 Fetch even if cached rates are fresh")
@click.option("--settings", "settings_path", type=click.Path(dir_okay=False), help=" 🗂️  Settings state file")
@click.pass_context
def rates_refresh(ctx, force, settings_path):
    """Fetch fresh rates when the cached ones are older than the configured age."""
    config = ctx.obj["config"]
    store = open_store(config, settings_path)
    updated = run(
        refresh_rates_if_stale(
            store,
            max_age_hours=config.rates_max_age_hours,
            base=config.rates_base,
            url=config.rates_url,
            timeout=config.rates_timeout,
            force=force,
        ),
        ctx.obj["debug"],
    )
    if updated:
        console.print("[green]✅ Exchange rates updated[/green]")
    else:
        console.print("[yellow]Exchange rates not updated (fresh, privacy mode or fetch failed)[/yellow]")


@rates.command("show")
@click.option("--settings", "settings_path", type=click.Path(dir_okay=False), help=" 🗂️  Settings state file")
@click.option("--json", "as_json", is_flag=True, help=" 📄 Output JSON")
@click.pass_context
def rates_show(ctx, settings_path, as_json):
    """Show the rate table converters would use."""
    config = ctx.obj["config"]
    store = open_store(config, settings_path)
    settings = run(_load(store), ctx.obj["debug"])

    bundled = load_default_rates()
    rates_table = dict(bundled.rates)
    source = f"bundled ({bundled.date})"
    if settings.exchange_rates:
        rates_table = dict(settings.exchange_rates)
        source = f"fetched ({settings.exchange_rates_date})"
    if settings.custom_rates:
        rates_table.update(settings.custom_rates)

    if as_json:
        click.echo(json.dumps({"source": source, "rates": rates_table}, indent=2, sort_keys=True))
        return

    table = Table(title=f"Exchange rates per 1 {bundled.base} - {source}")
    table.add_column("Code", style="cyan")
    table.add_column("Rate", justify="right")
    table.add_column("Custom", justify="center")
    for code in sorted(rates_table):
        custom = "✓" if settings.custom_rates and code in settings.custom_rates else ""
        table.add_row(code, f"{rates_table[code]:.4f}", custom)
    console.print(table)


async def _load(store: SettingsStore) -> Settings:
    return Settings.from_mapping(await store.get())


@main.command()
@click.option("--settings", "settings_path", type=click.Path(dir_okay=False), help=" 🗂️  Settings state file")
@click.pass_context
def status(ctx, settings_path):
    """Show effective settings and rate cache age."""
    config = ctx.obj["config"]
    store = open_store(config, settings_path)
    settings = run(_load(store), ctx.obj["debug"])

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Enabled", "yes" if settings.enabled else "no")
    table.add_row("Target currency", settings.target_currency)
    table.add_row("Unit system", settings.unit_system)
    table.add_row("Date / time style", f"{settings.date_format} / {settings.time_format}")
    table.add_row("Timezone", settings.timezone or "host local")
    table.add_row("Locale", settings.locale)
    table.add_row("Privacy mode", "on" if settings.privacy_mode else "off")
    table.add_row("Custom rates", ", ".join(sorted(settings.custom_rates or {})) or "none")
    if settings.exchange_rates_last_fetch:
        fetched = datetime.fromtimestamp(settings.exchange_rates_last_fetch / 1000, tz=timezone.utc)
        table.add_row("Rates fetched", f"{fetched:%Y-%m-%d %H:%M} UTC ({settings.exchange_rates_date})")
    else:
        table.add_row("Rates fetched", "never (using bundled rates)")
    table.add_row("Settings file", str(store.path))
    table.add_row("Config file", config.config_file)

    console.print(Panel(table, title="📊 WebConvert+ Status", border_style="cyan"))


if __name__ == "__main__":
    main()
