"""Tests for application wiring and the one-shot helpers."""

import asyncio

import pytest

from webconvert.app import WebConvertApp, build_registry, convert_html, convert_text
from webconvert.core.settings import MemorySettingsStore, Settings
from webconvert.dom import Document
from webconvert.engine import AsyncioHostLoop, EngineState, ManualHostLoop

PAGE = """
<html><head><title>Trip 2024-05-20</title></head><body>
<h1>Race day</h1>
<p id="distance">The course is 26.2 miles long.</p>
<p id="weather">Expect 98.6 F at noon.</p>
<p id="date">Held on 2024-05-20.</p>
<code id="snippet">price = $100</code>
<p id="plain">Nothing to see here.</p>
</body></html>
"""


class TestConvertHtml:
    """Test end-to-end conversion of a document."""

    @pytest.mark.asyncio
    async def test_converts_eligible_segments(self):
        html = await convert_html(PAGE, {"unitSystem": "metric", "timezone": "UTC"})
        document = Document.from_html(html)

        assert "42.2 km (26.2 miles)" in document.select_one("#distance").get_text()
        assert "37.0 °C (98.6 F)" in document.select_one("#weather").get_text()
        assert "May 20, 2024 (was 2024-05-20)" in document.select_one("#date").get_text()
        assert document.select_one("#snippet").get_text() == "price = $100"
        assert document.select_one("#plain").get_text() == "Nothing to see here."

    @pytest.mark.asyncio
    async def test_recovery_metadata(self):
        html = await convert_html(PAGE, Settings(timezone="UTC"))
        distance = Document.from_html(html).select_one("#distance")

        assert distance["data-webconverted"] == "true"
        assert distance["data-original-text"] == "The course is 26.2 miles long."
        assert distance["title"] == "Original: The course is 26.2 miles long."

    @pytest.mark.asyncio
    async def test_head_is_not_observed(self):
        html = await convert_html(PAGE, {"timezone": "UTC"})
        assert Document.from_html(html).find("title").get_text() == "Trip 2024-05-20"

    @pytest.mark.asyncio
    async def test_repeatable(self):
        """Converting the same original twice gives the same result."""
        first = await convert_html(PAGE, {"timezone": "UTC"})
        second = await convert_html(PAGE, {"timezone": "UTC"})
        assert first == second

    @pytest.mark.asyncio
    async def test_converted_output_is_stable(self):
        """Feeding converted output back in changes nothing."""
        once = await convert_html(PAGE, {"timezone": "UTC"})
        twice = await convert_html(once, {"timezone": "UTC"})
        assert once == twice

    @pytest.mark.asyncio
    async def test_currency_to_rupees(self):
        html = await convert_html("<p id='p'>Only $100</p>", {"targetCurrency": "INR", "customRates": {"INR": 83}})
        text = Document.from_html(html).select_one("#p").get_text()
        assert "8,300.00" in text
        assert "(was $100)" in text


class TestConvertText:
    @pytest.mark.asyncio
    async def test_bare_string(self):
        assert await convert_text("26.2 miles", {"unitSystem": "metric"}) == "42.2 km (26.2 miles)"

    @pytest.mark.asyncio
    async def test_defaults(self):
        assert await convert_text("no numbers here") == "no numbers here"


class TestWebConvertApp:
    """Test session lifecycle."""

    @pytest.fixture
    def document(self):
        return Document.from_html("<div id='feed'><p id='a'>26.2 miles</p></div>")

    @pytest.mark.asyncio
    async def test_start_converts_existing_content(self, document):
        host = ManualHostLoop()
        app = WebConvertApp(document, MemorySettingsStore(), host)

        assert await app.start() is True
        host.run_until_idle()

        assert document.select_one("#a").get_text() == "42.2 km (26.2 miles)"
        assert app.running is True

    @pytest.mark.asyncio
    async def test_disabled_does_not_start(self, document):
        host = ManualHostLoop()
        app = WebConvertApp(document, MemorySettingsStore({"enabled": False}), host)

        assert await app.start() is False
        host.run_until_idle()

        assert document.select_one("#a").get_text() == "26.2 miles"
        assert app.engine.state is EngineState.IDLE

    @pytest.mark.asyncio
    async def test_toggle_persists_and_switches(self, document):
        host = ManualHostLoop()
        store = MemorySettingsStore({"enabled": False})
        app = WebConvertApp(document, store, host)
        await app.start()

        await app.toggle(True)
        host.run_until_idle()

        assert (await store.get())["enabled"] is True
        assert document.select_one("#a").get_text() == "42.2 km (26.2 miles)"

        await app.toggle(False)
        document.append_html(document.select_one("#feed"), "<p id='b'>10 ft</p>")
        host.run_until_idle()

        assert app.running is False
        assert document.select_one("#b").get_text() == "10 ft"

    @pytest.mark.asyncio
    async def test_dynamic_content_converted(self, document):
        host = ManualHostLoop()
        app = WebConvertApp(document, MemorySettingsStore(), host)
        await app.start()
        host.run_until_idle()

        document.append_html(document.select_one("#feed"), "<p id='b'>10 ft</p>")
        host.run_until_idle()

        assert document.select_one("#b").get_text() == "3.0 m (10 ft)"

    @pytest.mark.asyncio
    async def test_convert_selection_after_settings_change(self, document):
        host = ManualHostLoop()
        store = MemorySettingsStore({"unitSystem": "imperial"})
        app = WebConvertApp(document, store, host)
        await app.start()
        host.run_until_idle()
        assert document.select_one("#a").get_text() == "26.2 miles"

        await store.set({"unitSystem": "metric"})
        await app.reload()
        assert app.convert_selection() == 1
        host.run_until_idle()

        assert document.select_one("#a").get_text() == "42.2 km (26.2 miles)"

    def test_registry_order(self):
        assert build_registry().names == ["currency", "unit", "datetime"]


class TestLiveSession:
    """Test a session driven by the asyncio event loop."""

    @pytest.mark.asyncio
    async def test_default_host_follows_config(self, tmp_path):
        (tmp_path / "config.toml").write_text("[webconvert.engine]\nbudget_ms = 8.0\nidle_delay_s = 0.0\n")
        document = Document.from_html("<p id='a'>26.2 miles</p>")

        app = WebConvertApp(document, MemorySettingsStore())

        assert isinstance(app.host, AsyncioHostLoop)
        assert app.host.budget_ms == 8.0

        await app.start()
        for _ in range(20):
            await asyncio.sleep(0.01)
            if app.engine.state is EngineState.OBSERVING:
                break

        assert document.select_one("#a").get_text() == "42.2 km (26.2 miles)"

        document.append_html(document.root, "<p id='b'>10 ft</p>")
        for _ in range(20):
            await asyncio.sleep(0.01)
            if document.select_one("#b").has_attr("data-webconverted"):
                break

        assert document.select_one("#b").get_text() == "3.0 m (10 ft)"
        app.stop()
