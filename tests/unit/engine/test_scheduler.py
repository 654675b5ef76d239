"""Unit tests for MutationEngine scheduling, batching and stamping."""

import pytest

from webconvert.core.errors import EngineStateError
from webconvert.dom import Document
from webconvert.engine import EngineState, ManualHostLoop, MutationEngine, UnlimitedDeadline


class BracketConverter:
    """Wraps every non-blank segment in brackets and records calls."""

    name = "bracket"

    def __init__(self):
        self.calls = []

    def process(self, text):
        self.calls.append(text)
        if not text.strip():
            return text
        return f"[{text}]"


class ScriptedDeadline:
    """Reports the given remaining times in order, then zero."""

    did_timeout = False

    def __init__(self, *remaining):
        self._remaining = list(remaining)

    def time_remaining(self):
        return self._remaining.pop(0) if self._remaining else 0.0


def make_engine(html, host=None):
    document = Document.from_html(html)
    host = host or ManualHostLoop()
    converter = BracketConverter()
    engine = MutationEngine(document, host=host)
    engine.register_converter(converter)
    return engine, document, host, converter


def texts(document, selector="p"):
    return [p.get_text() for p in document.soup.find_all(selector)]


class TestEngineLifecycle:
    """Test start/stop and state transitions."""

    def test_initial_state_idle(self):
        engine, *_ = make_engine("<p>a</p>")
        assert engine.state is EngineState.IDLE

    def test_start_scans_and_schedules(self):
        engine, document, host, converter = make_engine("<p>a</p><p>b</p>")

        engine.start()

        assert engine.state is EngineState.SCHEDULED
        assert engine.pending_count == 2
        assert host.pending_idle == 1

        host.run_until_idle()

        assert engine.state is EngineState.OBSERVING
        assert texts(document) == ["[a]", "[b]"]

    def test_start_twice_is_harmless(self):
        engine, _, host, _ = make_engine("<p>a</p>")
        engine.start()
        engine.start()
        assert host.idle_requests == 1

    def test_stop_is_idempotent(self):
        engine, *_ = make_engine("<p>a</p>")
        engine.stop()
        engine.start()
        engine.stop()
        engine.stop()
        assert engine.state is EngineState.IDLE

    def test_state_is_processing_during_flush(self):
        engine, _, host, _ = make_engine("<p>a</p>")
        seen = []

        class Probe:
            name = "probe"

            def process(self, text):
                seen.append(engine.state)
                return text

        engine.register_converter(Probe())
        engine.start()
        host.run_until_idle()

        assert seen == [EngineState.PROCESSING]

    def test_scheduled_flush_still_runs_after_stop(self):
        engine, document, host, _ = make_engine("<p>a</p>")
        engine.start()
        engine.stop()

        host.run_until_idle()

        assert texts(document) == ["[a]"]
        assert engine.state is EngineState.IDLE

    def test_nothing_to_do_requests_no_flush(self):
        engine, _, host, _ = make_engine("<script>x</script>")
        engine.start()
        assert host.idle_requests == 0
        assert engine.state is EngineState.OBSERVING


class TestMutationHandling:
    """Test reaction to observed changes."""

    def test_inserted_subtree_is_scanned(self):
        engine, document, host, _ = make_engine("<div id='feed'></div>")
        engine.start()
        host.run_until_idle()

        document.append_html(document.select_one("#feed"), "<article><p>one</p><p>two</p></article>")
        host.run_until_idle()

        assert texts(document) == ["[one]", "[two]"]

    def test_inserted_text_is_processed(self):
        engine, document, host, _ = make_engine("<p id='t'></p>")
        engine.start()
        host.run_until_idle()

        document.insert(document.select_one("#t"), "fresh")
        host.run_until_idle()

        assert document.select_one("#t").get_text() == "[fresh]"

    def test_processed_container_not_converted_again(self):
        engine, document, host, converter = make_engine("<p id='t'>a</p>")
        engine.start()
        host.run_until_idle()

        paragraph = document.select_one("#t")
        document.set_text(paragraph.contents[0], "b")
        host.run_until_idle()

        assert paragraph.get_text() == "b"
        assert converter.calls == ["a"]

    def test_no_conversion_after_stop(self):
        engine, document, host, _ = make_engine("<div id='feed'></div>")
        engine.start()
        engine.stop()

        document.append_html(document.select_one("#feed"), "<p>late</p>")
        host.run_until_idle()

        assert texts(document) == ["late"]

    def test_skipped_containers_ignored(self):
        engine, document, host, converter = make_engine(
            "<p>a</p><code>b</code><p class='notranslate'>c</p><div contenteditable='true'>d</div>"
        )
        engine.start()
        host.run_until_idle()

        assert converter.calls == ["a"]


class TestFlushBatching:
    """Test deduplication, chunking and coalescing."""

    def test_duplicate_enqueue_processed_once(self):
        engine, document, host, converter = make_engine("<p id='t'>a</p>")
        segment = document.select_one("#t").contents[0]

        assert engine.enqueue(segment) is True
        assert engine.enqueue(segment) is False
        engine.request_flush()
        host.run_until_idle()

        assert converter.calls == ["a"]

    def test_flush_requests_coalesce(self):
        engine, document, host, _ = make_engine("<p id='t'>a</p>")
        engine.enqueue(document.select_one("#t").contents[0])

        assert engine.request_flush() is True
        assert engine.request_flush() is False
        assert host.idle_requests == 1

    def test_deadline_chunking_requests_one_follow_up(self):
        deadlines = iter([ScriptedDeadline(5.0, 0.0)])
        host = ManualHostLoop(deadline_factory=lambda: next(deadlines, UnlimitedDeadline()))
        engine, document, _, converter = make_engine("".join(f"<p>{i}</p>" for i in range(5)), host=host)

        engine.start()
        host.run_once()

        assert texts(document) == ["[0]", "[1]", "2", "3", "4"]
        assert engine.pending_count == 3
        assert engine.stats.segments_deferred == 3
        assert host.pending_idle == 1
        assert engine.state is EngineState.SCHEDULED

        host.run_until_idle()

        assert texts(document) == ["[0]", "[1]", "[2]", "[3]", "[4]"]
        assert host.idle_requests == 2
        assert engine.stats.flushes == 2
        assert converter.calls == ["0", "1", "2", "3", "4"]

    def test_exhausted_deadline_still_makes_progress(self):
        host = ManualHostLoop(deadline_factory=lambda: ScriptedDeadline())
        engine, document, _, _ = make_engine("<p>a</p><p>b</p><p>c</p>", host=host)

        engine.start()
        host.run_until_idle()

        assert texts(document) == ["[a]", "[b]", "[c]"]
        assert engine.stats.flushes == 3

    def test_detached_segment_skipped(self):
        engine, document, host, converter = make_engine("<p id='t'>a</p><p>b</p>")
        engine.start()
        document.remove(document.select_one("#t"))

        host.run_until_idle()

        assert converter.calls == ["b"]
        assert engine.stats.segments_skipped_detached == 1

    def test_reentrant_flush_rejected(self):
        engine, *_ = make_engine("<p>a</p>")
        engine._processing = True
        with pytest.raises(EngineStateError):
            engine._flush(None)

    def test_failing_converter_does_not_stop_batch(self):
        engine, document, host, _ = make_engine("<p>a</p><p>b</p>")

        class Picky:
            name = "picky"

            def process(self, text):
                if text == "[a]":
                    raise ValueError("nope")
                return text + "!"

        engine.register_converter(Picky())
        engine.start()
        host.run_until_idle()

        assert texts(document) == ["[a]", "[b]!"]


class TestStampingAndIdempotence:
    """Test recovery metadata and repeated runs."""

    def test_container_stamped_with_original(self):
        engine, document, host, _ = make_engine("<p id='t'>a</p>")
        engine.start()
        host.run_until_idle()

        paragraph = document.select_one("#t")
        assert paragraph["data-webconverted"] == "true"
        assert paragraph["data-original-text"] == "a"
        assert paragraph["title"] == "Original: a"

    def test_unchanged_segment_not_stamped(self):
        engine, document, host, _ = make_engine("<p id='t'>   </p>")
        engine.start()
        host.run_until_idle()
        assert not document.select_one("#t").has_attr("data-webconverted")

    def test_rescan_without_clearing_changes_nothing(self):
        engine, document, host, converter = make_engine("<p>a</p>")
        engine.start()
        host.run_until_idle()

        assert engine.rescan() == 0
        host.run_until_idle()

        assert texts(document) == ["[a]"]
        assert converter.calls == ["a"]

    def test_rescan_after_clearing_marker(self):
        engine, document, host, _ = make_engine("<p id='t'>a</p>")
        engine.start()
        host.run_until_idle()

        paragraph = document.select_one("#t")
        document.clear_marker(paragraph)
        assert engine.rescan() == 1
        host.run_until_idle()

        assert paragraph.get_text() == "[[a]]"
        assert paragraph["data-original-text"] == "a"
