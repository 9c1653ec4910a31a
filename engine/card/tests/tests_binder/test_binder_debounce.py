"""
Card Binder -- Edit Binding and Debounce Tests

- Field edits update the session at once; the preview refresh waits until
  typing pauses, and a burst of edits renders once with the latest value.
- Structural edits and loads refresh immediately and cancel any pending
  debounced refresh.
- Checkbox controls contribute their value when checked and None when not.
"""

import asyncio

import pytest

from engine.card.binder import Debouncer, EditBinder, control_value
from engine.card.errors import StructuralValidationError
from engine.card.preview import PreviewSynchronizer, ReplaceContent
from engine.card.session import EditorSession
from engine.card.types import INTRO_INDEX

DELAY = 0.02


@pytest.fixture
def session():
    return EditorSession()


@pytest.fixture
def binder(session, host, defer):
    sync = PreviewSynchronizer(session, host, defer=defer)
    return EditBinder(session, sync, delay=DELAY)


def renders(host):
    return [c for c in host.commands if isinstance(c, ReplaceContent)]


# ============================================================================
# Control values
# ============================================================================


class TestControlValue:
    def test_checked_checkbox_gives_value(self):
        assert control_value("tall", "checkbox", checked=True) == "tall"

    def test_unchecked_checkbox_gives_none(self):
        assert control_value("tall", "checkbox", checked=False) is None

    def test_range_becomes_number(self):
        assert control_value("0.75", "range") == 0.75

    def test_text_passes_through(self):
        assert control_value("Hello", "text") == "Hello"

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            control_value("x", "slider")


# ============================================================================
# Debounce
# ============================================================================


class TestDebouncer:
    async def test_burst_fires_once(self):
        calls = []
        d = Debouncer(DELAY, lambda: calls.append(1))
        for _ in range(5):
            d.trigger()
        await asyncio.sleep(DELAY * 4)
        assert calls == [1]
        assert not d.pending

    async def test_cancel(self):
        calls = []
        d = Debouncer(DELAY, lambda: calls.append(1))
        d.trigger()
        d.cancel()
        await asyncio.sleep(DELAY * 4)
        assert calls == []

    async def test_flush_runs_now(self):
        calls = []
        d = Debouncer(10, lambda: calls.append(1))
        d.trigger()
        d.flush()
        assert calls == [1]
        assert not d.pending


class TestFieldEdits:
    async def test_typing_burst_renders_latest_once(self, binder, session, host):
        for text in ["H", "He", "Hel", "Hello"]:
            binder.handle_input("intro.title", text)
        assert session.config["intro"]["title"] == "Hello"
        assert renders(host) == []

        await asyncio.sleep(DELAY * 4)
        assert len(renders(host)) == 1
        assert '<h1 class="intro-title">Hello</h1>' in renders(host)[0].html

    async def test_checkbox_toggles_span(self, binder, session):
        binder.handle_input("sections.1.images.1.span", "tall", "checkbox", checked=True)
        assert session.config["sections"][1]["images"][1]["span"] == "tall"
        binder.handle_input("sections.1.images.1.span", "tall", "checkbox", checked=False)
        assert session.config["sections"][1]["images"][1]["span"] is None

    async def test_rejected_edit_does_not_schedule(self, binder, host):
        r = binder.handle_input("sections.99.title", "x")
        assert not r.applied
        assert not binder.debouncer.pending

    def test_empty_path_is_ignored(self, binder, session):
        before = session.revision
        assert binder.handle_input("", "x") is None
        assert session.revision == before


# ============================================================================
# Structural edits
# ============================================================================


class TestStructuralEdits:
    async def test_add_section_refreshes_now_and_cancels_pending(self, binder, host):
        binder.handle_input("intro.title", "Typing")
        assert binder.debouncer.pending

        binder.add_section()
        assert not binder.debouncer.pending
        assert len(renders(host)) == 1
        assert "New Section" in renders(host)[0].html

    def test_add_and_delete_image(self, binder, session, host):
        n = len(session.sections[0]["images"])
        binder.add_image(0)
        binder.delete_image(0, 0)
        assert len(session.sections[0]["images"]) == n
        assert len(renders(host)) == 2

    def test_refused_delete_does_not_render(self, host, defer):
        notices = []
        session = EditorSession({"intro": {"title": "Hi"}, "sections": [{"id": "a"}]}, notify=notices.append)
        binder = EditBinder(session, PreviewSynchronizer(session, host, defer=defer))
        r = binder.delete_section(0)
        assert not r.applied
        assert renders(host) == []
        assert notices[0].code == "LAST_SECTION"

    def test_delete_three_sections_end_to_end(self, host, defer):
        session = EditorSession(
            {"intro": {"title": "Hi"}, "sections": [{"id": "a"}, {"id": "b"}, {"id": "c"}]},
        )
        binder = EditBinder(session, PreviewSynchronizer(session, host, defer=defer))
        for _ in range(3):
            binder.delete_section(0)
        assert [s["id"] for s in session.sections] == ["c"]
        assert [n.code for n in session.notices] == ["LAST_SECTION"]
        assert len(renders(host)) == 2
        assert 'data-section="2"' not in renders(host)[-1].html


# ============================================================================
# Focus, import and export
# ============================================================================


class TestFocusAndFiles:
    def test_focus_tracking(self, binder):
        binder.focus_section(2)
        assert binder.synchronizer.active_section_index == 2
        binder.focus_intro()
        assert binder.synchronizer.active_section_index == INTRO_INDEX

    def test_import_replaces_and_shows_intro(self, binder, session, host, defer):
        binder.focus_section(3)
        defer.run()
        text = '{"intro": {"title": "Imported"}, "sections": [{"id": "x", "title": "Only"}]}'
        assert binder.import_file(text)
        assert session.config["intro"]["title"] == "Imported"
        assert binder.synchronizer.active_section_index == INTRO_INDEX
        assert "Imported" in renders(host)[-1].html
        assert defer.pending == []

    def test_malformed_import_leaves_session(self, binder, session):
        before = binder.export()
        with pytest.raises(StructuralValidationError):
            binder.import_file('{"intro": {"title": "x"}, "sections": {}}')
        assert binder.export() == before

    def test_export_is_pretty_json(self, binder):
        assert binder.export().startswith('{\n  "intro"')
