"""
Card Forms -- Builder Form Markup and Control Path Tests

- Each section renders as a fieldset tagged with its raw list index.
- Layout, cat animation and tilt selects list the preset options and mark
  the current one selected.
- The two span checkboxes of an image share one path.
- Every control path parses and feeds back through the binder.
- Authored text is escaped.
"""

import pytest

from engine.card.binder import EditBinder
from engine.card.forms import form_controls, render_section_form, render_section_forms, section_controls
from engine.card.preview import PreviewSynchronizer
from engine.card.presets import CAT_ANIMATIONS, LAYOUTS, ROTATIONS
from engine.card.session import EditorSession
from engine.card.types import format_path, parse_path


@pytest.fixture
def session():
    return EditorSession()


@pytest.fixture
def binder(session, host, defer):
    return EditBinder(session, PreviewSynchronizer(session, host, defer=defer), delay=0.02)


# ============================================================================
# Markup
# ============================================================================


class TestSectionForm:
    def test_fieldset_per_section(self, config):
        html = render_section_forms(config)
        for i in range(len(config["sections"])):
            assert f'data-section-index="{i}"' in html
        assert "Section 1" in html
        assert f"Section {len(config['sections'])}" in html

    def test_selects_list_presets_with_current_selected(self, config):
        html = render_section_form(config["sections"][1], 1)
        assert html.count("<option") == len(LAYOUTS) + len(CAT_ANIMATIONS) + len(ROTATIONS) * 3
        assert '<option value="hero-top" selected>Hero Top</option>' in html
        assert '<option value="peek-corner" selected>Peek from Corner</option>' in html
        assert '<option value="tall-left">Tall Left</option>' in html

    def test_rotation_none_selects_empty_option(self):
        section = {"title": "T", "images": [{"src": "", "alt": "", "rotation": None, "span": None}]}
        html = render_section_form(section, 0)
        assert '<option value="" selected>None</option>' in html
        assert "+ Image" in html
        assert "has-image" not in html

    def test_span_checkboxes_share_one_path(self, config):
        html = render_section_form(config["sections"][0], 0)
        assert '<input type="checkbox" name="sections.0.images.0.span" value="tall" checked />' in html
        assert '<input type="checkbox" name="sections.0.images.0.span" value="hero" />' in html

    def test_text_is_escaped(self):
        section = {"title": 'Say "hi" <b>', "body": "Tom & Jerry", "images": []}
        html = render_section_form(section, 0)
        assert 'value="Say &quot;hi&quot; &lt;b&gt;"' in html
        assert "Tom &amp; Jerry</textarea>" in html

    def test_thumbnail_src_is_escaped(self):
        section = {"images": [{"src": "/a.jpg\" onload=\"x", "alt": "", "rotation": None, "span": None}]}
        html = render_section_form(section, 0)
        assert 'onload="x' not in html
        assert "has-image" in html
        assert "Change" in html

    def test_non_dict_sections_keep_their_index(self, config):
        config["sections"].insert(0, "garbage")
        html = render_section_forms(config)
        assert 'data-section-index="0"' not in html
        assert 'data-section-index="1"' in html


# ============================================================================
# Control paths
# ============================================================================


class TestControlPaths:
    def test_every_path_parses(self, config):
        for control in form_controls(config):
            segments = parse_path(control.path)
            assert segments
            assert format_path(segments) == control.path

    def test_intro_controls_come_first(self, config):
        paths = [c.path for c in form_controls(config)[:3]]
        assert paths == ["intro.year", "intro.title", "intro.from"]

    def test_section_controls_reflect_values(self, config):
        controls = {c.path: c for c in section_controls(config["sections"][0], 0) if c.kind != "checkbox"}
        assert controls["sections.0.title"].value == "How was our 2025?"
        assert controls["sections.0.layout"].value == "tall-left"
        assert controls["sections.0.images.1.rotation"].value == "cw-1"


class TestBinderRoundTrip:
    async def test_span_checkbox_feeds_back_through_binder(self, binder, session):
        tall = next(
            c for c in form_controls(session.config) if c.path == "sections.0.images.1.span" and c.value == "tall"
        )
        assert tall.checked is False

        r = binder.handle_input(tall.path, tall.value, tall.kind, checked=True)
        assert r.applied
        assert session.config["sections"][0]["images"][1]["span"] == "tall"
        assert 'name="sections.0.images.1.span" value="tall" checked' in binder.render_forms()

        binder.handle_input(tall.path, tall.value, tall.kind, checked=False)
        assert session.config["sections"][0]["images"][1]["span"] is None
        binder.debouncer.cancel()

    async def test_select_feeds_back_through_binder(self, binder, session):
        layout = next(c for c in form_controls(session.config) if c.path == "sections.2.layout")
        binder.handle_input(layout.path, "grid", layout.kind)
        assert session.config["sections"][2]["layout"] == "grid"
        assert '<option value="grid" selected>Grid</option>' in binder.render_forms()
        binder.debouncer.cancel()
