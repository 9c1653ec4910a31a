"""
Card Renderer -- Intro, Section and Escaping Tests

- Every user string is HTML-escaped.
- The first section gets an h1 and the scroll hint; later sections get h2.
- The cat stage appears only when an animation derives an image.
- Same config → same markup.
"""

from engine.card.renderer import render, render_page, section_selector
from engine.card.types import RenderOptions


def card(**section_fields):
    s = {"id": "a", "title": "First", "layout": "grid", "catAnimation": "none", "images": []}
    s.update(section_fields)
    return {
        "intro": {"year": "2025", "title": "Happy Holidays!", "from": "from us", "image": None},
        "audio": {"src": "/assets/audio/lullaby.mp3", "volume": 0.4},
        "sections": [s, {"id": "b", "title": "Second", "catAnimation": "none", "images": []}],
    }


# ============================================================================
# Escaping
# ============================================================================


class TestEscaping:
    def test_title_markup_is_escaped(self):
        markup = render(card(title="<b>hi</b>")).markup
        assert "&lt;b&gt;hi&lt;/b&gt;" in markup
        assert "<b>hi</b>" not in markup

    def test_body_and_intro_escaped(self):
        cfg = card(body='Tom & "Jerry"')
        cfg["intro"]["from"] = "<script>x</script>"
        markup = render(cfg).markup
        assert "Tom &amp; &quot;Jerry&quot;" in markup
        assert "&lt;script&gt;x&lt;/script&gt;" in markup

    def test_image_attributes_escaped(self):
        cfg = card(images=[{"src": '/a.jpg" onerror="x', "alt": "<i>"}])
        markup = render(cfg).markup
        assert 'src="/a.jpg&quot; onerror=&quot;x"' in markup
        assert 'alt="&lt;i&gt;"' in markup


# ============================================================================
# Structure
# ============================================================================


class TestSections:
    def test_heading_levels(self):
        markup = render(card()).markup
        assert '<h1 class="section-title">First</h1>' in markup
        assert '<h2 class="section-title">Second</h2>' in markup

    def test_data_section_numbers_are_one_based(self):
        markup = render(card()).markup
        assert 'data-section="1"' in markup
        assert 'data-section="2"' in markup
        assert section_selector(0) == '[data-section="1"]'

    def test_body_is_optional(self):
        assert "section-body" not in render(card(body=None)).markup
        assert '<div class="section-body"><p>Hello</p></div>' in render(card(body="Hello")).markup

    def test_scroll_hint_only_on_first_section(self):
        markup = render(card()).markup
        assert markup.count('id="scroll-hint"') == 1

    def test_scroll_hint_can_be_turned_off(self):
        assert 'id="scroll-hint"' not in render(card(showScrollHint=False)).markup

    def test_cat_stage_from_animation(self):
        result = render(card(catAnimation="peek-corner", catImage=None))
        assert '<img src="/assets/cats/shrimpas_03.png" alt="" class="cat" />' in result.markup
        assert "data-cat-trigger" in result.markup
        assert result.cat_sections == [0]

    def test_unknown_animation_has_no_cat_stage(self):
        result = render(card(catAnimation="moonwalk", catImage="/assets/cats/shrimpas_00.png"))
        assert "cat-stage" not in result.markup
        assert result.cat_sections == []

    def test_render_does_not_modify_config(self):
        cfg = card(catAnimation="pop-up", catImage="/stale.png")
        render(cfg)
        assert cfg["sections"][0]["catImage"] == "/stale.png"

    def test_deterministic(self):
        assert render(card()).markup == render(card()).markup


class TestIntro:
    def test_intro_fields(self):
        markup = render(card()).markup
        assert '<p class="intro-year">2025</p>' in markup
        assert '<h1 class="intro-title">Happy Holidays!</h1>' in markup
        assert '<p class="intro-from">from us</p>' in markup

    def test_default_tap_prompt(self):
        assert '<p class="intro-tap">tap to enter</p>' in render(card()).markup

    def test_intro_image_optional(self):
        cfg = card()
        assert "intro-image" not in render(cfg).markup
        cfg["intro"]["image"] = "/data/images/intro.jpg"
        assert '<img src="/data/images/intro.jpg" alt="" class="intro-image" />' in render(cfg).markup


# ============================================================================
# Full page
# ============================================================================


class TestRenderPage:
    def test_document_shell(self):
        html = render_page(card(), RenderOptions(stylesheet="/card.css", asset_base_url="https://cdn.test"))
        assert html.startswith("<!DOCTYPE html>")
        assert '<link rel="stylesheet" href="https://cdn.test/card.css">' in html
        assert '<main id="card-container">' in html
        assert "<title>Happy Holidays!</title>" in html

    def test_audio_json_cannot_close_script(self):
        cfg = card()
        cfg["audio"]["src"] = "/a</script><script>alert(1)//.mp3"
        html = render_page(cfg)
        assert "</script><script>alert(1)" not in html

    def test_script_optional(self):
        html = render_page(card(), RenderOptions(include_script=False))
        assert "<script" not in html

    def test_explicit_title_wins_over_intro(self):
        html = render_page(card(), RenderOptions(title="My Custom Title"))
        assert "<title>My Custom Title</title>" in html
        assert '<meta property="og:title" content="My Custom Title">' in html

    def test_title_falls_back_to_page_default(self):
        cfg = card()
        cfg["intro"]["title"] = None
        assert "<title>Holiday Card</title>" in render_page(cfg)


# ============================================================================
# Section numbering
# ============================================================================


class TestSectionNumbering:
    def test_numbers_follow_raw_list_positions(self):
        cfg = card()
        cfg["sections"].insert(0, "garbage")
        markup = render(cfg).markup
        assert 'data-section="1"' not in markup
        assert '<section class="card-section" data-section="2"' in markup
        assert '<section class="card-section" data-section="3"' in markup
        assert '<h2 class="section-title">First</h2>' in markup
