"""
Holiday Card Kernel — Renderer

Pure function: config → RenderedCard(markup, attach, detach)
No AI. No IO. Deterministic: same config → same markup, always.

- Intro overlay and section shells are Mustache templates (chevron escapes
  every {{variable}}); the image block is assembled by the layout resolver
  and escaped here.
- catImage is derived from catAnimation on every render; the caller's
  config is never modified.
- attach()/detach() own the only side effects (audio, visibility watcher)
  and go through the CardContainer protocol.
"""

from __future__ import annotations

import json
import logging
from html import escape as _html_escape
from typing import Any

import chevron

from engine.card.host import AudioHandle, CardContainer, VisibilityWatcher
from engine.card.layout import ImageBlock, resolve_images
from engine.card.model import derive_cat_images
from engine.card.presets import DEFAULT_TAP_PROMPT, DEFAULT_VOLUME
from engine.card.types import RenderOptions, VisibilityOptions

logger = logging.getLogger(__name__)

INTRO_SELECTOR = "#intro-overlay"
DEFAULT_PAGE_TITLE = "Holiday Card"

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class RenderedCard:
    """
    Rendered markup plus the lifecycle hooks for one concrete container.

    attach() releases whatever a previous attach() opened; detach() is
    always safe, including before attach() and after a previous detach().
    """

    def __init__(self, config: dict[str, Any], markup: str, cat_sections: list[int]) -> None:
        self.config = config
        self.markup = markup
        self.cat_sections = cat_sections
        self.entered = False
        self._audio: AudioHandle | None = None
        self._watcher: VisibilityWatcher | None = None
        self._container: CardContainer | None = None
        self._activated: set[str] = set()

    @property
    def attached(self) -> bool:
        return self._container is not None

    def attach(self, container: CardContainer, visibility: VisibilityOptions | None = None) -> None:
        self.detach()
        self._container = container
        self.entered = False

        audio = self.config.get("audio") or {}
        if isinstance(audio, dict) and audio.get("src"):
            volume = audio.get("volume")
            if not isinstance(volume, int | float) or isinstance(volume, bool):
                volume = DEFAULT_VOLUME
            self._audio = container.open_audio(str(audio["src"]), volume=max(0.0, min(1.0, float(volume))), loop=True)

        if container.has_element(INTRO_SELECTOR):
            container.add_class("body", "intro-active")
            container.on_activate(INTRO_SELECTOR, self.enter)

        selectors = [section_selector(i) for i, _ in _sections(self.config)]
        self._watcher = container.watch_visibility(selectors, self._on_visible, visibility or VisibilityOptions())

    def enter(self) -> None:
        """First activation on the intro overlay. Later activations are no-ops."""
        if self.entered or self._container is None:
            return
        self.entered = True

        if self._audio is not None:
            try:
                self._audio.play()
            except Exception as e:
                logger.warning("renderer: audio play failed: %s", e)

        self._container.add_class(INTRO_SELECTOR, "hidden")
        self._container.remove_class("body", "intro-active")

    def detach(self) -> None:
        if self._audio is not None:
            self._audio.release()
            self._audio = None
        if self._watcher is not None:
            self._watcher.disconnect()
            self._watcher = None
        self._container = None
        self._activated.clear()
        self.entered = False

    def _on_visible(self, selector: str) -> None:
        # One-directional: once a section is active it stays active
        if self._container is None or selector in self._activated:
            return
        index = _selector_index(selector)
        if index is None or index not in self.cat_sections:
            return
        self._activated.add(selector)
        self._container.add_class(f"{selector} [data-cat-trigger]", "is-visible")
        self._container.add_class(selector, "cat-active")


def render(config: dict[str, Any]) -> RenderedCard:
    """
    Render the card body (intro overlay + sections) from a config.
    Assumes a structurally valid config; optional fields that are missing
    or malformed render as absent.
    """
    derived = derive_cat_images(config)
    parts = [_render_intro(derived.get("intro") or {})]
    cat_sections: list[int] = []
    for index, section in _sections(derived):
        if _has_cat_stage(section):
            cat_sections.append(index)
        parts.append(_render_section(section, index))

    return RenderedCard(derived, "\n".join(parts), cat_sections)


def render_page(config: dict[str, Any], options: RenderOptions | None = None) -> str:
    """
    Render a complete standalone HTML document for a card, including the
    inline script that performs attach() behaviour in a browser.
    """
    opts = options or RenderOptions()
    card = render(config)
    intro = card.config.get("intro") or {}

    title = escape(opts.title or _text(intro.get("title")) or DEFAULT_PAGE_TITLE)
    parts: list[str] = []
    parts.append("<!DOCTYPE html>")
    parts.append('<html lang="en">')
    parts.append("<head>")
    parts.append('  <meta charset="utf-8">')
    parts.append('  <meta name="viewport" content="width=device-width, initial-scale=1">')
    parts.append(f"  <title>{title}</title>")
    parts.append(f'  <meta property="og:title" content="{title}">')
    parts.append('  <meta property="og:type" content="website">')
    parts.append(f'  <meta property="og:url" content="{escape(opts.base_url)}">')
    parts.append(f'  <link rel="stylesheet" href="{escape(opts.asset_base_url + opts.stylesheet)}">')
    parts.append("</head>")
    parts.append("<body>")
    parts.append('  <main id="card-container">')
    parts.append(card.markup)
    parts.append("  </main>")

    if opts.include_script:
        audio = card.config.get("audio") or {}
        audio_json = json.dumps(
            {"src": audio.get("src"), "volume": audio.get("volume", DEFAULT_VOLUME)} if isinstance(audio, dict) else {},
            ensure_ascii=False,
        ).replace("</", "<\\/")
        parts.append('  <script type="application/json" id="card-audio">')
        parts.append(f"  {audio_json}")
        parts.append("  </script>")
        parts.append("  <script>")
        parts.append(CARD_SCRIPT)
        parts.append("  </script>")

    parts.append("</body>")
    parts.append("</html>")
    return "\n".join(parts)


def section_selector(index: int) -> str:
    return f'[data-section="{index + 1}"]'


def escape(text: Any) -> str:
    """HTML-escape user content. None renders as empty."""
    if text is None:
        return ""
    return _html_escape(str(text), quote=True)


# ---------------------------------------------------------------------------
# Intro overlay
# ---------------------------------------------------------------------------

INTRO_TEMPLATE = """<div id="intro-overlay">
  <div class="intro-content">
    {{#image}}<img src="{{image}}" alt="" class="intro-image" />{{/image}}
    <p class="intro-year">{{year}}</p>
    <h1 class="intro-title">{{title}}</h1>
    <p class="intro-from">{{from}}</p>
    <p class="intro-tap">{{tap_prompt}}</p>
  </div>
</div>"""


def _render_intro(intro: dict[str, Any]) -> str:
    if not isinstance(intro, dict):
        intro = {}
    context = {
        "image": _text(intro.get("image")),
        "year": _text(intro.get("year")),
        "title": _text(intro.get("title")),
        "from": _text(intro.get("from")),
        "tap_prompt": _text(intro.get("tapPrompt")) or DEFAULT_TAP_PROMPT,
    }
    return chevron.render(INTRO_TEMPLATE, context)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

SECTION_TEMPLATE = """<section class="card-section" data-section="{{number}}" data-cat-animation="{{animation}}">
  {{#cat_image}}<div class="cat-stage">
    <div class="cat-container" data-cat-trigger>
      <img src="{{cat_image}}" alt="" class="cat" />
    </div>
  </div>{{/cat_image}}
  <div class="section-content">
    <{{heading}} class="section-title">{{title}}</{{heading}}>
    {{{images}}}
    {{#body}}<div class="section-body"><p>{{body}}</p></div>{{/body}}
  </div>
  {{#scroll_hint}}<div class="scroll-hint" id="scroll-hint">
    <span class="scroll-hint-arrow">&#8595;</span>
  </div>{{/scroll_hint}}
</section>"""


def _render_section(section: dict[str, Any], index: int) -> str:
    context = {
        "number": index + 1,
        "animation": _text(section.get("catAnimation")) or "none",
        "cat_image": _text(section.get("catImage")) if _has_cat_stage(section) else "",
        # h1 only for the first section keeps a single top-level heading in the outline
        "heading": "h1" if index == 0 else "h2",
        "title": _text(section.get("title")),
        "images": _render_image_block(resolve_images(section)),
        "body": _text(section.get("body")),
        "scroll_hint": index == 0 and section.get("showScrollHint", True) is not False,
    }
    return chevron.render(SECTION_TEMPLATE, context)


def _has_cat_stage(section: dict[str, Any]) -> bool:
    return bool(section.get("catImage")) and section.get("catAnimation", "none") != "none"


def _render_image_block(block: ImageBlock) -> str:
    if block.kind == "none":
        return ""

    if block.kind == "single":
        photo = block.photos[0]
        return f'<img src="{escape(photo.src)}" alt="{escape(photo.alt)}" class="section-image" />'

    photos = []
    for photo in block.photos:
        photos.append(
            f'<div class="{" ".join(photo.wrapper_classes)}">'
            f'<img src="{escape(photo.src)}" alt="{escape(photo.alt)}" class="{" ".join(photo.image_classes)}" />'
            f"</div>"
        )
    classes = "scrapbook" if not block.layout_class else f"scrapbook {block.layout_class}"
    return f'<div class="{classes}">\n' + "\n".join(photos) + "\n</div>"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _sections(config: dict[str, Any]) -> list[tuple[int, dict[str, Any]]]:
    # Indices stay aligned with the raw list so data-section matches the preview cursor
    return [(i, s) for i, s in enumerate(config.get("sections") or []) if isinstance(s, dict)]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _selector_index(selector: str) -> int | None:
    prefix, suffix = '[data-section="', '"]'
    if not (selector.startswith(prefix) and selector.endswith(suffix)):
        return None
    number = selector[len(prefix) : -len(suffix)]
    return int(number) - 1 if number.isdigit() else None


# Browser-side attach(): intro gesture, looping audio, section watcher.
CARD_SCRIPT = """(function () {
  var cfg = JSON.parse(document.getElementById('card-audio').textContent || '{}');
  var audio = null;
  if (cfg.src) {
    audio = new Audio(cfg.src);
    audio.loop = true;
    audio.volume = cfg.volume == null ? 0.4 : cfg.volume;
    audio.preload = 'auto';
  }
  var overlay = document.getElementById('intro-overlay');
  var entered = false;
  if (overlay) {
    document.body.classList.add('intro-active');
    var enter = function (e) {
      if (entered) return;
      entered = true;
      e.preventDefault();
      if (audio) {
        var p = audio.play();
        if (p && p.catch) p.catch(function (err) { console.log('Audio play failed:', err); });
      }
      overlay.classList.add('hidden');
      document.body.classList.remove('intro-active');
    };
    overlay.addEventListener('touchend', enter);
    overlay.addEventListener('click', enter);
  }
  var observer = new IntersectionObserver(function (entries) {
    entries.forEach(function (entry) {
      if (!entry.isIntersecting) return;
      var trigger = entry.target.querySelector('[data-cat-trigger]');
      if (trigger) {
        trigger.classList.add('is-visible');
        entry.target.classList.add('cat-active');
      }
    });
  }, { root: null, rootMargin: '-10% 0px -10% 0px', threshold: 0.5 });
  document.querySelectorAll('.card-section').forEach(function (s) { observer.observe(s); });
})();"""
