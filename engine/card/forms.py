"""
Holiday Card Kernel — Builder Forms

Pure function: config → editor form markup for the builder.

Every control's name is a dotted field path that parse_path accepts, so a
host can hand (name, value, kind, checked) straight to
EditBinder.handle_input. The two span checkboxes of an image share one path
and carry the span they set ("tall" / "hero").

Select options come from the preset tables, so the builder offers exactly
what the layout resolver and cat derivation understand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import chevron

from engine.card.presets import CAT_ANIMATIONS, LAYOUTS, ROTATIONS
from engine.card.renderer import escape

INTRO_FIELDS = ("year", "title", "from")

SPAN_CHOICES: list[tuple[str, str]] = [("tall", "Tall"), ("hero", "Wide")]


@dataclass
class FormControl:
    """One editable control: where it writes and what it currently shows."""

    path: str
    kind: str
    value: Any
    label: str
    checked: bool | None = None
    options: list[tuple[str, str]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Controls
# ---------------------------------------------------------------------------


def intro_controls(intro: dict[str, Any]) -> list[FormControl]:
    """The intro text inputs, filled from the config (None shows as empty)."""
    if not isinstance(intro, dict):
        intro = {}
    return [
        FormControl(path=f"intro.{name}", kind="text", value=_text(intro.get(name)), label=name.capitalize())
        for name in INTRO_FIELDS
    ]


def image_controls(section_index: int, image: dict[str, Any], image_index: int) -> list[FormControl]:
    base = f"sections.{section_index}.images.{image_index}"
    controls = [
        FormControl(
            path=f"{base}.rotation",
            kind="select",
            value=_text(image.get("rotation")),
            label="Tilt",
            options=[(_text(r["id"]), str(r["label"])) for r in ROTATIONS],
        )
    ]
    for span, label in SPAN_CHOICES:
        controls.append(
            FormControl(path=f"{base}.span", kind="checkbox", value=span, label=label, checked=image.get("span") == span)
        )
    return controls


def section_controls(section: dict[str, Any], index: int) -> list[FormControl]:
    """Controls for one section fieldset, its image rows included."""
    base = f"sections.{index}"
    controls = [
        FormControl(path=f"{base}.title", kind="text", value=_text(section.get("title")), label="Title"),
        FormControl(path=f"{base}.body", kind="textarea", value=_text(section.get("body")), label="Body Text"),
        FormControl(
            path=f"{base}.layout",
            kind="select",
            value=_text(section.get("layout")),
            label="Layout",
            options=[(str(layout["id"]), str(layout["label"])) for layout in LAYOUTS],
        ),
        FormControl(
            path=f"{base}.catAnimation",
            kind="select",
            value=_text(section.get("catAnimation")),
            label="Cat Animation",
            options=[(str(a["id"]), str(a["label"])) for a in CAT_ANIMATIONS],
        ),
    ]
    for image_index, image in _images(section):
        controls.extend(image_controls(index, image, image_index))
    return controls


def form_controls(config: dict[str, Any]) -> list[FormControl]:
    """Every control the builder shows for a config, in form order."""
    controls = intro_controls(config.get("intro") or {})
    for index, section in _sections(config):
        controls.extend(section_controls(section, index))
    return controls


# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------

SECTION_FORM_TEMPLATE = """<fieldset class="builder-fieldset section-fieldset" data-section-index="{{section_index}}">
  <legend>
    Section {{number}}
    <button type="button" class="delete-section-btn" data-index="{{section_index}}" title="Delete section">&times;</button>
  </legend>
  <label>
    Title
    <input type="text" name="{{title_path}}" value="{{title}}" />
  </label>
  <label>
    Body Text
    <textarea name="{{body_path}}" rows="2">{{body}}</textarea>
  </label>
  <label>
    Layout
    <select name="{{layout_path}}">
      {{#layouts}}<option value="{{value}}"{{#selected}} selected{{/selected}}>{{label}}</option>{{/layouts}}
    </select>
  </label>
  <label>
    Cat Animation
    <select name="{{animation_path}}">
      {{#animations}}<option value="{{value}}"{{#selected}} selected{{/selected}}>{{label}}</option>{{/animations}}
    </select>
  </label>
  <div class="images-group">
    <strong>Images</strong>
    {{{images}}}
    <button type="button" class="btn btn-small add-image-btn" data-section="{{section_index}}">+ Add Image</button>
  </div>
</fieldset>"""

IMAGE_ROW_TEMPLATE = """<div class="image-row" data-section="{{section_index}}" data-image="{{image_index}}">
  <div class="image-picker{{#has_image}} has-image{{/has_image}}" style="{{{thumbnail_style}}}">
    <input type="file" accept="image/*" class="image-file-input" data-section="{{section_index}}" data-image="{{image_index}}" />
    <span class="image-picker-label">{{picker_label}}</span>
  </div>
  <div class="image-options">
    <label class="select-label">
      Tilt
      <select name="{{rotation_path}}">
        {{#rotations}}<option value="{{value}}"{{#selected}} selected{{/selected}}>{{label}}</option>{{/rotations}}
      </select>
    </label>
    {{#spans}}<label class="checkbox-label">
      <input type="checkbox" name="{{path}}" value="{{value}}"{{#checked}} checked{{/checked}} />
      {{label}}
    </label>
    {{/spans}}<button type="button" class="btn-icon delete-image-btn" data-section="{{section_index}}" data-image="{{image_index}}" title="Remove image">&times;</button>
  </div>
</div>"""


def render_section_forms(config: dict[str, Any]) -> str:
    """Fieldsets for every section, in order."""
    return "\n".join(render_section_form(section, index) for index, section in _sections(config))


def render_section_form(section: dict[str, Any], index: int) -> str:
    title, body, layout, animation, *_ = section_controls(section, index)
    images = "\n".join(render_image_row(index, image, image_index) for image_index, image in _images(section))
    context = {
        "section_index": index,
        "number": index + 1,
        "title_path": title.path,
        "title": title.value,
        "body_path": body.path,
        "body": body.value,
        "layout_path": layout.path,
        "layouts": _options(layout),
        "animation_path": animation.path,
        "animations": _options(animation),
        "images": images,
    }
    return chevron.render(SECTION_FORM_TEMPLATE, context)


def render_image_row(section_index: int, image: dict[str, Any], image_index: int) -> str:
    rotation, *spans = image_controls(section_index, image, image_index)
    src = _text(image.get("src"))
    context = {
        "section_index": section_index,
        "image_index": image_index,
        "has_image": bool(src),
        "thumbnail_style": f"background-image: url('{escape(src)}')" if src else "",
        "picker_label": "Change" if src else "+ Image",
        "rotation_path": rotation.path,
        "rotations": _options(rotation),
        "spans": [
            {"path": span.path, "value": span.value, "label": span.label, "checked": bool(span.checked)}
            for span in spans
        ],
    }
    return chevron.render(IMAGE_ROW_TEMPLATE, context)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _options(control: FormControl) -> list[dict[str, Any]]:
    return [{"value": value, "label": label, "selected": value == control.value} for value, label in control.options]


def _sections(config: dict[str, Any]) -> list[tuple[int, dict[str, Any]]]:
    return [(i, s) for i, s in enumerate(config.get("sections") or []) if isinstance(s, dict)]


def _images(section: dict[str, Any]) -> list[tuple[int, dict[str, Any]]]:
    images = section.get("images")
    if not isinstance(images, list):
        return []
    return [(i, img) for i, img in enumerate(images) if isinstance(img, dict)]


def _text(value: Any) -> str:
    return "" if value is None else str(value)
