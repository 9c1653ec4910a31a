"""
Holiday Card Kernel — Layout Resolver

Decides how a section's images are laid out:

- no images            → nothing
- one image / "single" → a single full-width image
- otherwise            → a scrapbook, one wrapper per image

Scrapbook wrappers carry the union of the automatic span (from layout and
position) and the explicit span authored on the image. Both are additive
class markers; an explicit span never removes an automatic one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from engine.card.presets import LAYOUT_IDS, ROTATION_IDS
from engine.card.types import SPAN_VALUES

# (layout, position) → span class
_AUTO_SPANS: dict[str, tuple[int, str]] = {
    "hero-top": (0, "hero"),
    "hero-bottom": (2, "hero"),
    "tall-left": (0, "tall"),
    "tall-right": (2, "tall"),
}


@dataclass
class PhotoSlot:
    src: str
    alt: str
    wrapper_classes: list[str] = field(default_factory=lambda: ["photo-wrapper"])
    image_classes: list[str] = field(default_factory=lambda: ["scrapbook-photo"])


@dataclass
class ImageBlock:
    """Resolved image block for one section."""

    kind: str  # "none" | "single" | "scrapbook"
    layout_class: str | None = None
    photos: list[PhotoSlot] = field(default_factory=list)


def auto_span(layout: str | None, index: int) -> str | None:
    """Span class the layout grants the image at `index`, if any."""
    rule = _AUTO_SPANS.get(layout or "")
    if rule is None:
        return None
    position, span = rule
    return span if index == position else None


def span_classes(layout: str | None, index: int, image: dict[str, Any]) -> list[str]:
    """Automatic span unioned with the explicit one, in that order, no duplicates."""
    classes: list[str] = []
    automatic = auto_span(layout, index)
    if automatic:
        classes.append(automatic)
    explicit = image.get("span")
    if explicit in SPAN_VALUES and explicit not in classes:
        classes.append(explicit)
    return classes


def layout_class(layout: str | None) -> str | None:
    """Unrecognized layouts get no layout class."""
    if layout in LAYOUT_IDS:
        return f"layout-{layout}"
    return None


def resolve_images(section: dict[str, Any]) -> ImageBlock:
    images = [img for img in section.get("images") or [] if isinstance(img, dict)]
    if not images:
        return ImageBlock(kind="none")

    layout = section.get("layout")

    if layout == "single" or len(images) == 1:
        first = images[0]
        return ImageBlock(
            kind="single",
            photos=[PhotoSlot(src=_text(first.get("src")), alt=_text(first.get("alt")), wrapper_classes=[], image_classes=["section-image"])],
        )

    photos: list[PhotoSlot] = []
    for index, img in enumerate(images):
        slot = PhotoSlot(src=_text(img.get("src")), alt=_text(img.get("alt")))
        slot.wrapper_classes.extend(span_classes(layout, index, img))
        rotation = img.get("rotation")
        if rotation in ROTATION_IDS:
            slot.image_classes.append(f"rotate-{rotation}")
        photos.append(slot)

    return ImageBlock(kind="scrapbook", layout_class=layout_class(layout), photos=photos)


def _text(value: Any) -> str:
    return "" if value is None else str(value)
