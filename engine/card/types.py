"""
Holiday Card Kernel — Shared Types

Data classes used across the model, renderer, preview and assembly.
These are the contracts that bind the kernel together.

A card config is a plain JSON tree (dicts and lists):

    {
      "intro":    {"year", "title", "from", "tapPrompt", "image"},
      "audio":    {"src", "volume"},
      "sections": [{"id", "title", "body", "layout", "catAnimation",
                    "catImage", "images": [{"src", "alt", "rotation", "span"}]}]
    }

Field paths into that tree ("sections.0.images.2.span") are parsed into
explicit KeySegment / IndexSegment addresses before they are walked.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

# ---------------------------------------------------------------------------
# Mutation type registry
# ---------------------------------------------------------------------------

MUTATION_TYPES: set[str] = {
    "field.set",
    "section.add",
    "section.remove",
    "image.add",
    "image.remove",
}

SPAN_VALUES: set[str] = {"tall", "hero"}

CONTROL_KINDS: set[str] = {"text", "textarea", "select", "checkbox", "range"}

# Intro focus in the preview cursor
INTRO_INDEX = -1


# ---------------------------------------------------------------------------
# Field paths
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeySegment:
    """Object-key step in a field path."""

    key: str


@dataclass(frozen=True)
class IndexSegment:
    """Array-index step in a field path."""

    index: int


PathSegment = KeySegment | IndexSegment


def parse_path(path: str) -> list[PathSegment]:
    """
    Parse a dot-delimited field path into segments.

    Digit-only segments become IndexSegment, everything else KeySegment:
      "intro.title"                 → [Key(intro), Key(title)]
      "sections.1.images.0.span"    → [Key(sections), Index(1), Key(images), Index(0), Key(span)]

    Returns an empty list for an empty path or one with empty segments.
    """
    if not path:
        return []
    segments: list[PathSegment] = []
    for part in path.split("."):
        if not part:
            return []
        if part.isdigit():
            segments.append(IndexSegment(int(part)))
        else:
            segments.append(KeySegment(part))
    return segments


def format_path(segments: list[PathSegment]) -> str:
    return ".".join(str(s.index) if isinstance(s, IndexSegment) else s.key for s in segments)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class Mutation:
    """
    One structural or field-level change to a card config.
    The model reads only `type` and `payload`.
    """

    type: str
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}


@dataclass
class Warning:
    """A non-fatal issue encountered while applying a mutation."""

    code: str
    message: str
    details: dict[str, Any] | None = None


@dataclass
class MutationResult:
    """
    Result of applying one mutation to a config.
    The model never throws — it always returns one of these.
    """

    config: dict[str, Any]
    applied: bool
    warnings: list[Warning] = field(default_factory=list)
    error: str | None = None
    index: int | None = None  # position of an added section/image


@dataclass
class RenderOptions:
    """Options controlling what the page renderer includes in output."""

    title: str | None = None  # None: the intro title, else "Holiday Card"
    stylesheet: str = "/card-styles.css"
    asset_base_url: str = ""
    include_script: bool = True
    base_url: str = "http://localhost:8000"


@dataclass
class VisibilityOptions:
    """Section visibility watcher settings (fractions of the viewport)."""

    threshold: float = 0.5
    inset_top: float = 0.10
    inset_bottom: float = 0.10


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def now_ms() -> int:
    return int(datetime.now(UTC).timestamp() * 1000)
