"""
Holiday Card Kernel — Config Model

Pure function: (config, mutation) → MutationResult
No side effects. No IO. Deterministic apart from generated section ids.

The input config is never modified; every applied mutation works on a
deep copy. Rejections come back as applied=False with an error code, and
soft refusals (deleting the last section) as a warning.
"""

from __future__ import annotations

import copy
from typing import Any

from engine.card.presets import cat_image_for
from engine.card.types import (
    IndexSegment,
    KeySegment,
    Mutation,
    MutationResult,
    Warning,
    now_ms,
    parse_path,
)
from engine.card.validation import validate_mutation

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def apply(config: dict[str, Any], mutation: Mutation) -> MutationResult:
    """
    Apply one mutation to a config.
    Returns new config + applied flag + warnings/errors.
    """
    errors = validate_mutation(mutation.type, mutation.payload)
    if errors:
        return MutationResult(config=config, applied=False, error=f"INVALID_MUTATION: {'; '.join(errors)}")

    handler = _HANDLERS[mutation.type]
    snap = copy.deepcopy(config)
    return handler(snap, mutation.payload)


def set_field(config: dict[str, Any], path: str, value: Any) -> MutationResult:
    return apply(config, Mutation("field.set", {"path": path, "value": value}))


def add_section(config: dict[str, Any]) -> MutationResult:
    return apply(config, Mutation("section.add"))


def delete_section(config: dict[str, Any], index: int) -> MutationResult:
    return apply(config, Mutation("section.remove", {"index": index}))


def add_image(config: dict[str, Any], section_index: int) -> MutationResult:
    return apply(config, Mutation("image.add", {"section": section_index}))


def delete_image(config: dict[str, Any], section_index: int, image_index: int) -> MutationResult:
    return apply(config, Mutation("image.remove", {"section": section_index, "image": image_index}))


def derive_cat_images(config: dict[str, Any]) -> dict[str, Any]:
    """
    Return a copy of the config with every section's catImage recomputed
    from its catAnimation. Whatever catImage held before is discarded.
    """
    snap = copy.deepcopy(config)
    for section in snap.get("sections") or []:
        if isinstance(section, dict):
            section["catImage"] = cat_image_for(section.get("catAnimation"))
    return snap


def new_section(section_id: str) -> dict[str, Any]:
    return {
        "id": section_id,
        "title": "New Section",
        "body": None,
        "layout": "tall-left",
        "catAnimation": "none",
        "catImage": None,
        "images": [],
    }


def new_image() -> dict[str, Any]:
    return {"src": "", "alt": "", "rotation": None, "span": None}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _reject(snap: dict, code: str, msg: str) -> MutationResult:
    return MutationResult(config=snap, applied=False, error=f"{code}: {msg}")


def _ok(snap: dict, warnings: list[Warning] | None = None, index: int | None = None) -> MutationResult:
    return MutationResult(config=snap, applied=True, warnings=warnings or [], index=index)


def _sections(snap: dict) -> list | None:
    sections = snap.get("sections")
    return sections if isinstance(sections, list) else None


def _section_images(snap: dict, section_index: int) -> tuple[dict | None, str | None]:
    """Lookup a section by index. Returns (section, error) with exactly one set."""
    sections = _sections(snap)
    if sections is None:
        return None, "config has no sections list"
    if section_index >= len(sections) or not isinstance(sections[section_index], dict):
        return None, f"no section at index {section_index}"
    return sections[section_index], None


def _unique_section_id(snap: dict) -> str:
    taken = {s.get("id") for s in _sections(snap) or [] if isinstance(s, dict)}
    stamp = now_ms()
    while f"section-{stamp}" in taken:
        stamp += 1
    return f"section-{stamp}"


def _empty_container(next_segment: KeySegment | IndexSegment) -> dict | list:
    """Container shape for an auto-created step is decided by the step after it."""
    return [] if isinstance(next_segment, IndexSegment) else {}


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _handle_field_set(snap: dict, p: dict) -> MutationResult:
    segments = parse_path(p["path"])
    value = None if p["value"] == "" else p["value"]

    current: Any = snap
    for i, segment in enumerate(segments):
        last = i == len(segments) - 1

        if isinstance(current, list):
            if not isinstance(segment, IndexSegment):
                return _reject(snap, "NOT_A_CONTAINER", f"'{segment.key}' is not an index into a list at {p['path']}")
            idx = segment.index
            if idx > len(current):
                return _reject(snap, "OUT_OF_RANGE", f"index {idx} past end of list (length {len(current)}) at {p['path']}")
            if last:
                if idx == len(current):
                    current.append(value)
                else:
                    current[idx] = value
                break
            if idx == len(current):
                current.append(_empty_container(segments[i + 1]))
            current = current[idx]
            continue

        if isinstance(current, dict):
            # Index steps against an object address the stringified key
            key = segment.key if isinstance(segment, KeySegment) else str(segment.index)
            if last:
                current[key] = value
                break
            if key not in current:
                current[key] = _empty_container(segments[i + 1])
            current = current[key]
            continue

        return _reject(snap, "NOT_A_CONTAINER", f"cannot descend into {type(current).__name__} at {p['path']}")

    return _ok(snap)


def _handle_section_add(snap: dict, p: dict) -> MutationResult:
    sections = _sections(snap)
    if sections is None:
        return _reject(snap, "NO_SECTIONS", "config has no sections list")
    sections.append(new_section(_unique_section_id(snap)))
    return _ok(snap, index=len(sections) - 1)


def _handle_section_remove(snap: dict, p: dict) -> MutationResult:
    sections = _sections(snap)
    if sections is None:
        return _reject(snap, "NO_SECTIONS", "config has no sections list")
    index = p["index"]
    if index >= len(sections):
        return _reject(snap, "OUT_OF_RANGE", f"no section at index {index}")
    if len(sections) <= 1:
        return MutationResult(
            config=snap,
            applied=False,
            warnings=[Warning(code="LAST_SECTION", message="You need at least one section", details={"index": index})],
        )
    sections.pop(index)
    return _ok(snap)


def _handle_image_add(snap: dict, p: dict) -> MutationResult:
    section, error = _section_images(snap, p["section"])
    if section is None:
        return _reject(snap, "OUT_OF_RANGE", error or "")
    if not isinstance(section.get("images"), list):
        section["images"] = []
    section["images"].append(new_image())
    return _ok(snap, index=len(section["images"]) - 1)


def _handle_image_remove(snap: dict, p: dict) -> MutationResult:
    section, error = _section_images(snap, p["section"])
    if section is None:
        return _reject(snap, "OUT_OF_RANGE", error or "")
    images = section.get("images")
    if not isinstance(images, list) or p["image"] >= len(images):
        return _reject(snap, "OUT_OF_RANGE", f"no image at index {p['image']} in section {p['section']}")
    images.pop(p["image"])
    return _ok(snap)


_HANDLERS = {
    "field.set": _handle_field_set,
    "section.add": _handle_section_add,
    "section.remove": _handle_section_remove,
    "image.add": _handle_image_add,
    "image.remove": _handle_image_remove,
}
