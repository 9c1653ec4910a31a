"""
Holiday Card Kernel — Structural Validation

Validates configs and mutation payloads before they reach the model.
Validation is structural (well-formed?) not semantic (will it apply?).
The model handles semantic checks (is the index in range? etc.).

Configs are checked for the two load-bearing invariants only:
`intro` is present and `sections` is a list. Anything else degrades
silently at render time.
"""

from __future__ import annotations

from typing import Any

from engine.card.errors import StructuralValidationError
from engine.card.types import MUTATION_TYPES, parse_path

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_config(config: Any) -> list[str]:
    """
    Validate a config's structural shape.
    Returns a list of error strings. Empty list = valid.
    """
    errors: list[str] = []

    if not isinstance(config, dict):
        errors.append("Config must be an object")
        return errors

    if config.get("intro") is None:
        errors.append("Missing intro")
    elif not isinstance(config["intro"], dict):
        errors.append("'intro' must be an object")

    if "sections" not in config:
        errors.append("Missing sections")
    elif not isinstance(config["sections"], list):
        errors.append("'sections' must be a list")

    return errors


def ensure_valid_config(config: Any) -> dict[str, Any]:
    """
    Raise StructuralValidationError unless the config passes validate_config.
    Returns the config unchanged so callers can chain.
    """
    errors = validate_config(config)
    if errors:
        raise StructuralValidationError(
            "Invalid config format. " + "; ".join(errors) + ".",
            errors=errors,
        )
    return config


def validate_mutation(type: str, payload: dict[str, Any]) -> list[str]:
    """
    Validate a mutation's type and payload structure.
    Returns a list of error strings. Empty list = valid.
    """
    errors: list[str] = []

    if type not in MUTATION_TYPES:
        errors.append(f"Unknown mutation type: {type}")
        return errors

    if not isinstance(payload, dict):
        errors.append("Payload must be a non-null object")
        return errors

    validator = _VALIDATORS.get(type)
    if validator:
        errors.extend(validator(payload))

    return errors


# ---------------------------------------------------------------------------
# Per-mutation validators
# ---------------------------------------------------------------------------


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _validate_field_set(p: dict) -> list[str]:
    errors: list[str] = []
    if "path" not in p:
        errors.append("field.set requires 'path'")
    elif not isinstance(p["path"], str) or not parse_path(p["path"]):
        errors.append(f"Invalid field path: {p['path']!r}")
    if "value" not in p:
        errors.append("field.set requires 'value'")
    return errors


def _validate_section_remove(p: dict) -> list[str]:
    if "index" not in p:
        return ["section.remove requires 'index'"]
    if not _is_index(p["index"]):
        return [f"Invalid section index: {p['index']!r}"]
    return []


def _validate_image_add(p: dict) -> list[str]:
    if "section" not in p:
        return ["image.add requires 'section'"]
    if not _is_index(p["section"]):
        return [f"Invalid section index: {p['section']!r}"]
    return []


def _validate_image_remove(p: dict) -> list[str]:
    errors = _validate_image_add(p)
    if "image" not in p:
        errors.append("image.remove requires 'image'")
    elif not _is_index(p["image"]):
        errors.append(f"Invalid image index: {p['image']!r}")
    return [e.replace("image.add", "image.remove") for e in errors]


_VALIDATORS = {
    "field.set": _validate_field_set,
    "section.remove": _validate_section_remove,
    "image.add": _validate_image_add,
    "image.remove": _validate_image_remove,
}
