"""
Holiday Card Kernel — Editor Session

The one live config (the working copy) and everything that mutates it.
Passed explicitly to the binder, the preview synchronizer and the assembly
instead of living in a module global.

- Field edits and structural changes go through the model and bump
  `revision` when applied.
- Loads replace the working copy wholesale with a deep copy; nothing from
  the previous document survives.
- Soft refusals (deleting the last section) and rejected edits are surfaced
  through `notify` and kept in `notices`.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from engine.card import model
from engine.card.errors import OperationInProgress, ResourceTooLarge
from engine.card.presets import AUDIO_CHOICES, DEFAULT_AUDIO_SRC, DEFAULT_VOLUME, default_config
from engine.card.types import Mutation, MutationResult, Warning
from engine.card.validation import ensure_valid_config

if TYPE_CHECKING:
    from engine.card.assembly import CardAssembly

logger = logging.getLogger(__name__)

MAX_CUSTOM_AUDIO_BYTES = 5 * 1024 * 1024


class EditorSession:
    """Owns the working copy for one editing session."""

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        notify: Callable[[Warning], None] | None = None,
    ) -> None:
        self._config = copy.deepcopy(config) if config is not None else default_config()
        self.revision = 0
        self.notices: list[Warning] = []
        self._notify = notify
        self.saving = False

    @property
    def config(self) -> dict[str, Any]:
        return self._config

    @property
    def sections(self) -> list[dict[str, Any]]:
        return self._config.get("sections") or []

    # -- mutations ------------------------------------------------------------------

    def apply(self, mutation: Mutation) -> MutationResult:
        result = model.apply(self._config, mutation)
        if result.applied:
            self._config = result.config
            self.revision += 1
        elif result.error:
            logger.warning("session: %s rejected: %s", mutation.type, result.error)
            self._surface(Warning(code="REJECTED", message=result.error, details=mutation.to_dict()))
        for warning in result.warnings:
            self._surface(warning)
        return result

    def set_field(self, path: str, value: Any) -> MutationResult:
        return self.apply(Mutation("field.set", {"path": path, "value": value}))

    def add_section(self) -> MutationResult:
        return self.apply(Mutation("section.add"))

    def delete_section(self, index: int) -> MutationResult:
        return self.apply(Mutation("section.remove", {"index": index}))

    def add_image(self, section_index: int) -> MutationResult:
        return self.apply(Mutation("image.add", {"section": section_index}))

    def delete_image(self, section_index: int, image_index: int) -> MutationResult:
        return self.apply(Mutation("image.remove", {"section": section_index, "image": image_index}))

    def derive_cat_images(self) -> None:
        """Recompute every catImage in the working copy. Not an edit; revision is unchanged."""
        self._config = model.derive_cat_images(self._config)

    # -- intro image / audio --------------------------------------------------------

    def set_intro_image(self, src: str | None) -> MutationResult:
        """Set the intro background image; None removes it."""
        return self.set_field("intro.image", src)

    def set_audio(
        self,
        choice: str,
        *,
        src: str | None = None,
        size_bytes: int | None = None,
        volume: float | None = None,
    ) -> None:
        """
        Switch the soundtrack: "default" (bundled lullaby), "silent", or
        "custom" with caller-supplied src (a data URL or hosted file).
        """
        if choice not in AUDIO_CHOICES:
            raise ValueError(f"Unknown audio choice: {choice}")

        current = self._config.get("audio") or {}
        level = volume if volume is not None else current.get("volume", DEFAULT_VOLUME)

        if choice == "silent":
            audio = {"src": None, "volume": 0}
        elif choice == "default":
            audio = {"src": DEFAULT_AUDIO_SRC, "volume": level}
        else:
            if not src:
                raise ValueError("Custom audio requires a source")
            if size_bytes is not None and size_bytes > MAX_CUSTOM_AUDIO_BYTES:
                size_mb = size_bytes / (1024 * 1024)
                raise ResourceTooLarge(
                    f"Audio file is too large ({size_mb:.1f}MB). Please use an audio file smaller than 5MB.",
                    size_bytes=size_bytes,
                    limit_bytes=MAX_CUSTOM_AUDIO_BYTES,
                )
            audio = {"src": src, "volume": level}

        self._config["audio"] = audio
        self.revision += 1

    def set_volume(self, volume: float) -> None:
        audio = self._config.get("audio")
        if not isinstance(audio, dict):
            return
        audio["volume"] = max(0.0, min(1.0, float(volume)))
        self.revision += 1

    def audio_choice(self) -> str:
        src = (self._config.get("audio") or {}).get("src")
        if not src:
            return "silent"
        if src == DEFAULT_AUDIO_SRC:
            return "default"
        return "custom"

    # -- load / save ----------------------------------------------------------------

    def load(self, config: Any) -> None:
        """
        Replace the working copy. Raises StructuralValidationError and leaves
        the current working copy untouched when the config is malformed.
        """
        ensure_valid_config(config)
        self._config = copy.deepcopy(config)
        self.revision += 1

    async def share(self, assembly: CardAssembly) -> str:
        """Save the working copy through the assembly. One save at a time."""
        if self.saving:
            raise OperationInProgress("A save is already in progress")
        self.saving = True
        try:
            return await assembly.save(self._config)
        finally:
            self.saving = False

    # -- notices --------------------------------------------------------------------

    def _surface(self, warning: Warning) -> None:
        self.notices.append(warning)
        if self._notify is not None:
            self._notify(warning)
