"""
Holiday Card Kernel — Edit Binder

Turns form control changes into config mutations and keeps the preview in
step. Field edits are debounced so typing does not re-render per keystroke;
structural edits (add/delete section or image) and loads refresh at once.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from engine.card.errors import StructuralValidationError
from engine.card.forms import render_section_forms
from engine.card.preview import PreviewSynchronizer
from engine.card.session import EditorSession
from engine.card.share import export_config, import_config
from engine.card.types import CONTROL_KINDS, INTRO_INDEX, MutationResult

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.3


class Debouncer:
    """
    Coalesce rapid calls into one, `delay` seconds after the last.
    Each trigger cancels the pending timer and reschedules it.
    """

    def __init__(self, delay: float, callback: Callable[[], None], loop: asyncio.AbstractEventLoop | None = None):
        self.delay = delay
        self.callback = callback
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        """Run a pending callback now."""
        if self._handle is not None:
            self.cancel()
            self.callback()

    def _fire(self) -> None:
        self._handle = None
        self.callback()


def control_value(raw_value: Any, control_kind: str, checked: bool | None = None) -> Any:
    """
    Value a control contributes to its field.
    A checkbox contributes its configured value when checked and None when
    not, so two checkboxes sharing one path ("span" = tall / hero) toggle it.
    """
    if control_kind not in CONTROL_KINDS:
        raise ValueError(f"Unknown control kind: {control_kind}")
    if control_kind == "checkbox":
        return raw_value if checked else None
    if control_kind == "range" and isinstance(raw_value, str) and raw_value:
        try:
            return float(raw_value)
        except ValueError:
            return raw_value
    return raw_value


class EditBinder:
    """Builder controller: form events in, session mutations and preview sync out."""

    def __init__(
        self,
        session: EditorSession,
        synchronizer: PreviewSynchronizer,
        *,
        delay: float = DEBOUNCE_SECONDS,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.session = session
        self.synchronizer = synchronizer
        self.debouncer = Debouncer(delay, synchronizer.refresh, loop=loop)

    # -- field edits ----------------------------------------------------------------

    def handle_input(
        self,
        path: str,
        raw_value: Any,
        control_kind: str = "text",
        checked: bool | None = None,
    ) -> MutationResult | None:
        if not path:
            return None
        value = control_value(raw_value, control_kind, checked)
        result = self.session.set_field(path, value)
        if result.applied:
            self.debouncer.trigger()
        return result

    # -- focus tracking -------------------------------------------------------------

    def focus_intro(self) -> None:
        self.synchronizer.set_active_section(INTRO_INDEX)

    def focus_section(self, index: int) -> None:
        self.synchronizer.set_active_section(index)

    # -- structural edits -----------------------------------------------------------

    def add_section(self) -> MutationResult:
        return self._structural(self.session.add_section())

    def delete_section(self, index: int) -> MutationResult:
        return self._structural(self.session.delete_section(index))

    def add_image(self, section_index: int) -> MutationResult:
        return self._structural(self.session.add_image(section_index))

    def delete_image(self, section_index: int, image_index: int) -> MutationResult:
        return self._structural(self.session.delete_image(section_index, image_index))

    def set_audio(self, choice: str, **kwargs: Any) -> None:
        self.session.set_audio(choice, **kwargs)
        self._refresh_now()

    def set_volume(self, volume: float) -> None:
        self.session.set_volume(volume)
        self.debouncer.trigger()

    # -- import / export ------------------------------------------------------------

    def load_config(self, config: Any) -> None:
        """Replace the working copy and show the intro. Raises StructuralValidationError."""
        self.session.load(config)
        self.synchronizer.reset()
        self._refresh_now()

    def import_file(self, text: str | bytes) -> bool:
        """Import a JSON file. On a malformed file the working copy is untouched."""
        try:
            config = import_config(text)
        except StructuralValidationError as e:
            logger.warning("binder: import rejected: %s", e)
            raise
        self.load_config(config)
        return True

    def export(self) -> str:
        return export_config(self.session.config)

    def render_forms(self) -> str:
        """Section fieldsets for the working copy. Hosts redraw them after structural edits."""
        return render_section_forms(self.session.config)

    # -- internal -------------------------------------------------------------------

    def _structural(self, result: MutationResult) -> MutationResult:
        if result.applied:
            self._refresh_now()
        return result

    def _refresh_now(self) -> None:
        self.debouncer.cancel()
        self.synchronizer.refresh()
