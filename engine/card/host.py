"""
Holiday Card Kernel — Host Protocols

The renderer and preview synchronizer never touch a concrete document.
Side effects go through these protocols, implemented by whatever shows
the card (a browser bridge, a test double, a headless harness).

Targets are addressed by CSS selectors the renderer itself emits:
"#intro-overlay", '[data-section="2"]', "body".
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from engine.card.types import VisibilityOptions


class AudioHandle(Protocol):
    def play(self) -> None:
        """Start playback. May raise if the host refuses (autoplay policy, bad source)."""
        ...

    def release(self) -> None:
        """Stop playback and free the resource."""
        ...


class VisibilityWatcher(Protocol):
    def disconnect(self) -> None: ...


class CardContainer(Protocol):
    """A concrete container the rendered card has been inserted into."""

    def has_element(self, selector: str) -> bool: ...

    def add_class(self, selector: str, class_name: str) -> None: ...

    def remove_class(self, selector: str, class_name: str) -> None: ...

    def open_audio(self, src: str, *, volume: float, loop: bool) -> AudioHandle: ...

    def on_activate(self, selector: str, handler: Callable[[], None]) -> None:
        """Bind a first-interaction gesture (tap or click) on the target."""
        ...

    def watch_visibility(
        self,
        selectors: list[str],
        handler: Callable[[str], None],
        options: VisibilityOptions,
    ) -> VisibilityWatcher:
        """Call handler(selector) whenever a target crosses the visibility threshold."""
        ...


class PreviewHost(Protocol):
    """Executes visual-effect commands against the builder's preview pane."""

    def execute(self, commands: list) -> None: ...
