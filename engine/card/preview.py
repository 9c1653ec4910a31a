"""
Holiday Card Kernel — Preview Synchronizer

Keeps the builder's preview pane in step with the editor session.

The cursor (`active_section_index`) is -1 while the intro overlay has focus
and i while section i has focus. The Reconciler turns cursor transitions
into an ordered list of visual-effect commands; the PreviewSynchronizer
re-renders the session config and hands those commands to a PreviewHost.

A full re-render discards every transient highlight and scroll position,
so after each ReplaceContent the current cursor is reapplied. That reapply
is deferred until the host has committed the new content, otherwise the
target section would not exist yet.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from engine.card.host import PreviewHost
from engine.card.renderer import render, section_selector
from engine.card.session import EditorSession
from engine.card.types import INTRO_INDEX

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReplaceContent:
    html: str


@dataclass(frozen=True)
class ShowIntro:
    pass


@dataclass(frozen=True)
class HideIntro:
    pass


@dataclass(frozen=True)
class ClearHighlight:
    pass


@dataclass(frozen=True)
class Highlight:
    index: int

    @property
    def selector(self) -> str:
        return section_selector(self.index)


@dataclass(frozen=True)
class ScrollToTop:
    pass


@dataclass(frozen=True)
class ScrollToSection:
    index: int
    smooth: bool = True

    @property
    def selector(self) -> str:
        return section_selector(self.index)


Command = ReplaceContent | ShowIntro | HideIntro | ClearHighlight | Highlight | ScrollToTop | ScrollToSection

HIGHLIGHT_CLASS = "builder-active"


# ---------------------------------------------------------------------------
# Reconciler
# ---------------------------------------------------------------------------


class Reconciler:
    """Pure mapping from a cursor position to the commands that display it."""

    @staticmethod
    def focus(index: int) -> list[Command]:
        if index == INTRO_INDEX:
            return [ScrollToTop(), ShowIntro(), ClearHighlight()]
        return [HideIntro(), ClearHighlight(), Highlight(index), ScrollToSection(index, smooth=True)]

    @classmethod
    def transition(cls, previous: int, current: int) -> list[Command]:
        """Commands for moving the cursor. Redundant transitions emit nothing."""
        if previous == current:
            return []
        return cls.focus(current)


# ---------------------------------------------------------------------------
# Synchronizer
# ---------------------------------------------------------------------------


def _default_defer(callback: Callable[[], None]) -> None:
    """Run after the current task yields, on the running loop when there is one."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        callback()
        return
    loop.call_soon(callback)


class PreviewSynchronizer:
    """
    Owns the active-section cursor and the last render for one session.

    `defer` schedules the post-commit reapply; the default uses the running
    asyncio loop's call_soon and falls back to running straight after the
    host's execute() returns.
    """

    def __init__(
        self,
        session: EditorSession,
        host: PreviewHost,
        defer: Callable[[Callable[[], None]], None] | None = None,
    ) -> None:
        self.session = session
        self.host = host
        self.defer = defer or _default_defer
        self.active_section_index = INTRO_INDEX
        self.rendered_revision: int | None = None
        self.render_count = 0

    # -- cursor -----------------------------------------------------------------

    def set_active_section(self, index: int) -> None:
        previous = self.active_section_index
        if index == previous:
            return
        if index != INTRO_INDEX and not 0 <= index < len(self.session.sections):
            logger.warning("preview: ignoring focus on missing section %d", index)
            return

        self.active_section_index = index

        # The intro path always regenerates so the overlay is back in its initial state
        if index == INTRO_INDEX or self.rendered_revision != self.session.revision:
            self.host.execute([self._replace_content()])
            self.defer(self._reapply)
            return

        self.host.execute(Reconciler.transition(previous, index))

    def reset(self) -> None:
        """Cursor back to the intro without emitting commands (after a wholesale load)."""
        self.active_section_index = INTRO_INDEX

    # -- re-render ----------------------------------------------------------------

    def refresh(self) -> None:
        """Regenerate the preview from scratch, then reapply the cursor after commit."""
        if self.active_section_index >= len(self.session.sections):
            self.active_section_index = len(self.session.sections) - 1

        self.host.execute([self._replace_content()])
        if self.active_section_index != INTRO_INDEX:
            self.defer(self._reapply)

    def _reapply(self) -> None:
        self.host.execute(Reconciler.focus(self.active_section_index))

    def _replace_content(self) -> ReplaceContent:
        self.session.derive_cat_images()
        card = render(self.session.config)
        self.rendered_revision = self.session.revision
        self.render_count += 1
        return ReplaceContent(html=preview_document(card.markup))


# ---------------------------------------------------------------------------
# Preview document
# ---------------------------------------------------------------------------


def preview_document(markup: str, stylesheet: str = "/card-styles.css") -> str:
    """
    Wrap rendered markup as the builder's preview page: cat triggers start
    visible and the focused section gets an outline.
    """
    return "\n".join(
        [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '  <meta charset="UTF-8" />',
            '  <meta name="viewport" content="width=device-width, initial-scale=1.0" />',
            f'  <link rel="stylesheet" href="{stylesheet}" />',
            "  <style>",
            "    body { overflow: auto; }",
            f"    .card-section.{HIGHLIGHT_CLASS} {{",
            "      outline: 3px solid var(--color-accent-primary);",
            "      outline-offset: -3px;",
            "    }",
            "  </style>",
            "</head>",
            "<body>",
            markup,
            "  <script>",
            "    document.querySelectorAll('[data-cat-trigger]').forEach(function (el) {",
            "      el.classList.add('is-visible');",
            "    });",
            "  </script>",
            "</body>",
            "</html>",
        ]
    )
