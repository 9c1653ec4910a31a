"""
Card kernel test configuration.

Recording fakes for the host protocols the renderer and the preview
synchronizer drive. Kernel tests use MemoryStorage and need no services.
"""

import pytest

from engine.card.presets import default_config


class FakeAudio:
    def __init__(self, src, volume, loop, fail=False):
        self.src = src
        self.volume = volume
        self.loop = loop
        self.fail = fail
        self.plays = 0
        self.released = False

    def play(self):
        self.plays += 1
        if self.fail:
            raise RuntimeError("autoplay blocked")

    def release(self):
        self.released = True


class FakeWatcher:
    def __init__(self, selectors, handler, options):
        self.selectors = selectors
        self.handler = handler
        self.options = options
        self.disconnected = False

    def disconnect(self):
        self.disconnected = True


class FakeContainer:
    """Records class changes and exposes the registered handlers."""

    def __init__(self, elements=("#intro-overlay",), audio_fails=False):
        self.elements = set(elements)
        self.classes: dict[str, set[str]] = {}
        self.audio: FakeAudio | None = None
        self.audio_fails = audio_fails
        self.activate_handlers: dict[str, object] = {}
        self.watcher: FakeWatcher | None = None

    def has_element(self, selector):
        return selector in self.elements

    def add_class(self, selector, class_name):
        self.classes.setdefault(selector, set()).add(class_name)

    def remove_class(self, selector, class_name):
        self.classes.setdefault(selector, set()).discard(class_name)

    def has_class(self, selector, class_name):
        return class_name in self.classes.get(selector, set())

    def open_audio(self, src, *, volume, loop):
        self.audio = FakeAudio(src, volume, loop, fail=self.audio_fails)
        return self.audio

    def on_activate(self, selector, handler):
        self.activate_handlers[selector] = handler

    def watch_visibility(self, selectors, handler, options):
        self.watcher = FakeWatcher(selectors, handler, options)
        return self.watcher


class RecordingHost:
    """PreviewHost that keeps every batch of commands it was asked to run."""

    def __init__(self):
        self.batches: list[list] = []

    def execute(self, commands):
        self.batches.append(list(commands))

    @property
    def commands(self):
        return [c for batch in self.batches for c in batch]

    def clear(self):
        self.batches.clear()


class ManualDefer:
    """Collects deferred callbacks until the test commits them."""

    def __init__(self):
        self.pending = []

    def __call__(self, callback):
        self.pending.append(callback)

    def run(self):
        pending, self.pending = self.pending, []
        for callback in pending:
            callback()


@pytest.fixture
def config():
    return default_config()


@pytest.fixture
def container():
    return FakeContainer()


@pytest.fixture
def host():
    return RecordingHost()


@pytest.fixture
def defer():
    return ManualDefer()


@pytest.fixture
def failing_container():
    """Container whose audio refuses to play (autoplay blocked)."""
    return FakeContainer(audio_fails=True)
