"""
Holiday Card Kernel — the pure engine.

Components:
  model       — (config, mutation) → MutationResult  (pure, deterministic)
  layout      — which images span, per layout and position
  renderer    — config → markup + attach/detach hooks
  preview     — active-section cursor, re-render and reconcile commands
  forms       — config → builder form markup whose control names are field paths
  binder      — form controls → mutations, debounced preview refresh
  session     — the editor's single working copy
  share       — import/export and share-link fragments
  assembly    — save/load by id against a storage backend
"""

from engine.card.assembly import CardAssembly, CardStorage, MemoryStorage
from engine.card.binder import EditBinder
from engine.card.forms import form_controls, render_section_forms
from engine.card.model import add_image, add_section, apply, delete_image, delete_section, derive_cat_images, set_field
from engine.card.preview import PreviewSynchronizer, Reconciler
from engine.card.presets import default_config
from engine.card.renderer import render, render_page
from engine.card.session import EditorSession
from engine.card.validation import validate_config

__all__ = [
    "apply",
    "set_field",
    "add_section",
    "delete_section",
    "add_image",
    "delete_image",
    "derive_cat_images",
    "default_config",
    "validate_config",
    "render",
    "render_page",
    "EditorSession",
    "PreviewSynchronizer",
    "Reconciler",
    "EditBinder",
    "form_controls",
    "render_section_forms",
    "CardAssembly",
    "CardStorage",
    "MemoryStorage",
]
