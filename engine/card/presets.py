"""
Holiday Card Kernel — Presets

The default card template and the lookup tables the builder offers:
layouts, cat animations (with the cat image each one derives), rotations,
and audio choices.
"""

from __future__ import annotations

import copy
from typing import Any

CAT_ASSET_DIR = "/assets/cats"
DEFAULT_AUDIO_SRC = "/assets/audio/lullaby.mp3"
DEFAULT_VOLUME = 0.4
DEFAULT_TAP_PROMPT = "tap to enter"

LAYOUTS: list[dict[str, str]] = [
    {"id": "single", "label": "Single", "description": "One centered image"},
    {"id": "stack", "label": "Stack", "description": "2 landscape images stacked"},
    {"id": "grid", "label": "Grid", "description": "2x2 grid of 4 images"},
    {"id": "trio", "label": "Trio", "description": "1 on top, 2 below (pyramid)"},
    {"id": "tall-left", "label": "Tall Left", "description": "Portrait left, 2 stacked right"},
    {"id": "tall-right", "label": "Tall Right", "description": "2 stacked left, portrait right"},
    {"id": "hero-top", "label": "Hero Top", "description": "Wide image top, 2 small below"},
    {"id": "hero-bottom", "label": "Hero Bottom", "description": "2 small top, wide image below"},
]

CAT_ANIMATIONS: list[dict[str, str | None]] = [
    {"id": "walk-across", "label": "Walk Left to Right", "catImage": f"{CAT_ASSET_DIR}/shrimpas_00.png"},
    {"id": "walk-across-right", "label": "Walk Right to Left", "catImage": f"{CAT_ASSET_DIR}/shrimpas_00.png"},
    {"id": "peek-corner", "label": "Peek from Corner", "catImage": f"{CAT_ASSET_DIR}/shrimpas_03.png"},
    {"id": "peek-center", "label": "Peek from Center", "catImage": f"{CAT_ASSET_DIR}/shrimpas_03.png"},
    {"id": "sleep-corner", "label": "Sleep in Corner", "catImage": f"{CAT_ASSET_DIR}/shrimpas_02.png"},
    {"id": "sleep-center", "label": "Sleep in Center", "catImage": f"{CAT_ASSET_DIR}/shrimpas_02.png"},
    {"id": "pop-up", "label": "Pop Up (Corner)", "catImage": f"{CAT_ASSET_DIR}/shrimpas_01.png"},
    {"id": "pop-up-center", "label": "Pop Up (Center)", "catImage": f"{CAT_ASSET_DIR}/shrimpas_01.png"},
    {"id": "center-middle", "label": "Center of Card", "catImage": f"{CAT_ASSET_DIR}/shrimpas_03.png"},
    {"id": "both-cats", "label": "Both Cats", "catImage": f"{CAT_ASSET_DIR}/shrimpas_04.png"},
    {"id": "none", "label": "No Cat", "catImage": None},
]

ROTATIONS: list[dict[str, str | None]] = [
    {"id": None, "label": "None"},
    {"id": "cw-1", "label": "Slight Right"},
    {"id": "cw-2", "label": "More Right"},
    {"id": "ccw-1", "label": "Slight Left"},
    {"id": "ccw-2", "label": "More Left"},
]

AUDIO_CHOICES: set[str] = {"default", "silent", "custom"}

LAYOUT_IDS: set[str] = {layout["id"] for layout in LAYOUTS}
ROTATION_IDS: set[str] = {r["id"] for r in ROTATIONS if r["id"] is not None}
CAT_IMAGES: dict[str, str | None] = {a["id"]: a["catImage"] for a in CAT_ANIMATIONS}


def cat_image_for(animation: str | None) -> str | None:
    """
    The cat image an animation id derives.
    Unknown ids (and "none") derive no image, so the cat stage is skipped.
    """
    if not animation:
        return None
    return CAT_IMAGES.get(animation)


_DEFAULT_CONFIG: dict[str, Any] = {
    "intro": {
        "year": "2025",
        "title": "Happy Holidays!",
        "from": "from Anakaren & Aaron",
        "tapPrompt": DEFAULT_TAP_PROMPT,
        "image": "/data/images/intro.jpg",
    },
    "audio": {
        "src": DEFAULT_AUDIO_SRC,
        "volume": DEFAULT_VOLUME,
    },
    "sections": [
        {
            "id": "intro",
            "title": "How was our 2025?",
            "body": "Scroll down to find out!",
            "layout": "tall-left",
            "catAnimation": "walk-across",
            "catImage": f"{CAT_ASSET_DIR}/shrimpas_00.png",
            "showScrollHint": True,
            "images": [
                {"src": "/data/images/section-0-img-0.jpg", "alt": "Anakaren and Aaron", "rotation": None, "span": "tall"},
                {"src": "/data/images/section-0-img-1.jpg", "alt": "Sente and Gote on chair", "rotation": "cw-1", "span": None},
                {"src": "/data/images/section-0-img-2.jpg", "alt": "Cats cuddling", "rotation": "ccw-1", "span": None},
            ],
        },
        {
            "id": "social",
            "title": "We saw some faces",
            "body": None,
            "layout": "hero-top",
            "catAnimation": "peek-corner",
            "catImage": f"{CAT_ASSET_DIR}/shrimpas_03.png",
            "images": [
                {"src": "/data/images/section-1-img-0.jpg", "alt": "Friends gathering", "rotation": "ccw-1", "span": "hero"},
                {"src": "/data/images/section-1-img-1.jpg", "alt": "Baby shower celebration", "rotation": "cw-2", "span": None},
                {"src": "/data/images/section-1-img-2.jpg", "alt": "Trying on a sombrero", "rotation": "ccw-2", "span": None},
            ],
        },
        {
            "id": "weird",
            "title": None,
            "body": None,
            "layout": "stack",
            "catAnimation": "sleep-corner",
            "catImage": f"{CAT_ASSET_DIR}/shrimpas_02.png",
            "images": [
                {"src": "/data/images/section-2-img-0.jpg", "alt": "Head on plate illusion", "rotation": "ccw-1", "span": "hero"},
                {"src": "/data/images/section-2-img-1.jpg", "alt": "", "rotation": None, "span": None},
            ],
        },
        {
            "id": "cozy",
            "title": "We stayed cozy",
            "body": None,
            "layout": "hero-top",
            "catAnimation": "walk-across-right",
            "catImage": f"{CAT_ASSET_DIR}/shrimpas_00.png",
            "images": [
                {"src": "/data/images/section-3-img-0.jpg", "alt": "Turtle statue", "rotation": "ccw-2", "span": None},
                {"src": "/data/images/section-3-img-1.jpg", "alt": "", "rotation": None, "span": None},
                {"src": "/data/images/section-3-img-2.jpg", "alt": "", "rotation": None, "span": None},
            ],
        },
        {
            "id": "signoff",
            "title": "We got weird",
            "body": None,
            "layout": "trio",
            "catAnimation": "pop-up",
            "catImage": f"{CAT_ASSET_DIR}/shrimpas_01.png",
            "images": [
                {"src": "/data/images/section-4-img-0.jpg", "alt": "", "rotation": None, "span": None},
                {"src": "/data/images/section-4-img-1.jpg", "alt": "", "rotation": None, "span": None},
                {"src": "/data/images/section-4-img-2.jpg", "alt": "", "rotation": None, "span": None},
            ],
        },
        {
            "id": "finale",
            "title": "Here's to an even crazier 2026!",
            "body": None,
            "layout": "hero-bottom",
            "catAnimation": "both-cats",
            "catImage": f"{CAT_ASSET_DIR}/shrimpas_04.png",
            "images": [
                {"src": "/data/images/section-5-img-0.jpg", "alt": "", "rotation": None, "span": None},
                {"src": "/data/images/section-5-img-1.jpg", "alt": "", "rotation": None, "span": None},
                {"src": "/data/images/section-5-img-2.jpg", "alt": "", "rotation": None, "span": None},
            ],
        },
    ],
}


def default_config() -> dict[str, Any]:
    """A fresh deep copy of the default card. Callers own the result."""
    return copy.deepcopy(_DEFAULT_CONFIG)
