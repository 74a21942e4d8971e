"""
Render cache: motifs pre-tinted to a solid colour at their layout size.

Tinting keeps the source alpha and replaces every colour channel, the same
result as drawing the motif and then filling with a "source-in" composite.
Doing it once per item at generation time keeps the frame loop to plain
pastes.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from PIL import Image

from .motifs import Motif
from .utils import hex_to_rgb


@dataclass(frozen=True)
class Native:
    """Draw the motif's own drawable, scaled at render time."""


@dataclass(frozen=True, eq=False)
class TintedCache:
    surface: Image.Image


Appearance = Union[Native, TintedCache]

NATIVE = Native()


def pixel_size(w: float, h: float) -> Tuple[int, int]:
    """Integer surface size for a (w, h) item box; never below 1 px."""
    return (max(1, int(round(w))), max(1, int(round(h))))


def scaled_drawable(motif: Motif, w: float, h: float) -> Image.Image:
    size = pixel_size(w, h)
    if motif.drawable.size == size:
        return motif.drawable
    return motif.drawable.resize(size, Image.LANCZOS)


def build_tinted_surface(motif: Motif, color: str, w: float, h: float) -> Image.Image:
    """Return a fresh RGBA surface of the motif at (w, h), filled with `color`."""
    sprite = scaled_drawable(motif, w, h)
    tinted = Image.new("RGBA", sprite.size, hex_to_rgb(color) + (0,))
    tinted.putalpha(sprite.getchannel("A"))
    return tinted
