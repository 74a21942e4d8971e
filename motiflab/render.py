"""
Frame renderer.

Draws a layout onto an RGBA Pillow surface. Animation is a pure function of
the timestamp (milliseconds) and each item's phase/speed, so rendering the
same items at the same time twice gives identical pixels.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from .cache import TintedCache, scaled_drawable
from .config import PatternConfig
from .layout import LayoutItem
from .mask import Mask
from .motifs import MotifRegistry
from .utils import hex_to_rgb

logger = logging.getLogger(__name__)

MASK_PREVIEW_OPACITY = 0.1
SPEED_SCALE = 0.002      # anim_speed is in "UI units"; time is in ms
DRIFT_X_RATIO = 0.5
DRIFT_X_FREQ = 0.7
WOBBLE_FREQ = 0.5
WOBBLE_AMPLITUDE = 0.05  # radians


@dataclass(frozen=True)
class Offset:
    dx: float = 0.0
    dy: float = 0.0
    drot: float = 0.0


ZERO_OFFSET = Offset()


def animation_offset(item: LayoutItem, config: PatternConfig, time_ms: float) -> Offset:
    if not config.enable_anim:
        return ZERO_OFFSET
    amp = config.anim_amplitude
    speed = config.anim_speed * SPEED_SCALE
    t = time_ms * speed * item.anim_speed_mul
    return Offset(
        dx=math.cos(t * DRIFT_X_FREQ + item.anim_phase) * (amp * DRIFT_X_RATIO),
        dy=math.sin(t + item.anim_phase) * amp,
        drot=math.sin(t * WOBBLE_FREQ) * WOBBLE_AMPLITUDE,
    )


def _sprite(item: LayoutItem, registry: MotifRegistry) -> Optional[Image.Image]:
    motif = registry.get(item.motif_id)
    if motif is None:
        return None
    if isinstance(item.appearance, TintedCache):
        return item.appearance.surface
    return scaled_drawable(motif, item.w, item.h)


def place_sprite(surface: Image.Image, sprite: Image.Image, cx: float, cy: float, angle: float) -> None:
    """Paste `sprite` centred on (cx, cy), rotated clockwise by `angle` radians."""
    if angle:
        # Pillow rotates counter-clockwise in a y-up sense; flip to screen space.
        sprite = sprite.rotate(-math.degrees(angle), resample=Image.BICUBIC, expand=True)
    sw, sh = sprite.size
    left = int(round(cx - sw / 2))
    top = int(round(cy - sh / 2))
    # alpha_composite wants a non-negative dest; clip the sprite instead
    src_x = max(0, -left)
    src_y = max(0, -top)
    if src_x >= sw or src_y >= sh or left >= surface.width or top >= surface.height:
        return
    surface.alpha_composite(sprite, dest=(max(0, left), max(0, top)), source=(src_x, src_y))


def clear(surface: Image.Image, color: str) -> None:
    ImageDraw.Draw(surface).rectangle([0, 0, surface.width, surface.height], fill=hex_to_rgb(color) + (255,))


def draw_mask_preview(surface: Image.Image, mask: Mask, opacity: float = MASK_PREVIEW_OPACITY) -> None:
    preview = mask.preview
    if preview.size != surface.size:
        # stale mask from before a resize; the engine rebuilds it
        return
    faded = preview.copy()
    faded.putalpha(preview.getchannel("A").point(lambda a: int(a * opacity)))
    surface.alpha_composite(faded)


def render(surface: Image.Image, items: Sequence[LayoutItem], registry: MotifRegistry,
           config: PatternConfig, time_ms: float = 0.0, mask: Optional[Mask] = None) -> None:
    """Draw one frame of `items` onto `surface` (mode RGBA)."""
    clear(surface, config.background)

    if config.use_mask and config.show_mask_bg and mask is not None:
        draw_mask_preview(surface, mask)

    skipped = 0
    for item in items:
        sprite = _sprite(item, registry)
        if sprite is None:
            skipped += 1
            continue
        off = animation_offset(item, config, time_ms)
        place_sprite(surface, sprite, item.x + off.dx, item.y + off.dy, item.angle + off.drot)

    if skipped:
        logger.debug("Skipped %d items with unknown motifs", skipped)


def render_frame(size: Tuple[int, int], items: Sequence[LayoutItem], registry: MotifRegistry,
                 config: PatternConfig, time_ms: float = 0.0, mask: Optional[Mask] = None) -> Image.Image:
    """Render onto a fresh surface and return it."""
    surface = Image.new("RGBA", size)
    render(surface, items, registry, config, time_ms, mask)
    return surface
