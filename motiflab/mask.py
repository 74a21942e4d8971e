"""
Mask sampler: turn a reference image into a placement region.

The reference is fitted ("contain") into 90% of the canvas, centred, and
read back as an RGBA pixel field. A pixel belongs to the region when it is
both fairly opaque (alpha > 50) and fairly dark (mean of r,g,b < 200), so a
dark silhouette on a transparent or light background works as a mask.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

MASK_FILL_RATIO = 0.9
ALPHA_THRESHOLD = 50
LUMINANCE_THRESHOLD = 200


@dataclass(frozen=True, eq=False)
class Mask:
    width: int
    height: int
    presence: np.ndarray          # bool, shape (height, width)
    preview: Image.Image          # canvas-sized RGBA, for the outline overlay

    def test(self, x: float, y: float) -> bool:
        """True when canvas point (x, y) lies inside the mask region."""
        if not (math.isfinite(x) and math.isfinite(y)):
            return False
        px = math.floor(x)
        py = math.floor(y)
        if px < 0 or px >= self.width or py < 0 or py >= self.height:
            return False
        return bool(self.presence[py, px])

    def coverage(self) -> float:
        """Fraction of canvas pixels inside the region."""
        if self.presence.size == 0:
            return 0.0
        return float(self.presence.mean())


def contain_box(img_w: int, img_h: int, width: int, height: int,
                fill: float = MASK_FILL_RATIO) -> Tuple[float, float, float, float]:
    """Return (x, y, w, h) of an image fitted inside the canvas at `fill` scale."""
    img_ratio = img_w / img_h
    screen_ratio = width / height
    if screen_ratio > img_ratio:
        draw_h = height * fill
        draw_w = draw_h * img_ratio
    else:
        draw_w = width * fill
        draw_h = draw_w / img_ratio
    return ((width - draw_w) / 2, (height - draw_h) / 2, draw_w, draw_h)


def presence_from_pixels(pixels: np.ndarray) -> np.ndarray:
    """Apply the opacity/darkness thresholds to an (h, w, 4) uint8 array."""
    rgb = pixels[..., :3].astype(np.int32)
    luminance = rgb.sum(axis=2) / 3.0
    alpha = pixels[..., 3]
    return (alpha > ALPHA_THRESHOLD) & (luminance < LUMINANCE_THRESHOLD)


def build_mask(reference: Optional[Image.Image], width: int, height: int) -> Optional[Mask]:
    """Rasterize `reference` over a width x height canvas.

    Returns None instead of raising when the mask cannot be built; callers
    treat that as "no mask".
    """
    if reference is None:
        return None
    if width <= 0 or height <= 0:
        logger.warning("Cannot build mask for a %sx%s canvas", width, height)
        return None
    try:
        img_w, img_h = reference.size
        if img_w <= 0 or img_h <= 0:
            logger.warning("Mask reference image has zero size")
            return None
        x, y, w, h = contain_box(img_w, img_h, width, height)
        draw_w = max(1, int(round(w)))
        draw_h = max(1, int(round(h)))
        scaled = reference.convert("RGBA").resize((draw_w, draw_h), Image.LANCZOS)
        canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        # the 5% margin keeps the offset non-negative
        canvas.alpha_composite(scaled, dest=(max(0, int(round(x))), max(0, int(round(y)))))
        pixels = np.asarray(canvas, dtype=np.uint8)
    except (OSError, ValueError) as e:
        logger.warning("Mask rasterization failed: %s", e)
        return None

    presence = presence_from_pixels(pixels)
    logger.debug("Built %dx%d mask, coverage %.3f", width, height, float(presence.mean()))
    return Mask(width=width, height=height, presence=presence, preview=canvas)
