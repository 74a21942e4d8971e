"""
Layout generator.

Two placement engines produce an ordered list of LayoutItem values:

- grid:   one item per cell of a square grid, centred on the canvas and one
          cell larger than it in each direction so edges stay covered.
- random: rejection sampling of uniform points, bounded by an attempt
          budget of 50 x density. Mask misses and overlap hits cost an
          attempt, never a slot; running out of attempts just yields fewer
          items.

Every call returns a brand new list. Items never point back at the engine.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .cache import NATIVE, Appearance, TintedCache, build_tinted_surface
from .config import MODE_GRID, PatternConfig
from .mask import Mask
from .motifs import Motif
from .utils import TWO_PI, random_id, rng_from_seed

logger = logging.getLogger(__name__)

ATTEMPTS_PER_ITEM = 50
OVERLAP_RADIUS_FACTOR = 0.8
SPEED_MUL_MIN = 0.8
SPEED_MUL_SPREAD = 0.4
QUARTER_TURNS = tuple(k * math.pi / 2 for k in range(4))


@dataclass(frozen=True)
class LayoutItem:
    id: str
    motif_id: str
    x: float
    y: float
    w: float
    h: float
    angle: float = 0.0
    color: Optional[str] = None
    anim_phase: float = 0.0
    anim_speed_mul: float = 1.0
    appearance: Appearance = NATIVE

    @property
    def radius(self) -> float:
        """Approximate collision radius (circle at 80% of the half extent)."""
        return max(self.w, self.h) / 2 * OVERLAP_RADIUS_FACTOR


def _pick_angle(rng: random.Random, config: PatternConfig) -> float:
    if not config.rotation_randomness:
        return 0.0
    if config.mode == MODE_GRID:
        return QUARTER_TURNS[rng.randrange(4)]
    return rng.random() * TWO_PI


def _make_item(rng: random.Random, motif: Motif, x: float, y: float,
               w: float, h: float, config: PatternConfig) -> LayoutItem:
    angle = _pick_angle(rng, config)
    color = None
    appearance = NATIVE
    if config.use_random_color and config.colors:
        color = rng.choice(config.colors)
        appearance = TintedCache(build_tinted_surface(motif, color, w, h))
    return LayoutItem(
        id=random_id(rng),
        motif_id=motif.id,
        x=x, y=y, w=w, h=h,
        angle=angle,
        color=color,
        anim_phase=rng.random() * TWO_PI,
        anim_speed_mul=SPEED_MUL_MIN + rng.random() * SPEED_MUL_SPREAD,
        appearance=appearance,
    )


def grid_axis(extent: float, step: float) -> List[float]:
    """Cell centres along one axis: ceil(extent/step)+1 cells, centred on the canvas."""
    n = math.ceil(extent / step) + 1
    start = (extent - n * step) / 2 + step / 2
    return [start + i * step for i in range(n)]


def _generate_grid(rng: random.Random, config: PatternConfig, motifs: Sequence[Motif],
                   width: float, height: float, mask: Optional[Mask]) -> List[LayoutItem]:
    size = config.max_size
    step = size + config.grid_gap
    if step <= 0:
        logger.debug("Grid step %s collapses the grid; empty layout", step)
        return []

    items: List[LayoutItem] = []
    xs = grid_axis(width, step)
    for y in grid_axis(height, step):
        for x in xs:
            if mask is not None and not mask.test(x, y):
                continue
            motif = motifs[math.floor(rng.random() * len(motifs))]
            items.append(_make_item(rng, motif, x, y, size, size / motif.aspect_ratio, config))
    return items


def _overlaps(items: Sequence[LayoutItem], x: float, y: float, radius: float) -> bool:
    for item in items:
        if math.hypot(x - item.x, y - item.y) < radius + item.radius:
            return True
    return False


def _generate_random(rng: random.Random, config: PatternConfig, motifs: Sequence[Motif],
                     width: float, height: float, mask: Optional[Mask]) -> List[LayoutItem]:
    items: List[LayoutItem] = []
    target = int(config.density)
    max_attempts = target * ATTEMPTS_PER_ITEM
    attempts = 0
    while len(items) < target and attempts < max_attempts:
        attempts += 1
        x = rng.random() * width
        y = rng.random() * height
        if mask is not None and not mask.test(x, y):
            continue

        size = rng.random() * (config.max_size - config.min_size) + config.min_size
        motif = motifs[math.floor(rng.random() * len(motifs))]
        w = size
        h = size / motif.aspect_ratio

        if config.prevent_overlap:
            radius = max(w, h) / 2 * OVERLAP_RADIUS_FACTOR
            if _overlaps(items, x, y, radius):
                continue

        items.append(_make_item(rng, motif, x, y, w, h, config))

    if len(items) < target:
        logger.debug("Placed %d of %d items after %d attempts", len(items), target, attempts)
    return items


def generate_layout(config: PatternConfig, motifs: Sequence[Motif], width: float, height: float,
                    mask: Optional[Mask] = None, rng: Optional[random.Random] = None) -> List[LayoutItem]:
    """Place motifs on a width x height canvas according to `config`.

    The mask only constrains placement when `config.use_mask` is set and a
    mask is actually present.
    """
    motifs = list(motifs)
    if not motifs:
        return []
    if rng is None:
        rng = rng_from_seed(None)
    active_mask = mask if config.use_mask else None

    if config.mode == MODE_GRID:
        items = _generate_grid(rng, config, motifs, width, height, active_mask)
    else:
        items = _generate_random(rng, config, motifs, width, height, active_mask)
    logger.debug("Generated %d %s items on %sx%s", len(items), config.mode, width, height)
    return items
