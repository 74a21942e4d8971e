"""
PatternEngine: the context object a host holds on to.

It owns the output surface, the motif registry and the current mask. The
host pulls: call generate() when the configuration or motif set changes,
render() once per frame, export_svg()/snapshot() on demand. Layouts come
back as plain lists and can be kept, re-rendered or exported independently.
"""

import dataclasses
import logging
from typing import Iterable, List, Optional, Sequence

from PIL import Image

from .config import PatternConfig
from .export import export_svg
from .layout import LayoutItem, generate_layout
from .mask import Mask, build_mask
from .motifs import Motif, MotifRegistry
from .render import render
from .utils import rng_from_seed

logger = logging.getLogger(__name__)


class PatternEngine:

    def __init__(self, width: int, height: int, seed: Optional[int] = None):
        self.registry = MotifRegistry()
        self.rng = rng_from_seed(seed)
        self._mask_reference: Optional[Image.Image] = None
        self.mask: Optional[Mask] = None
        self.width = 0
        self.height = 0
        self.surface = Image.new("RGBA", (1, 1))
        self.resize(width, height)

    # -- binding ----------------------------------------------------------

    def resize(self, width: int, height: int) -> None:
        """Bind a new surface size. The mask is rebuilt for the new canvas."""
        width, height = int(width), int(height)
        if width < 0 or height < 0:
            raise ValueError(f"Invalid canvas size: {width}x{height}")
        self.width, self.height = width, height
        self.surface = Image.new("RGBA", (max(1, width), max(1, height)), (255, 255, 255, 255))
        self.mask = build_mask(self._mask_reference, width, height)

    # -- motifs -----------------------------------------------------------

    def set_motifs(self, motifs: Iterable[Motif]) -> None:
        self.registry.replace_all(motifs)

    def add_motif(self, motif: Motif) -> None:
        self.registry.register(motif)

    def remove_motif(self, motif_id: str) -> None:
        self.registry.unregister(motif_id)

    # -- mask -------------------------------------------------------------

    def set_mask(self, image: Optional[Image.Image]) -> bool:
        """Use `image` as the placement mask (None clears it).

        Returns whether a usable mask now exists.
        """
        self._mask_reference = image.copy() if image is not None else None
        self.mask = build_mask(self._mask_reference, self.width, self.height)
        return self.mask is not None

    @property
    def has_mask(self) -> bool:
        return self.mask is not None

    # -- operations -------------------------------------------------------

    def generate(self, config: PatternConfig) -> List[LayoutItem]:
        return generate_layout(config, self.registry.motifs(), self.width, self.height,
                               mask=self.mask, rng=self.rng)

    def render(self, items: Sequence[LayoutItem], config: PatternConfig, time_ms: float = 0.0) -> None:
        render(self.surface, items, self.registry, config, time_ms, mask=self.mask)

    def export_svg(self, items: Sequence[LayoutItem]) -> str:
        return export_svg(items, self.registry, self.width, self.height)

    def snapshot(self, items: Sequence[LayoutItem], config: PatternConfig) -> Image.Image:
        """Render the static pose (no animation, t=0) and return a copy of the frame."""
        self.render(items, dataclasses.replace(config, enable_anim=False), 0.0)
        return self.surface.copy()
