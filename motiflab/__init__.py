"""
motiflab
========

Procedural motif patterns: place icons, vectors and raster images on a
canvas (random scatter or grid, optionally constrained by a mask image),
render animated frames with Pillow and export the static pose to SVG.

Quick start
-----------
>>> from PIL import Image
>>> from motiflab import Motif, PatternConfig, PatternEngine
>>> engine = PatternEngine(800, 600, seed=42)
>>> engine.add_motif(Motif.from_image(Image.new("RGBA", (40, 20), "black"), motif_id="bar"))
>>> items = engine.generate(PatternConfig(mode="grid", max_size=40, grid_gap=10))
>>> engine.render(items, PatternConfig(), time_ms=0)
>>> svg = engine.export_svg(items)
"""

from .cache import NATIVE, Native, TintedCache, build_tinted_surface
from .config import MODE_GRID, MODE_RANDOM, PatternConfig, load_config
from .engine import PatternEngine
from .export import export_svg
from .layout import LayoutItem, generate_layout
from .mask import Mask, build_mask
from .motifs import Motif, MotifError, MotifKind, MotifRegistry, SvgParts, load_motif, parse_svg
from .render import render, render_frame

__version__ = "0.1.0"

__all__ = [
    "NATIVE", "Native", "TintedCache", "build_tinted_surface",
    "MODE_GRID", "MODE_RANDOM", "PatternConfig", "load_config",
    "PatternEngine",
    "export_svg",
    "LayoutItem", "generate_layout",
    "Mask", "build_mask",
    "Motif", "MotifError", "MotifKind", "MotifRegistry", "load_motif", "parse_svg", "SvgParts",
    "render", "render_frame",
]
