"""
Command line front end.

$ python -m motiflab --motif star.svg --motif leaf.png --size 1600x900 \
    --mode random --density 120 --palette "#111111,#f72585,#4cc9f0" \
    --out /tmp/pattern.png --svg /tmp/pattern.svg --seed 7
"""

import argparse
import dataclasses
import logging
import sys
from typing import Optional, Sequence, Tuple

from PIL import Image

from .config import MODES, PatternConfig, load_config
from .engine import PatternEngine
from .export import save_svg
from .motifs import MotifError, load_motif

logger = logging.getLogger(__name__)

_FORMAT = "[%(levelname)s: %(filename)s: %(lineno)4d]: %(message)s"


def parse_size(s: str) -> Tuple[int, int]:
    if "x" not in s.lower():
        raise argparse.ArgumentTypeError("Size must be like 1920x1080")
    a, b = s.lower().split("x", 1)
    try:
        w, h = int(a), int(b)
    except ValueError:
        raise argparse.ArgumentTypeError("Size must be like 1920x1080")
    if w <= 0 or h <= 0:
        raise argparse.ArgumentTypeError("Size must be positive")
    return (w, h)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING,
                        format=_FORMAT, stream=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Lay out motifs into a pattern and render it to PNG/SVG")
    ap.add_argument("--motif", action="append", required=True, help="Motif file (SVG, PNG, JPG); repeatable")
    ap.add_argument("--out", default=None, help="Output PNG path")
    ap.add_argument("--svg", default=None, help="Output SVG path")
    ap.add_argument("--size", type=parse_size, default=(1200, 800), help="WIDTHxHEIGHT (e.g., 1920x1080)")
    ap.add_argument("--config", default=None, help="JSON file with pattern settings")
    ap.add_argument("--mask", default=None, help="Image whose dark/opaque area constrains placement")
    ap.add_argument("--show-mask", action="store_true", help="Draw the mask faintly behind the pattern")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--mode", choices=MODES, default=None)
    ap.add_argument("--density", type=int, default=None, help="Item count in random mode")
    ap.add_argument("--gap", type=float, default=None, help="Cell gap in grid mode")
    ap.add_argument("--min-size", type=float, default=None)
    ap.add_argument("--max-size", type=float, default=None)
    ap.add_argument("--palette", default=None, help="Comma-separated hex colors (e.g., '#111,#f72585')")
    ap.add_argument("--native-color", action="store_true", help="Keep motif colors instead of palette tints")
    ap.add_argument("--no-rotation", action="store_true")
    ap.add_argument("--allow-overlap", action="store_true")
    ap.add_argument("--time", type=float, default=None, help="Render the animated frame at this time (ms)")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def config_from_args(args: argparse.Namespace) -> PatternConfig:
    config = load_config(args.config) if args.config else PatternConfig()
    overrides = {}
    if args.mode is not None:
        overrides["mode"] = args.mode
    if args.density is not None:
        overrides["density"] = args.density
    if args.gap is not None:
        overrides["grid_gap"] = args.gap
    if args.min_size is not None:
        overrides["min_size"] = args.min_size
    if args.max_size is not None:
        overrides["max_size"] = args.max_size
    if args.palette:
        overrides["colors"] = [c.strip() for c in args.palette.split(",") if c.strip()]
    if args.native_color:
        overrides["use_random_color"] = False
    if args.no_rotation:
        overrides["rotation_randomness"] = False
    if args.allow_overlap:
        overrides["prevent_overlap"] = False
    if args.mask:
        overrides["use_mask"] = True
    if args.show_mask:
        overrides["show_mask_bg"] = True
    if args.time is not None:
        overrides["enable_anim"] = True
    return dataclasses.replace(config, **overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    setup_logging(args.verbose)
    if not args.out and not args.svg:
        ap.error("nothing to write: pass --out and/or --svg")

    try:
        config = config_from_args(args)
    except (OSError, ValueError) as e:
        ap.error(str(e))

    width, height = args.size
    engine = PatternEngine(width, height, seed=args.seed)
    try:
        engine.set_motifs(load_motif(p, rng=engine.rng) for p in args.motif)
    except MotifError as e:
        ap.error(str(e))

    if args.mask:
        try:
            with Image.open(args.mask) as im:
                im.load()
                has_mask = engine.set_mask(im)
        except OSError as e:
            ap.error(f"Cannot open mask {args.mask!r}: {e}")
        if not has_mask:
            logger.warning("Mask %s is unusable; placing without it", args.mask)

    items = engine.generate(config)

    if args.out:
        if args.time is not None:
            engine.render(items, config, args.time)
            frame = engine.surface
        else:
            frame = engine.snapshot(items, config)
        frame.convert("RGB").save(args.out, format="PNG", optimize=True)
        print(args.out)
    if args.svg:
        print(save_svg(engine.export_svg(items), args.svg))
    return 0
