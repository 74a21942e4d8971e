"""Small helpers shared by the layout, render and export modules."""

import math
import random
import re
from typing import Optional, Tuple

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

TWO_PI = 2 * math.pi


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert '#RRGGBB' or 'RRGGBB' to (r,g,b). Handles shorthand '#RGB' too."""
    h = hex_color.strip().lstrip("#")
    if len(h) == 3:
        h = "".join(c*2 for c in h)
    if len(h) != 6 or not _HEX_RE.match(h):
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    r = int(h[0:2], 16)
    g = int(h[2:4], 16)
    b = int(h[4:6], 16)
    return (r, g, b)


def is_hex_color(value: str) -> bool:
    """True for '#RGB' or '#RRGGBB'; the '#' is required so the value is valid SVG paint."""
    return isinstance(value, str) and value.startswith("#") and bool(_HEX_RE.match(value))


def rng_from_seed(seed: Optional[int]) -> random.Random:
    """Return a Random instance from seed (or system)."""
    r = random.Random()
    if seed is not None:
        r.seed(int(seed))
    else:
        r.seed()
    return r


def random_id(rng: random.Random, length: int = 9) -> str:
    """Short base-36 identifier, e.g. 'k3j9x0q2a'."""
    return "".join(rng.choice(_BASE36) for _ in range(length))


def fmt_number(x: float) -> str:
    """Format a number for SVG output: integral values lose their '.0'."""
    x = float(x)
    if x == 0:
        return "0"
    if x.is_integer():
        return str(int(x))
    return repr(x)
