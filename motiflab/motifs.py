"""
Motif registry and ingestion.

A motif is one drawable graphical element: an RGBA Pillow image plus, for
SVG sources, the inline markup and view box needed to re-embed it in a
vector export. Motifs are immutable once registered; the registry keeps them
in registration order so layouts pick from a stable list.
"""

import enum
import io
import logging
import math
import os
import random
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .utils import random_id

logger = logging.getLogger(__name__)

DEFAULT_VIEW_BOX_SIZE = "100"

_NUMBER_PREFIX = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")
_ROOT_OPEN = re.compile(r"<svg\b[^>]*?>", re.IGNORECASE | re.DOTALL)
_ROOT_CLOSE = re.compile(r"</svg\s*>\s*$", re.IGNORECASE)


class MotifError(ValueError):
    """Raised when a motif file cannot be read or parsed."""


class MotifKind(enum.Enum):
    VECTOR = "vector"
    RASTER = "raster"


@dataclass(frozen=True)
class Motif:
    id: str
    kind: MotifKind
    drawable: Image.Image
    aspect_ratio: float
    vector_body: Optional[str] = None
    view_box: Optional[str] = None
    # (prefix, uri) pairs declared on the source root, e.g. ("inkscape", "...")
    namespaces: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self):
        if not (self.aspect_ratio > 0 and math.isfinite(self.aspect_ratio)):
            raise ValueError(f"Motif {self.id!r} has invalid aspect ratio {self.aspect_ratio!r}")
        if self.drawable.mode != "RGBA":
            # frozen: bypass __setattr__ for the one normalisation we do
            object.__setattr__(self, "drawable", self.drawable.convert("RGBA"))

    @property
    def is_vector(self) -> bool:
        return self.kind is MotifKind.VECTOR and bool(self.vector_body)

    @classmethod
    def from_image(cls, image: Image.Image, motif_id: Optional[str] = None,
                   rng: Optional[random.Random] = None) -> "Motif":
        """Wrap an already decoded raster image."""
        w, h = image.size
        if w <= 0 or h <= 0:
            raise MotifError("Motif image has zero size")
        return cls(
            id=motif_id or random_id(rng or random.Random()),
            kind=MotifKind.RASTER,
            drawable=image.convert("RGBA"),
            aspect_ratio=w / h,
        )


class MotifRegistry:
    """Motifs keyed by id, iterated in registration order."""

    def __init__(self, motifs: Iterable[Motif] = ()):
        self._motifs: Dict[str, Motif] = {}
        for m in motifs:
            self.register(m)

    def register(self, motif: Motif) -> None:
        if motif.id in self._motifs:
            logger.debug("Replacing motif %s", motif.id)
        self._motifs[motif.id] = motif

    def unregister(self, motif_id: str) -> None:
        self._motifs.pop(motif_id, None)

    def replace_all(self, motifs: Iterable[Motif]) -> None:
        self._motifs.clear()
        for m in motifs:
            self.register(m)

    def get(self, motif_id: str) -> Optional[Motif]:
        return self._motifs.get(motif_id)

    def motifs(self) -> List[Motif]:
        return list(self._motifs.values())

    def __contains__(self, motif_id: object) -> bool:
        return motif_id in self._motifs

    def __len__(self) -> int:
        return len(self._motifs)

    def __iter__(self) -> Iterator[Motif]:
        return iter(list(self._motifs.values()))


# ---------------------------- Ingestion -------------------------------------

def _parse_float_prefix(value: Optional[str], default: str) -> float:
    m = _NUMBER_PREFIX.match(value or "")
    if not m:
        m = _NUMBER_PREFIX.match(default)
    return float(m.group(0))


class SvgParts(NamedTuple):
    body: str
    view_box: str
    namespaces: Tuple[Tuple[str, str], ...]


def _parse_root(text: str) -> Tuple[ET.Element, Tuple[Tuple[str, str], ...]]:
    """Parse `text`, returning the root element and the prefixes it declares."""
    parser = ET.XMLPullParser(events=("start-ns", "start"))
    root = None
    namespaces = []
    try:
        parser.feed(text)
        parser.close()
    except ET.ParseError as e:
        raise MotifError(f"Invalid SVG: {e}") from e
    for event, value in parser.read_events():
        if event == "start":
            if root is None:
                root = value
        elif root is None and value[0]:
            # only declarations made on the root; nested ones travel with the body
            namespaces.append(value)
    if root is None:
        raise MotifError("Invalid SVG: no root element")
    return root, tuple(namespaces)


def parse_svg(text: str) -> SvgParts:
    """Split an SVG document into inner markup, view box and root namespace prefixes.

    Missing viewBox falls back to the root's width/height (100 each when
    absent), so '<svg width="24px">' yields '0 0 24 100'.
    """
    root, namespaces = _parse_root(text.strip())
    if root.tag.rsplit("}", 1)[-1].lower() != "svg":
        raise MotifError(f"Root element is not <svg>: {root.tag!r}")

    view_box = root.get("viewBox")
    if not view_box:
        w = _parse_float_prefix(root.get("width"), DEFAULT_VIEW_BOX_SIZE)
        h = _parse_float_prefix(root.get("height"), DEFAULT_VIEW_BOX_SIZE)
        view_box = f"0 0 {_plain(w)} {_plain(h)}"

    opening = _ROOT_OPEN.search(text)
    closing = _ROOT_CLOSE.search(text.rstrip())
    if opening is None or opening.group(0).endswith("/>") or closing is None:
        body = ""
    else:
        body = text.rstrip()[opening.end():closing.start()].strip()
    return SvgParts(body, view_box, namespaces)


def _plain(x: float) -> str:
    return str(int(x)) if x.is_integer() else repr(x)


def _rasterize_svg(text: str) -> Image.Image:
    # cairo needs a system library; only pay for the import when an SVG shows up
    import cairosvg

    png_bytes = cairosvg.svg2png(bytestring=text.encode("utf-8"))
    return Image.open(io.BytesIO(png_bytes)).convert("RGBA")


def load_motif(path: str, motif_id: Optional[str] = None,
               rng: Optional[random.Random] = None) -> Motif:
    """Read an SVG, PNG or JPEG file into a Motif."""
    ident = motif_id or random_id(rng or random.Random())
    if os.path.splitext(path)[1].lower() == ".svg":
        try:
            with open(path, "r", encoding="utf-8") as fh:
                text = fh.read()
        except OSError as e:
            raise MotifError(f"Cannot read {path!r}: {e}") from e
        parts = parse_svg(text)
        try:
            drawable = _rasterize_svg(text)
        except (OSError, ValueError) as e:
            raise MotifError(f"Cannot rasterize {path!r}: {e}") from e
        w, h = drawable.size
        if w <= 0 or h <= 0:
            raise MotifError(f"SVG {path!r} rasterized to an empty image")
        logger.debug("Loaded vector motif %s from %s (%dx%d)", ident, path, w, h)
        return Motif(
            id=ident,
            kind=MotifKind.VECTOR,
            drawable=drawable,
            aspect_ratio=w / h,
            vector_body=parts.body,
            view_box=parts.view_box,
            namespaces=parts.namespaces,
        )

    try:
        with Image.open(path) as im:
            im.load()
            motif = Motif.from_image(im, motif_id=ident)
    except (OSError, UnidentifiedImageError) as e:
        raise MotifError(f"Cannot open {path!r}: {e}") from e
    logger.debug("Loaded raster motif %s from %s", ident, path)
    return motif
