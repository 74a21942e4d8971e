"""
SVG export of a layout.

The document mirrors a static (t=0) render: each item is a group translated
to its centre and rotated by its angle, holding the motif in a box offset by
(-w/2, -h/2). Vector motifs are inlined as nested <svg> viewports; raster
motifs are embedded as PNG data URIs so the file stands on its own.
"""

import base64
import io
import logging
import math
from typing import Dict, List, Sequence
from xml.sax.saxutils import quoteattr

from .layout import LayoutItem
from .motifs import Motif, MotifRegistry
from .utils import fmt_number

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
DEFAULT_VIEW_BOX = "0 0 100 100"


def png_data_uri(motif: Motif) -> str:
    buf = io.BytesIO()
    motif.drawable.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def _group_open(item: LayoutItem) -> str:
    deg = math.degrees(item.angle)
    return f'  <g transform="translate({fmt_number(item.x)}, {fmt_number(item.y)}) rotate({fmt_number(deg)})">'


def _box_attrs(item: LayoutItem) -> str:
    return (f'x="{fmt_number(-item.w / 2)}" y="{fmt_number(-item.h / 2)}" '
            f'width="{fmt_number(item.w)}" height="{fmt_number(item.h)}"')


def export_svg(items: Sequence[LayoutItem], registry: MotifRegistry, width: float, height: float) -> str:
    """Serialize `items` to a self-contained SVG document string."""
    lines: List[str] = [
        f'<svg width="{fmt_number(width)}" height="{fmt_number(height)}" '
        f'xmlns="{SVG_NS}" xmlns:xlink="{XLINK_NS}">'
    ]
    hrefs: Dict[str, str] = {}
    skipped = 0

    for item in items:
        motif = registry.get(item.motif_id)
        if motif is None:
            skipped += 1
            continue

        lines.append(_group_open(item))
        if motif.is_vector:
            color_attr = f" fill={quoteattr(item.color)}" if item.color else ""
            view_box = quoteattr(motif.view_box or DEFAULT_VIEW_BOX)
            ns_attrs = "".join(f" xmlns:{prefix}={quoteattr(uri)}" for prefix, uri in motif.namespaces)
            lines.append(f'    <svg {_box_attrs(item)} viewBox={view_box}{color_attr}{ns_attrs} style="overflow: visible;">')
            lines.append(f"      {motif.vector_body}")
            lines.append("    </svg>")
        else:
            if motif.id not in hrefs:
                hrefs[motif.id] = png_data_uri(motif)
            lines.append(f'    <image href="{hrefs[motif.id]}" {_box_attrs(item)} />')
        lines.append("  </g>")

    lines.append("</svg>")
    if skipped:
        logger.debug("Export skipped %d items with unknown motifs", skipped)
    return "\n".join(lines)


def save_svg(svg: str, path: str) -> str:
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(svg)
    return path
