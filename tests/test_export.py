import base64
import io
import math
import xml.etree.ElementTree as ET

import pytest
from PIL import Image

from motiflab import LayoutItem, Motif, MotifKind, MotifRegistry, export_svg, parse_svg

SVG = "{http://www.w3.org/2000/svg}"


def parse(doc):
    return ET.fromstring(doc)


def groups(root):
    return root.findall(f"{SVG}g")


def test_empty_document_shell(registry):
    doc = export_svg([], registry, 640, 480)
    root = parse(doc)
    assert root.tag == f"{SVG}svg"
    assert root.get("width") == "640" and root.get("height") == "480"
    assert list(root) == []


def test_vector_item_structure(vector_motif):
    reg = MotifRegistry([vector_motif])
    item = LayoutItem(id="a", motif_id="star", x=100, y=50.5, w=40, h=30, angle=math.pi / 2, color="#ff0000")
    root = parse(export_svg([item], reg, 200, 100))
    (g,) = groups(root)
    translate, rotate = g.get("transform").split(" rotate")
    assert translate == "translate(100, 50.5)"
    assert float(rotate.strip("()")) == pytest.approx(90)
    (inner,) = list(g)
    assert inner.tag == f"{SVG}svg"
    assert inner.get("x") == "-20" and inner.get("y") == "-15"
    assert inner.get("width") == "40" and inner.get("height") == "30"
    assert inner.get("viewBox") == "0 0 24 24"
    assert inner.get("fill") == "#ff0000"
    assert "overflow: visible" in inner.get("style")
    assert inner.find(f"{SVG}path").get("d") == "M0 0L24 24"


def test_vector_item_without_color_has_no_fill(vector_motif):
    reg = MotifRegistry([vector_motif])
    item = LayoutItem(id="a", motif_id="star", x=1, y=2, w=3, h=3)
    (g,) = groups(parse(export_svg([item], reg, 10, 10)))
    assert list(g)[0].get("fill") is None


def test_raster_item_embeds_png(registry):
    item = LayoutItem(id="b", motif_id="bar", x=10, y=20, w=40, h=20, angle=0.0)
    (g,) = groups(parse(export_svg([item], registry, 100, 100)))
    assert g.get("transform") == "translate(10, 20) rotate(0)"
    (image,) = list(g)
    assert image.tag == f"{SVG}image"
    href = image.get("href")
    assert href.startswith("data:image/png;base64,")
    decoded = Image.open(io.BytesIO(base64.b64decode(href.split(",", 1)[1])))
    assert decoded.size == (40, 20)
    assert (image.get("x"), image.get("y")) == ("-20", "-10")


def test_missing_motif_skipped(registry):
    items = [LayoutItem(id="x", motif_id="nope", x=1, y=1, w=5, h=5),
             LayoutItem(id="y", motif_id="square", x=2, y=2, w=5, h=5)]
    assert len(groups(parse(export_svg(items, registry, 10, 10)))) == 1


def test_positions_match_items_in_order(registry):
    items = [LayoutItem(id=str(i), motif_id="square", x=i * 10.25, y=i * 3.5, w=8, h=8,
                        angle=i * 0.3, anim_phase=1.0, anim_speed_mul=1.1)
             for i in range(6)]
    root = parse(export_svg(items, registry, 100, 100))
    gs = groups(root)
    assert len(gs) == len(items)
    for item, g in zip(items, gs):
        translate, rotate = g.get("transform").split(" rotate")
        x, y = (float(v) for v in translate[len("translate("):-1].split(","))
        assert (x, y) == (item.x, item.y)
        assert float(rotate.strip("()")) == pytest.approx(math.degrees(item.angle))


def test_prefixed_vector_body_stays_well_formed():
    inkscape = "http://www.inkscape.org/namespaces/inkscape"
    parts = parse_svg(
        f'<svg xmlns="http://www.w3.org/2000/svg" xmlns:inkscape="{inkscape}" viewBox="0 0 10 10">'
        '<g inkscape:label="Layer 1"><circle cx="5" cy="5" r="4"/></g></svg>'
    )
    motif = Motif(id="ring", kind=MotifKind.VECTOR, drawable=Image.new("RGBA", (10, 10)),
                  aspect_ratio=1.0, vector_body=parts.body, view_box=parts.view_box,
                  namespaces=parts.namespaces)
    item = LayoutItem(id="r", motif_id="ring", x=5, y=5, w=10, h=10, color="#00ff00")
    root = parse(export_svg([item], MotifRegistry([motif]), 20, 20))

    (g,) = groups(root)
    layer = g.find(f"{SVG}svg/{SVG}g")
    assert layer.get(f"{{{inkscape}}}label") == "Layer 1"
    assert layer.find(f"{SVG}circle") is not None
