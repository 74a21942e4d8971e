import dataclasses
import math

import pytest
from PIL import Image, ImageChops

from motiflab import LayoutItem, Motif, MotifRegistry, PatternConfig, build_mask, render, render_frame
from motiflab.cache import TintedCache, build_tinted_surface
from motiflab.render import animation_offset

STATIC = PatternConfig(enable_anim=False)
ANIMATED = PatternConfig(enable_anim=True, anim_amplitude=15, anim_speed=20)


def item_at(motif_id, x, y, w=20, h=20, **kw):
    return LayoutItem(id="i-" + motif_id, motif_id=motif_id, x=x, y=y, w=w, h=h, **kw)


def same_pixels(a, b):
    return ImageChops.difference(a, b).getbbox() is None


def test_empty_layout_is_background_only(registry):
    frame = render_frame((40, 30), [], registry, STATIC)
    assert frame.getcolors() == [(40 * 30, (255, 255, 255, 255))]


def test_custom_background(registry):
    frame = render_frame((10, 10), [], registry, PatternConfig(background="#102030"))
    assert frame.getpixel((5, 5)) == (0x10, 0x20, 0x30, 255)


def test_native_item_is_drawn_centred(registry):
    frame = render_frame((100, 100), [item_at("square", 50, 50)], registry, STATIC)
    assert frame.getpixel((50, 50)) == (0, 0, 0, 255)
    assert frame.getpixel((41, 41)) == (0, 0, 0, 255)
    assert frame.getpixel((58, 58)) == (0, 0, 0, 255)
    assert frame.getpixel((38, 50)) == (255, 255, 255, 255)
    assert frame.getpixel((62, 50)) == (255, 255, 255, 255)


def test_tinted_cache_is_used(registry, square):
    tint = TintedCache(build_tinted_surface(square, "#00ff00", 20, 20))
    item = item_at("square", 50, 50, color="#00ff00", appearance=tint)
    frame = render_frame((100, 100), [item], registry, STATIC)
    assert frame.getpixel((50, 50)) == (0, 255, 0, 255)


def test_rotation_swaps_extent(registry):
    # bar motif is 40x20; a quarter turn makes it 20 wide and 40 tall
    item = item_at("bar", 50, 50, w=40, h=20, angle=math.pi / 2)
    frame = render_frame((100, 100), [item], registry, STATIC)
    assert frame.getpixel((50, 35)) != (255, 255, 255, 255)
    assert frame.getpixel((35, 50)) == (255, 255, 255, 255)


def test_missing_motif_is_skipped(registry):
    frame = render_frame((50, 50), [item_at("gone", 25, 25)], registry, STATIC)
    assert frame.getcolors() == [(2500, (255, 255, 255, 255))]


def test_removed_motif_skips_cached_item(square):
    reg = MotifRegistry([square])
    tint = TintedCache(build_tinted_surface(square, "#ff0000", 20, 20))
    item = item_at("square", 25, 25, color="#ff0000", appearance=tint)
    reg.unregister("square")
    frame = render_frame((50, 50), [item], reg, STATIC)
    assert frame.getpixel((25, 25)) == (255, 255, 255, 255)


def test_items_partly_off_canvas(registry):
    frame = render_frame((30, 30), [item_at("square", 0, 0), item_at("square", 30, 30)], registry, STATIC)
    assert frame.getpixel((0, 0)) == (0, 0, 0, 255)
    assert frame.getpixel((29, 29)) == (0, 0, 0, 255)


def test_animation_offsets_zero_when_disabled():
    item = item_at("square", 0, 0, anim_phase=1.0, anim_speed_mul=1.1)
    off = animation_offset(item, STATIC, 12345)
    assert (off.dx, off.dy, off.drot) == (0, 0, 0)


def test_animation_offsets_formula():
    item = item_at("square", 0, 0, anim_phase=0.3, anim_speed_mul=0.9)
    t = 1000.0
    speed = 20 * 0.002
    off = animation_offset(item, ANIMATED, t)
    assert off.dy == pytest.approx(15 * math.sin(t * speed * 0.9 + 0.3))
    assert off.dx == pytest.approx(7.5 * math.cos(t * speed * 0.9 * 0.7 + 0.3))
    assert off.drot == pytest.approx(0.05 * math.sin(t * speed * 0.9 * 0.5))


def test_animation_moves_item(registry):
    item = item_at("square", 50, 50, w=10, h=10, anim_phase=math.pi / 2)
    still = render_frame((100, 100), [item], registry, STATIC, time_ms=0)
    moved = render_frame((100, 100), [item], registry, ANIMATED, time_ms=0)
    # at t=0 with phase pi/2 the item sits amp (15px) lower
    assert still.getpixel((50, 50)) == (0, 0, 0, 255)
    assert moved.getpixel((50, 50)) == (255, 255, 255, 255)
    assert moved.getpixel((50, 65)) == (0, 0, 0, 255)


def test_render_is_idempotent(registry):
    items = [item_at("square", 30, 30, angle=0.4, anim_phase=1.0),
             item_at("bar", 60, 40, w=40, h=20, angle=2.0, anim_speed_mul=1.2)]
    surface = Image.new("RGBA", (100, 80))
    render(surface, items, registry, ANIMATED, 777.0)
    first = surface.copy()
    render(surface, items, registry, ANIMATED, 777.0)
    assert same_pixels(first, surface)


def test_render_does_not_mutate_items(registry):
    items = [item_at("square", 30, 30, anim_phase=1.0)]
    snapshot = [dataclasses.asdict(i) for i in items]
    render_frame((60, 60), items, registry, ANIMATED, time_ms=500)
    assert [dataclasses.asdict(i) for i in items] == snapshot


def test_mask_preview_drawn_faintly(registry):
    mask = build_mask(Image.new("RGBA", (10, 10), (0, 0, 0, 255)), 100, 100)
    shown = PatternConfig(use_mask=True, show_mask_bg=True)
    hidden = dataclasses.replace(shown, show_mask_bg=False)

    frame = render_frame((100, 100), [], registry, shown, mask=mask)
    r, g, b, a = frame.getpixel((50, 50))
    assert 220 <= r < 255 and r == g == b and a == 255
    assert frame.getpixel((1, 1)) == (255, 255, 255, 255)

    frame = render_frame((100, 100), [], registry, hidden, mask=mask)
    assert frame.getpixel((50, 50)) == (255, 255, 255, 255)


def test_translucent_and_rotated_items_keep_frame_opaque():
    ghost = Motif.from_image(Image.new("RGBA", (20, 20), (0, 0, 0, 128)), motif_id="ghost")
    reg = MotifRegistry([ghost])
    items = [item_at("ghost", 25, 25, angle=math.pi / 5),
             item_at("ghost", 0, 48, angle=0.0)]
    frame = render_frame((50, 50), items, reg, STATIC)
    assert frame.getchannel("A").getextrema() == (255, 255)
    r, g, b, a = frame.getpixel((25, 25))
    assert a == 255 and 120 <= r <= 135 and r == g == b
