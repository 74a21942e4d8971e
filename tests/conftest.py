import random

import pytest
from PIL import Image, ImageDraw

from motiflab import Motif, MotifKind, MotifRegistry, PatternConfig


def solid_motif(motif_id, size=(20, 10), color=(0, 0, 0, 255)):
    return Motif.from_image(Image.new("RGBA", size, color), motif_id=motif_id)


def disc_motif(motif_id, diameter=20, color=(0, 0, 0, 255)):
    im = Image.new("RGBA", (diameter, diameter), (0, 0, 0, 0))
    ImageDraw.Draw(im).ellipse([0, 0, diameter - 1, diameter - 1], fill=color)
    return Motif.from_image(im, motif_id=motif_id)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def square():
    return solid_motif("square", (16, 16))


@pytest.fixture
def bar():
    return solid_motif("bar", (40, 20), (200, 30, 30, 255))


@pytest.fixture
def vector_motif():
    return Motif(
        id="star",
        kind=MotifKind.VECTOR,
        drawable=Image.new("RGBA", (24, 24), (0, 0, 0, 255)),
        aspect_ratio=1.0,
        vector_body='<path d="M0 0L24 24"/>',
        view_box="0 0 24 24",
    )


@pytest.fixture
def registry(square, bar):
    return MotifRegistry([square, bar])


@pytest.fixture
def plain_config():
    """Random mode with every rejection source and tinting switched off."""
    return PatternConfig(
        mode="random", density=30, min_size=10, max_size=30,
        rotation_randomness=False, use_random_color=False, prevent_overlap=False,
    )
