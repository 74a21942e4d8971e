"""Pattern configuration: a plain value object handed to every engine call."""

import json
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List

from .utils import is_hex_color

MODE_RANDOM = "random"
MODE_GRID = "grid"
MODES = (MODE_RANDOM, MODE_GRID)

# Keys as written by the browser front end.
_CAMEL_KEYS = {
    "gridGap": "grid_gap",
    "minSize": "min_size",
    "maxSize": "max_size",
    "rotationRandomness": "rotation_randomness",
    "useRandomColor": "use_random_color",
    "preventOverlap": "prevent_overlap",
    "useMask": "use_mask",
    "showMaskBg": "show_mask_bg",
    "enableAnim": "enable_anim",
    "animAmplitude": "anim_amplitude",
    "animSpeed": "anim_speed",
}


@dataclass
class PatternConfig:
    mode: str = MODE_RANDOM
    density: int = 60                  # item count, random mode
    grid_gap: float = 10               # spacing between cells, grid mode
    min_size: float = 40
    max_size: float = 120
    rotation_randomness: bool = True   # free angle (random) / quarter turns (grid)
    colors: List[str] = field(default_factory=lambda: ["#000000"])
    use_random_color: bool = True      # False: motifs keep their own colours
    prevent_overlap: bool = True
    use_mask: bool = False
    show_mask_bg: bool = True
    enable_anim: bool = False
    anim_amplitude: float = 15
    anim_speed: float = 20
    background: str = "#ffffff"

    def __post_init__(self):
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode!r}. Choose from {list(MODES)}")
        if self.min_size <= 0 or self.max_size <= 0:
            raise ValueError("min_size and max_size must be positive")
        if self.density < 0:
            raise ValueError("density must be >= 0")
        if self.anim_amplitude < 0 or self.anim_speed < 0:
            raise ValueError("animation amplitude and speed must be >= 0")
        self.colors = list(self.colors)
        for c in self.colors + [self.background]:
            if not is_hex_color(c):
                raise ValueError(f"Invalid hex color: {c!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PatternConfig":
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _CAMEL_KEYS.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown config key: {key!r}")
            kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_config(path: str) -> PatternConfig:
    with open(path, "r") as jf:
        data = json.load(jf)
    if not isinstance(data, dict):
        raise ValueError("Config JSON must be an object")
    return PatternConfig.from_dict(data)
