from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class TrackedColor(str, Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    YELLOW = "yellow"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def target_rgb(self) -> Tuple[float, float, float]:
        """Pure reference color in [0, 1], used for swatches."""
        return _TARGET_RGB[self]


_TARGET_RGB = {
    TrackedColor.RED:    (1.0, 0.0, 0.0),
    TrackedColor.GREEN:  (0.0, 1.0, 0.0),
    TrackedColor.BLUE:   (0.0, 0.0, 1.0),
    TrackedColor.YELLOW: (1.0, 1.0, 0.0),
}


@dataclass(frozen=True)
class ColorCategory:
    """
    Classification parameters for one tracked color.
    Hue in degrees; hue_min > hue_max means the range wraps through 0°/360°.
    """
    identity: TrackedColor
    hue_min: float
    hue_max: float
    min_saturation: float   # [0, 1]
    min_value: float        # [0, 1]

    @property
    def wraps(self) -> bool:
        return self.hue_min > self.hue_max


CATALOG: Dict[TrackedColor, ColorCategory] = {
    TrackedColor.RED:    ColorCategory(TrackedColor.RED,    330.0,  30.0, 0.20, 0.15),
    TrackedColor.YELLOW: ColorCategory(TrackedColor.YELLOW,  40.0,  80.0, 0.20, 0.20),
    TrackedColor.GREEN:  ColorCategory(TrackedColor.GREEN,   80.0, 160.0, 0.18, 0.12),
    TrackedColor.BLUE:   ColorCategory(TrackedColor.BLUE,   180.0, 260.0, 0.18, 0.08),
}


def category_for(color: TrackedColor | str) -> ColorCategory:
    return CATALOG[TrackedColor(color)]
