from __future__ import annotations
from enum import Enum
from typing import Tuple

from models.color_category import TrackedColor


class VisionMode(str, Enum):
    """Deficiency presets; each one highlights a fixed set of colors."""
    DEUTERANOMALY = "deuteranomaly"
    PROTANOMALY = "protanomaly"
    TRITANOMALY = "tritanomaly"
    NORMAL = "normal"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @property
    def title(self) -> str:
        return f"{_TITLES[self]} ({self.symbol})"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def highlighted_colors(self) -> Tuple[TrackedColor, ...]:
        return _HIGHLIGHTS[self]


_SYMBOLS = {
    VisionMode.DEUTERANOMALY: "D",
    VisionMode.PROTANOMALY: "P",
    VisionMode.TRITANOMALY: "T",
    VisionMode.NORMAL: "NV",
}

_TITLES = {
    VisionMode.DEUTERANOMALY: "Deuteranomaly",
    VisionMode.PROTANOMALY: "Protanomaly",
    VisionMode.TRITANOMALY: "Tritanomaly",
    VisionMode.NORMAL: "Normal vision",
}

_DESCRIPTIONS = {
    VisionMode.DEUTERANOMALY:
        "Reduced sensitivity to green light. Red/green confusion is common.",
    VisionMode.PROTANOMALY:
        "Reduced sensitivity to red light. Reds can look darker and less distinct.",
    VisionMode.TRITANOMALY:
        "Reduced sensitivity to blue light. Blue/yellow confusion can happen.",
    VisionMode.NORMAL:
        "No color vision deficiency simulation/highlighting.",
}

_HIGHLIGHTS = {
    VisionMode.DEUTERANOMALY: (TrackedColor.GREEN,),
    VisionMode.PROTANOMALY: (TrackedColor.RED,),
    VisionMode.TRITANOMALY: (TrackedColor.BLUE, TrackedColor.YELLOW),
    VisionMode.NORMAL: (),
}
