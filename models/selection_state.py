from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from models.color_category import TrackedColor
from models.vision_mode import VisionMode

MAX_MANUAL_COLORS = 2


class SelectionSource(str, Enum):
    """Which selection mechanism the pipeline reads from."""
    MANUAL = "manual"
    VISION_MODE = "vision_mode"


@dataclass(frozen=True)
class SelectionState:
    """
    Immutable snapshot of the user's choices.
    Mutations build a new instance, so a frame always sees one consistent value.
    """
    manual_colors: Tuple[TrackedColor, ...] = ()   # insertion order, at most 2
    vision_mode: VisionMode = VisionMode.NORMAL
    source: SelectionSource = SelectionSource.MANUAL
    grayscale_background: bool = False

    def to_dict(self) -> dict:
        return {
            "manual_colors": [c.value for c in self.manual_colors],
            "vision_mode": self.vision_mode.value,
            "source": self.source.value,
            "grayscale_background": self.grayscale_background,
        }
