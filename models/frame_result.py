from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from models.color import Color
from models.color_category import TrackedColor
from models.pixel_buffer import PixelBuffer


@dataclass(frozen=True)
class FrameResult:
    """
    Everything one processed frame hands to the presentation layer.
    A frame either produces all of this or nothing at all.
    """
    composited: PixelBuffer
    center_color: Color
    active_categories: Tuple[TrackedColor, ...] = ()
