from __future__ import annotations
from typing import Iterable, Sequence, Tuple
import numpy as np

from models.color_category import CATALOG, ColorCategory, TrackedColor
from models.selection_state import SelectionSource, SelectionState


class ColorCriteriaService:
    """
    Decides whether an HSV pixel belongs to a tracked color, and which
    categories a selection activates.
    """

    # ─── Scalar matching ───────────────────────────────────────────
    @staticmethod
    def matches(hue_deg: float, s: float, v: float, category: ColorCategory) -> bool:
        if s < category.min_saturation or v < category.min_value:
            return False
        if category.hue_min <= category.hue_max:
            return category.hue_min <= hue_deg <= category.hue_max
        return hue_deg >= category.hue_min or hue_deg <= category.hue_max

    @classmethod
    def matches_any(cls, hue_deg: float, s: float, v: float,
                    categories: Iterable[ColorCategory]) -> bool:
        return any(cls.matches(hue_deg, s, v, c) for c in categories)

    # ─── Vectorised matching ───────────────────────────────────────
    @staticmethod
    def match_array(hue_deg: np.ndarray, s: np.ndarray, v: np.ndarray,
                    categories: Sequence[ColorCategory]) -> np.ndarray:
        """Boolean array, True where any category matches."""
        hit = np.zeros(hue_deg.shape, dtype=bool)
        for c in categories:
            floors = (s >= c.min_saturation) & (v >= c.min_value)
            if c.hue_min <= c.hue_max:
                in_range = (hue_deg >= c.hue_min) & (hue_deg <= c.hue_max)
            else:
                in_range = (hue_deg >= c.hue_min) | (hue_deg <= c.hue_max)
            hit |= floors & in_range
        return hit

    # ─── Selection resolver ────────────────────────────────────────
    @staticmethod
    def active_colors(state: SelectionState) -> Tuple[TrackedColor, ...]:
        if state.source is SelectionSource.VISION_MODE:
            return state.vision_mode.highlighted_colors
        return state.manual_colors

    @classmethod
    def active_categories(cls, state: SelectionState) -> Tuple[ColorCategory, ...]:
        return tuple(CATALOG[c] for c in cls.active_colors(state))
