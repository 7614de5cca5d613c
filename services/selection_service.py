from __future__ import annotations
from dataclasses import replace
import logging

from models.color_category import TrackedColor
from models.selection_state import (
    MAX_MANUAL_COLORS,
    SelectionSource,
    SelectionState,
)
from models.vision_mode import VisionMode
from repositories.selection_repository import SelectionRepository

logger = logging.getLogger(__name__)


class SelectionService:
    """
    Business logic for the user's color choices.
    Every mutator swaps in a new immutable SelectionState, so readers
    always get a consistent snapshot.
    """

    def __init__(self, repository: SelectionRepository | None = None):
        self.repository = repository or SelectionRepository()

    # ─── Pure transitions ──────────────────────────────────────────
    @staticmethod
    def toggle(state: SelectionState, color: TrackedColor) -> SelectionState:
        """
        Remove *color* if selected; otherwise append it, evicting the
        oldest entry once two are selected.
        """
        colors = state.manual_colors
        if color in colors:
            colors = tuple(c for c in colors if c != color)
        elif len(colors) < MAX_MANUAL_COLORS:
            colors = colors + (color,)
        else:
            colors = colors[1:] + (color,)
        return replace(state, manual_colors=colors, source=SelectionSource.MANUAL)

    @staticmethod
    def select_mode(state: SelectionState, mode: VisionMode) -> SelectionState:
        return replace(state, vision_mode=mode, source=SelectionSource.VISION_MODE)

    # ─── Mutators used by the UI layer ─────────────────────────────
    def toggle_manual_color(self, color: TrackedColor | str) -> SelectionState:
        color = TrackedColor(color)
        state = self.repository.update(lambda s: self.toggle(s, color))
        logger.debug(f"Manual colors now {[c.value for c in state.manual_colors]}")
        return state

    def select_vision_mode(self, mode: VisionMode | str) -> SelectionState:
        mode = VisionMode(mode)
        state = self.repository.update(lambda s: self.select_mode(s, mode))
        logger.debug(f"Vision mode now {mode.value}")
        return state

    def use_manual_colors(self) -> SelectionState:
        return self.repository.update(
            lambda s: replace(s, source=SelectionSource.MANUAL))

    def set_grayscale_background(self, enabled: bool) -> SelectionState:
        return self.repository.update(
            lambda s: replace(s, grayscale_background=bool(enabled)))

    def snapshot(self) -> SelectionState:
        return self.repository.retrieve()

    def reset(self) -> SelectionState:
        state = SelectionState()
        self.repository.replace(state)
        return state
