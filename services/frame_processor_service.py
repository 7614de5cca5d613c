from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import Optional
import logging
import os
import threading

from dotenv import load_dotenv

from models.frame_errors import FrameError, UnreadableBufferError
from models.frame_result import FrameResult
from models.pixel_buffer import PixelBuffer
from models.selection_state import SelectionState
from repositories.pixel_buffer_repository import PixelBufferRepository
from services.center_sampler_service import CenterSamplerService
from services.color_criteria_service import ColorCriteriaService
from services.compositor_service import CompositorService
from services.mask_service import MaskService
from services.selection_service import SelectionService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class FrameProcessorService:
    """
    Runs the whole highlight pipeline for one frame:
        mask build ─┐
        background ─┼─> blend -> composited frame
        foreground ─┘
        center sample -> swatch color
    *   Selection is snapshotted once at the start of the frame.
    *   A malformed frame is skipped (None), never retried or raised.
    """

    def __init__(self,
                 selection_service: SelectionService | None = None,
                 mask_service: MaskService | None = None,
                 compositor_service: CompositorService | None = None,
                 center_sampler: CenterSamplerService | None = None,
                 workers: int | None = None):
        self.selection_service = selection_service or SelectionService()
        self.mask_service = mask_service or MaskService()
        self.compositor_service = compositor_service or CompositorService()
        self.center_sampler = center_sampler or CenterSamplerService()
        self.criteria = ColorCriteriaService()
        self.buffer_repository = PixelBufferRepository()

        self.workers = workers or int(os.getenv("FRAME_WORKERS", "3"))
        self._executor = ThreadPoolExecutor(max_workers=self.workers,
                                            thread_name_prefix="frame")
        self._counter_lock = threading.Lock()
        self.frames_processed = 0
        self.frames_skipped = 0

        logger.info(f"FrameProcessorService initialized with {self.workers} workers")

    # ─── Public API ────────────────────────────────────────────────
    def process_frame(self, buffer: PixelBuffer,
                      state: SelectionState | None = None) -> Optional[FrameResult]:
        """
        Args:
            buffer: BGRA frame from the video source.
            state: Selection to use; defaults to a fresh snapshot.

        Returns:
            FrameResult, or None when the frame had to be skipped.
        """
        if state is None:
            state = self.selection_service.snapshot()
        try:
            result = self._process(buffer, state)
        except FrameError as err:
            with self._counter_lock:
                self.frames_skipped += 1
            logger.warning(f"Skipping frame: {err}")
            return None
        with self._counter_lock:
            self.frames_processed += 1
        return result

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self.mask_service.close()

    # ─── Internal helpers ──────────────────────────────────────────
    def _process(self, buffer: PixelBuffer, state: SelectionState) -> FrameResult:
        self.buffer_repository.validate(buffer)
        categories = self.criteria.active_categories(state)
        active = tuple(c.identity for c in categories)

        center = self.center_sampler.sample_center(buffer)
        if center is None:
            raise UnreadableBufferError("Center pixel could not be read")

        try:
            if not categories:
                composited = self.compositor_service.composite(
                    buffer, self.mask_service.blank_mask(buffer),
                    state.grayscale_background)
            else:
                mask_future = self._executor.submit(
                    self.mask_service.build_mask, buffer, categories)
                composited = self.compositor_service.composite_parallel(
                    buffer, mask_future, state.grayscale_background, self._executor)
        except MemoryError as err:
            raise UnreadableBufferError("Derived buffer allocation failed") from err

        logger.debug(f"Frame {buffer.width}x{buffer.height} highlighted "
                     f"{[c.value for c in active]}")
        return FrameResult(composited=composited, center_color=center,
                           active_categories=active)
