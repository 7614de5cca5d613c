from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence, Tuple
import logging
import os
import threading

import numpy as np
from dotenv import load_dotenv

from models.color_category import ColorCategory
from models.mask_buffer import MaskBuffer
from models.pixel_buffer import PixelBuffer
from repositories.pixel_buffer_repository import PixelBufferRepository
from services.color_criteria_service import ColorCriteriaService
from services.color_space_service import ColorSpaceService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

HIGHLIGHT = 255


class MaskService:
    """
    Builds the per-pixel highlight mask for one frame.

    *   Hard decision per pixel: 255 if any active category matches, else 0.
    *   Rows are split into disjoint chunks and scanned on a thread pool
        (numpy releases the GIL inside the heavy array ops).
    """

    def __init__(self, workers: int | None = None, chunk_rows: int | None = None):
        self.workers = workers or int(os.getenv("MASK_WORKERS", "4"))
        self.chunk_rows = chunk_rows or int(os.getenv("MASK_CHUNK_ROWS", "64"))
        self.buffer_repository = PixelBufferRepository()
        self.color_space = ColorSpaceService()
        self.criteria = ColorCriteriaService()
        self._executor = ThreadPoolExecutor(max_workers=self.workers,
                                            thread_name_prefix="mask")
        self._counter_lock = threading.Lock()
        self.pixels_scanned = 0

        logger.info(f"MaskService initialized with {self.workers} workers, "
                    f"{self.chunk_rows} rows per chunk")

    # ─── Public API ────────────────────────────────────────────────
    def build_mask(self, frame: PixelBuffer,
                   active_categories: Sequence[ColorCategory]) -> MaskBuffer:
        if not active_categories:
            self.buffer_repository.validate(frame)
            return self.blank_mask(frame)

        pixels = self.buffer_repository.view(frame)
        values = np.zeros((frame.height, frame.width), dtype=np.uint8)
        categories = tuple(active_categories)

        chunks = self._row_chunks(frame.height)
        if len(chunks) == 1:
            self._scan_rows(pixels, values, categories, *chunks[0])
        else:
            futures = [
                self._executor.submit(self._scan_rows, pixels, values, categories, start, stop)
                for start, stop in chunks
            ]
            for f in futures:
                f.result()

        values.setflags(write=False)
        return MaskBuffer(width=frame.width, height=frame.height, values=values)

    @staticmethod
    def blank_mask(frame: PixelBuffer) -> MaskBuffer:
        """All-zero mask flagged blank: no pixel data is read."""
        values = np.zeros((frame.height, frame.width), dtype=np.uint8)
        values.setflags(write=False)
        return MaskBuffer(width=frame.width, height=frame.height, values=values, blank=True)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    # ─── Internal helpers ──────────────────────────────────────────
    def _row_chunks(self, height: int) -> List[Tuple[int, int]]:
        step = max(1, self.chunk_rows)
        return [(start, min(start + step, height)) for start in range(0, height, step)]

    def _scan_rows(self, pixels: np.ndarray, out: np.ndarray,
                   categories: Tuple[ColorCategory, ...], start: int, stop: int) -> None:
        rows = pixels[start:stop]
        # BGRA layout
        b = rows[..., 0] / 255.0
        g = rows[..., 1] / 255.0
        r = rows[..., 2] / 255.0

        hue_deg, sat, val = self.color_space.rgb_to_hsv_array(r, g, b)
        hit = self.criteria.match_array(hue_deg, sat, val, categories)
        out[start:stop][hit] = HIGHLIGHT

        with self._counter_lock:
            self.pixels_scanned += hit.size
