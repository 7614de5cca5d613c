from __future__ import annotations
from concurrent.futures import Executor, wait
import logging

import numpy as np
import cv2

from models.frame_errors import UnreadableBufferError
from models.image_adjustments import ColorControls
from models.mask_buffer import MaskBuffer
from models.pixel_buffer import PixelBuffer
from repositories.pixel_buffer_repository import PixelBufferRepository

logger = logging.getLogger(__name__)

# Fixed look of the product; not configuration.
BACKGROUND_CONTROLS = ColorControls(saturation=1.0, brightness=-0.12, contrast=1.0)
BACKGROUND_BLUR_SIGMA = 4.0
FOREGROUND_CONTROLS = ColorControls(saturation=1.6, brightness=0.06, contrast=1.15)


class CompositorService:
    """
    Business-level helper for the highlight composite.

    • Background: optionally desaturated, darkened and softly blurred.
    • Foreground: the original frame, more saturated, brighter and contrastier.
    • Returns a **new** PixelBuffer; the source frame is never written.
    """

    def __init__(self):
        self.buffer_repository = PixelBufferRepository()

    # ─── Public API ────────────────────────────────────────────────
    def composite(self, frame: PixelBuffer, mask: MaskBuffer,
                  grayscale_background: bool = False) -> PixelBuffer:
        if mask.blank:
            self.buffer_repository.validate(frame)
            return frame
        background = self.derive_background(frame, grayscale_background)
        foreground = self.derive_foreground(frame)
        return self.blend(frame, foreground, background, mask)

    def composite_parallel(self, frame: PixelBuffer, mask_future,
                           grayscale_background: bool, executor: Executor) -> PixelBuffer:
        """
        Same result as composite() for a non-blank mask, with the two
        derivations running on *executor* while the mask is still being built.
        If any step fails, both derivations are cancelled or drained first.
        """
        bg_future = executor.submit(self.derive_background, frame, grayscale_background)
        fg_future = executor.submit(self.derive_foreground, frame)
        try:
            mask = mask_future.result()
            background, foreground = bg_future.result(), fg_future.result()
        finally:
            for f in (bg_future, fg_future):
                f.cancel()
            wait((bg_future, fg_future))
        return self.blend(frame, foreground, background, mask)

    def derive_background(self, frame: PixelBuffer, grayscale: bool) -> np.ndarray:
        """Suppressed variant, (H, W, 3) float32 BGR in [0, 1]."""
        controls = BACKGROUND_CONTROLS.with_saturation(0.0) if grayscale else BACKGROUND_CONTROLS
        bgr = controls.apply_to_bgr(self._to_float_bgr(frame))
        return cv2.GaussianBlur(bgr, (0, 0), sigmaX=BACKGROUND_BLUR_SIGMA,
                                sigmaY=BACKGROUND_BLUR_SIGMA,
                                borderType=cv2.BORDER_REPLICATE)

    def derive_foreground(self, frame: PixelBuffer) -> np.ndarray:
        """Boosted variant of the untouched source, (H, W, 3) float32 BGR."""
        return FOREGROUND_CONTROLS.apply_to_bgr(self._to_float_bgr(frame))

    def blend(self, frame: PixelBuffer, foreground: np.ndarray,
              background: np.ndarray, mask: MaskBuffer) -> PixelBuffer:
        """
        Mask-weighted blend; mask values in [0, 255] act as blend factors.
        Alpha is copied from the source frame.
        """
        if (mask.height, mask.width) != (frame.height, frame.width):
            raise UnreadableBufferError(
                f"Mask {mask.width}x{mask.height} does not match frame {frame.width}x{frame.height}")

        alpha = mask.values.astype("float32")[..., None] / 255.0
        mixed = foreground * alpha + background * (1.0 - alpha)

        try:
            out = np.empty((frame.height, frame.width, 4), dtype=np.uint8)
        except MemoryError as err:
            raise UnreadableBufferError(
                f"Could not allocate {frame.width}x{frame.height} output") from err
        out[..., :3] = np.rint(mixed * 255.0)
        out[..., 3] = self.buffer_repository.view(frame)[..., 3]
        return self.buffer_repository.from_bgra(out)

    # ─── Internal helpers ──────────────────────────────────────────
    def _to_float_bgr(self, frame: PixelBuffer) -> np.ndarray:
        pixels = self.buffer_repository.view(frame)
        return pixels[..., :3].astype("float32") / 255.0
