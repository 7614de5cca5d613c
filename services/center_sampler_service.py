from __future__ import annotations
from typing import Optional
import logging

from models.color import Color
from models.pixel_buffer import PixelBuffer, BYTES_PER_PIXEL

logger = logging.getLogger(__name__)


class CenterSamplerService:
    """Reads the color under the viewfinder center of the *unprocessed* frame."""

    @staticmethod
    def sample_center(frame: PixelBuffer) -> Optional[Color]:
        """
        Args:
            frame (PixelBuffer): Original BGRA frame.

        Returns:
            Color in [0, 1] at (width // 2, height // 2), or None when the
            buffer is empty or too short to hold that pixel.
        """
        if frame.width <= 0 or frame.height <= 0:
            return None
        cx, cy = frame.width // 2, frame.height // 2
        offset = cy * frame.stride + cx * BYTES_PER_PIXEL
        if offset + BYTES_PER_PIXEL > len(frame.data):
            logger.debug(f"Center offset {offset} outside {len(frame.data)}-byte buffer")
            return None

        b, g, r = frame.data[offset], frame.data[offset + 1], frame.data[offset + 2]
        return Color(red=r / 255.0, green=g / 255.0, blue=b / 255.0)
