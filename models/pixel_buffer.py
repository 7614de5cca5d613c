from __future__ import annotations
from dataclasses import dataclass

BYTES_PER_PIXEL = 4
BGRA = "BGRA"


@dataclass(frozen=True)
class PixelBuffer:
    """
    One video frame: 8-bit BGRA pixels (+ row stride for padded buffers).
    Read-only to every consumer. No OpenCV logic outside the repositories.
    """
    width: int
    height: int
    stride: int # Bytes per row, >= width * 4.
    data: bytes # Raw storage, at least stride * height bytes.
    pixel_format: str = BGRA

    @property
    def canonical_stride(self) -> int:
        return self.width * BYTES_PER_PIXEL
