from pathlib import Path
from typing import Union, Iterable, List, Iterator
import io
import logging
import os

import numpy as np
import cv2
from PIL import Image as PILImage
from dotenv import load_dotenv

from models.frame_errors import UnreadableBufferError, UnsupportedPixelFormatError
from models.pixel_buffer import PixelBuffer, BGRA, BYTES_PER_PIXEL

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Formats PIL cannot write with an alpha channel.
_NO_ALPHA_EXTS = {".jpg", ".jpeg", ".bmp"}


class PixelBufferRepository:
    """
    Handles buffer creation, validation, numpy views and file I/O for
    PixelBuffer entities. All OpenCV / PIL conversions live here.
    """
    def __init__(self):
        self.VALID_EXTS = {
            ext.strip().lower()
            for ext in os.getenv("VALID_IMAGE_EXTENSIONS", ".png,.jpg,.jpeg,.bmp,.webp").split(",")
        }

    # ─── Creation ──────────────────────────────────────────────────
    @staticmethod
    def from_bgra(pixels: np.ndarray) -> PixelBuffer:
        """(H, W, 4) uint8 BGRA array → PixelBuffer with canonical stride."""
        if pixels.ndim != 3 or pixels.shape[2] != BYTES_PER_PIXEL:
            raise UnsupportedPixelFormatError(
                f"Expected (H, W, 4) BGRA pixels, got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise UnsupportedPixelFormatError(f"Expected uint8 pixels, got {pixels.dtype}")
        h, w = pixels.shape[:2]
        try:
            data = np.ascontiguousarray(pixels).tobytes()
        except MemoryError as err:
            raise UnreadableBufferError(f"Could not allocate {w}x{h} buffer") from err
        return PixelBuffer(width=w, height=h, stride=w * BYTES_PER_PIXEL, data=data)

    @classmethod
    def from_bgr(cls, pixels: np.ndarray) -> PixelBuffer:
        """OpenCV-style (H, W, 3) BGR array → opaque BGRA PixelBuffer."""
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise UnsupportedPixelFormatError(
                f"Expected (H, W, 3) BGR pixels, got shape {pixels.shape}")
        return cls.from_bgra(cv2.cvtColor(pixels, cv2.COLOR_BGR2BGRA))

    # ─── Validation & views ────────────────────────────────────────
    @staticmethod
    def validate(buffer: PixelBuffer) -> None:
        if buffer.pixel_format != BGRA:
            raise UnsupportedPixelFormatError(
                f"Unsupported pixel format {buffer.pixel_format!r}, expected {BGRA!r}")
        if buffer.width <= 0 or buffer.height <= 0:
            raise UnreadableBufferError(
                f"Buffer has zero dimensions: {buffer.width}x{buffer.height}")
        if buffer.stride < buffer.canonical_stride:
            raise UnreadableBufferError(
                f"Stride {buffer.stride} is smaller than width*4 = {buffer.canonical_stride}")
        if len(buffer.data) < buffer.stride * buffer.height:
            raise UnreadableBufferError(
                f"Buffer holds {len(buffer.data)} bytes, needs {buffer.stride * buffer.height}")

    @classmethod
    def view(cls, buffer: PixelBuffer) -> np.ndarray:
        """
        Read-only (H, W, 4) uint8 view of the pixels, stride padding removed.
        No copy is made.
        """
        cls.validate(buffer)
        rows = np.frombuffer(buffer.data, dtype=np.uint8,
                             count=buffer.stride * buffer.height)
        rows = rows.reshape(buffer.height, buffer.stride)
        return rows[:, :buffer.width * BYTES_PER_PIXEL].reshape(
            buffer.height, buffer.width, BYTES_PER_PIXEL)

    @classmethod
    def to_rgba(cls, buffer: PixelBuffer) -> np.ndarray:
        return cv2.cvtColor(np.ascontiguousarray(cls.view(buffer)), cv2.COLOR_BGRA2RGBA)

    @classmethod
    def to_bgr(cls, buffer: PixelBuffer) -> np.ndarray:
        return cv2.cvtColor(np.ascontiguousarray(cls.view(buffer)), cv2.COLOR_BGRA2BGR)

    # ─── Encoding / file I/O ───────────────────────────────────────
    @classmethod
    def decode(cls, data: bytes) -> PixelBuffer:
        arr_bgr = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_COLOR)
        if arr_bgr is None:
            raise UnreadableBufferError("Image bytes could not be decoded")
        return cls.from_bgr(arr_bgr)

    @classmethod
    def encode_png(cls, buffer: PixelBuffer, compress_level: int = 1) -> bytes:
        out = io.BytesIO()
        PILImage.fromarray(cls.to_rgba(buffer)).save(out, format="PNG",
                                                    compress_level=compress_level)
        return out.getvalue()

    @classmethod
    def load(cls, path: Union[str, Path]) -> PixelBuffer:
        path = Path(path)
        arr_bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if arr_bgr is None:
            raise FileNotFoundError(f"Image not found or unreadable: {path}")
        return cls.from_bgr(arr_bgr)

    @classmethod
    def save(cls, buffer: PixelBuffer, path: Union[str, Path]) -> None:
        path = Path(path)
        img = PILImage.fromarray(cls.to_rgba(buffer))
        if path.suffix.lower() in _NO_ALPHA_EXTS:
            img = img.convert("RGB")
        img.save(path)

    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Path]:
        """
        Yield image paths one at a time.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"

        for p in sorted(folder.glob(pattern)):
            if p.suffix.lower() not in allowed or not p.is_file():
                logger.debug(f"Skipping {p}")
                continue
            yield p

    def list_dir(self, folder: Union[str, Path], *, recursive=False, exts=None) -> List[Path]:
        return list(self.iter_dir(folder, recursive=recursive, exts=exts))
