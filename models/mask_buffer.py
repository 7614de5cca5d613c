from __future__ import annotations
from dataclasses import dataclass
import numpy as np


@dataclass(frozen=True)
class MaskBuffer:
    """
    Single-channel selection mask, same size as its frame.
    values: uint8 (H, W), 0 = background, 255 = highlight.
    blank=True marks the mask built for "no highlighting at all".
    """
    width: int
    height: int
    values: np.ndarray
    blank: bool = False
