from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Color:
    """Normalized RGB color in [0, 1] (what the center swatch shows)."""
    red: float
    green: float
    blue: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return self.red, self.green, self.blue

    def to_bytes(self) -> Tuple[int, int, int]:
        return tuple(int(round(c * 255)) for c in self.as_tuple())

    def rgb_string(self) -> str:
        r, g, b = self.to_bytes()
        return f"R:{r} G:{g} B:{b}"

    def hex(self) -> str:
        r, g, b = self.to_bytes()
        return f"#{r:02X}{g:02X}{b:02X}"
