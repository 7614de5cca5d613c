"""
RGB <-> HSV conversion.

Hue is returned as a fraction of a full turn (degrees / 360). The scalar and
the array forms run the same arithmetic so they agree bit-for-bit.
"""
from __future__ import annotations
from typing import Tuple
import numpy as np


class ColorSpaceService:
    """Stateless color-space helpers."""

    @staticmethod
    def rgb_to_hsv(r: float, g: float, b: float) -> Tuple[float, float, float]:
        max_c = max(r, g, b)
        min_c = min(r, g, b)
        delta = max_c - min_c

        if delta == 0:
            hue = 0.0
        elif max_c == r:
            hue = 60.0 * (((g - b) / delta) % 6)
        elif max_c == g:
            hue = 60.0 * ((b - r) / delta + 2)
        else:
            hue = 60.0 * ((r - g) / delta + 4)
        if hue < 0:
            hue += 360.0

        sat = 0.0 if max_c == 0 else delta / max_c
        return hue / 360.0, sat, max_c

    @staticmethod
    def hsv_to_rgb(h: float, s: float, v: float) -> Tuple[float, float, float]:
        if s == 0:
            return v, v, v
        sector = (h % 1.0) * 6.0
        i = int(sector)
        f = sector - i
        p = v * (1.0 - s)
        q = v * (1.0 - s * f)
        t = v * (1.0 - s * (1.0 - f))
        i %= 6
        if i == 0:
            return v, t, p
        if i == 1:
            return q, v, p
        if i == 2:
            return p, v, t
        if i == 3:
            return p, q, v
        if i == 4:
            return t, p, v
        return v, p, q

    @staticmethod
    def rgb_to_hsv_array(r: np.ndarray, g: np.ndarray, b: np.ndarray):
        """
        Vectorised rgb_to_hsv over float64 channel planes in [0, 1].

        Returns
        -------
        (hue_deg, sat, val) : three float64 arrays; hue in degrees [0, 360]
        """
        max_c = np.maximum(np.maximum(r, g), b)
        min_c = np.minimum(np.minimum(r, g), b)
        delta = max_c - min_c
        nonzero = delta != 0
        safe_delta = np.where(nonzero, delta, 1.0)

        # channel priority mirrors the scalar branch order: r, then g, then b
        red_max = max_c == r
        green_max = ~red_max & (max_c == g)
        hue = np.where(
            red_max,
            60.0 * (((g - b) / safe_delta) % 6),
            np.where(green_max,
                     60.0 * ((b - r) / safe_delta + 2),
                     60.0 * ((r - g) / safe_delta + 4)),
        )
        hue = np.where(nonzero, hue, 0.0)
        hue = np.where(hue < 0, hue + 360.0, hue)

        sat = np.where(max_c == 0, 0.0, delta / np.where(max_c == 0, 1.0, max_c))
        # same rounding path as the scalar form: fraction of a turn, then back to degrees
        hue_deg = (hue / 360.0) * 360.0
        return hue_deg, sat, max_c
