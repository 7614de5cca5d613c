from __future__ import annotations
from dataclasses import dataclass
import numpy as np

# Rec.709 luma weights in B, G, R order (frames are BGRA).
_LUMA_BGR = np.array([0.0722, 0.7152, 0.2126], dtype=np.float32)


@dataclass(frozen=True)
class ColorControls:
    """
    Value-object holding saturation/brightness/contrast in Core Image
    "color controls" units.
    saturation: multiplier, 0 = gray, 1 = unchanged
    brightness: offset added in [0,1] space
    contrast:   multiplier around mid-gray, 1 = unchanged
    """
    saturation: float = 1.0
    brightness: float = 0.0
    contrast:   float = 1.0

    def with_saturation(self, saturation: float) -> "ColorControls":
        return ColorControls(saturation, self.brightness, self.contrast)

    # ── Core math ────────────────────────────────────────────────────
    def apply_to_bgr(self, bgr: np.ndarray) -> np.ndarray:
        """
        Args
        ----
        bgr : np.ndarray  (H, W, 3)  float32  [0, 1]

        Returns
        -------
        np.ndarray  (H, W, 3)  float32  [0, 1]
        """
        out = bgr
        if self.saturation != 1.0:
            luma = (bgr @ _LUMA_BGR)[..., None]
            out = luma + (out - luma) * self.saturation
        if self.brightness != 0.0:
            out = out + self.brightness
        if self.contrast != 1.0:
            out = (out - 0.5) * self.contrast + 0.5
        return np.clip(out, 0.0, 1.0).astype(np.float32, copy=False)
