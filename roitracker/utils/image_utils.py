"""Image processing utilities."""

from dataclasses import dataclass
import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def reduce_noise(image: np.ndarray, kernel_size: int = 5) -> np.ndarray:
    """Median filter; removes sensor speckle without smearing edges."""
    return cv2.medianBlur(image, kernel_size)


def equalize_contrast(image: np.ndarray, clip_limit: float = 2.0, tile: int = 8) -> np.ndarray:
    """CLAHE on the luminance channel (or the single channel of a gray image)."""
    clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=(tile, tile))
    if image.ndim == 2:
        return clahe.apply(image)
    lab = cv2.cvtColor(image, cv2.COLOR_BGR2LAB)
    l, a, b = cv2.split(lab)
    return cv2.cvtColor(cv2.merge((clahe.apply(l), a, b)), cv2.COLOR_LAB2BGR)


def overlay_edges(image: np.ndarray, low: int = 50, high: int = 150,
                  color=(255, 0, 255)) -> np.ndarray:
    """Return a copy of ``image`` with Canny edges painted on top."""
    gray = image if image.ndim == 2 else cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    edges = cv2.Canny(gray, low, high)
    out = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR) if image.ndim == 2 else image.copy()
    out[edges > 0] = color
    return out


@dataclass
class Preprocessor:
    """Runtime toggles applied to every frame.

    ``denoise`` and ``equalize_contrast`` change what selection and tracking
    see; ``edge_overlay`` only changes the presented image.
    """
    denoise: bool = False
    equalize_contrast: bool = False
    edge_overlay: bool = False

    @classmethod
    def from_config(cls, cfg) -> "Preprocessor":
        return cls(denoise=cfg.denoise, equalize_contrast=cfg.equalize_contrast,
                   edge_overlay=cfg.edge_overlay)

    def toggle(self, name: str) -> bool:
        value = not getattr(self, name)
        setattr(self, name, value)
        logger.info(f"{name} {'on' if value else 'off'}")
        return value

    def prepare(self, frame: np.ndarray) -> np.ndarray:
        out = frame
        if self.denoise:
            out = reduce_noise(out)
        if self.equalize_contrast:
            out = equalize_contrast(out)
        return out

    def decorate(self, frame: np.ndarray) -> np.ndarray:
        if self.edge_overlay:
            return overlay_edges(frame)
        return frame.copy()
