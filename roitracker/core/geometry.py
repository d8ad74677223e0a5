"""Geometry / math helper functions (pure, easily unit tested)."""
from __future__ import annotations
from typing import Tuple
import math

import cv2
import numpy as np

from roitracker.core.entities import Point2D, Quad, Rect


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


def clamp_point(x: float, y: float, width: int, height: int, edge: bool = False) -> Tuple[int, int]:
    """Clamp a pointer position to a width x height frame.

    Pixel positions stop at the last column/row; with ``edge`` the far frame
    edge (x == width, y == height) is allowed, so a rectangle spanned to it
    includes the last column/row.
    """
    if edge:
        return int(clamp(x, 0, width)), int(clamp(y, 0, height))
    return int(clamp(x, 0, width - 1)), int(clamp(y, 0, height - 1))


def rect_corners(rect: Rect) -> Quad:
    r = rect.normalized()
    x2, y2 = r.x + r.width, r.y + r.height
    return Quad((Point2D(r.x, r.y), Point2D(x2, r.y), Point2D(x2, y2), Point2D(r.x, y2)))


def project_corners(homography: np.ndarray, corners: Quad) -> Quad:
    """Map a quad through a 3x3 perspective transform."""
    src = corners.as_array().reshape(-1, 1, 2)
    dst = cv2.perspectiveTransform(src, np.asarray(homography, dtype=np.float64))
    return Quad.from_array(dst)


def max_corner_displacement(a: Quad, b: Quad) -> float:
    return max(math.hypot(p.x - q.x, p.y - q.y) for p, q in zip(a.corners, b.corners))


def quad_bounding_rect(quad: Quad) -> Rect:
    """Tight axis-aligned box around a quad (may extend outside the frame)."""
    xs = [p.x for p in quad.corners]
    ys = [p.y for p in quad.corners]
    x1, y1 = math.floor(min(xs)), math.floor(min(ys))
    x2, y2 = math.ceil(max(xs)), math.ceil(max(ys))
    return Rect(x1, y1, x2 - x1, y2 - y1)


def frame_rect(image: np.ndarray) -> Rect:
    h, w = image.shape[:2]
    return Rect(0, 0, w, h)
