"""Overlay drawing for the selection rectangle, tracked quad and status label."""
from __future__ import annotations
from typing import Tuple

import cv2
import numpy as np

from roitracker.core.entities import Quad, Rect, TrackState, TrackStatus

SELECTION_COLOR = (0, 255, 0)  # BGR
QUAD_COLOR = (0, 200, 255)
LOST_COLOR = (0, 0, 255)
TEXT_COLOR = (255, 255, 255)


def draw_selection(image: np.ndarray, rect: Rect, color: Tuple[int, int, int] = SELECTION_COLOR,
                   thickness: int = 1) -> np.ndarray:
    x1, y1, x2, y2 = rect.as_xyxy()
    cv2.rectangle(image, (x1, y1), (x2, y2), color, thickness)
    return image


def draw_quad(image: np.ndarray, quad: Quad, color: Tuple[int, int, int] = QUAD_COLOR,
              thickness: int = 2) -> np.ndarray:
    pts = np.int32(np.round(quad.as_array())).reshape(-1, 1, 2)
    cv2.polylines(image, [pts], True, color, thickness, cv2.LINE_AA)
    return image


def draw_status(image: np.ndarray, state: TrackState, match_count: int = 0) -> np.ndarray:
    label = state.status.value
    if state.status in (TrackStatus.LOCATED, TrackStatus.LOST):
        label = f"{label} ({match_count} matches)"
    color = LOST_COLOR if state.status is TrackStatus.LOST else TEXT_COLOR
    cv2.putText(image, label, (8, 20), cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1, cv2.LINE_AA)
    return image
