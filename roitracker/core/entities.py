"""Domain entities (data-only structures) used across the tracker."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

import numpy as np


@dataclass(frozen=True, slots=True)
class Point2D:
    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(slots=True)
class Rect:
    """Axis-aligned rectangle. Width/height may be negative mid-drag."""
    x: int
    y: int
    width: int
    height: int

    def normalized(self) -> Rect:
        """Return an equivalent rect with non-negative extents."""
        x, y, w, h = self.x, self.y, self.width, self.height
        if w < 0:
            x += w
            w = -w
        if h < 0:
            y += h
            h = -h
        return Rect(x, y, w, h)

    def intersect(self, other: Rect) -> Rect:
        a = self.normalized()
        b = other.normalized()
        x1 = max(a.x, b.x)
        y1 = max(a.y, b.y)
        x2 = min(a.x + a.width, b.x + b.width)
        y2 = min(a.y + a.height, b.y + b.height)
        return Rect(x1, y1, max(0, x2 - x1), max(0, y2 - y1))

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    @property
    def area(self) -> int:
        return abs(self.width * self.height)

    def copy(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def as_xyxy(self) -> Tuple[int, int, int, int]:
        r = self.normalized()
        return (r.x, r.y, r.x + r.width, r.y + r.height)


@dataclass(frozen=True, slots=True)
class Keypoint:
    location: Point2D
    scale: float
    orientation: float


@dataclass(frozen=True)
class DescriptorSet:
    """Keypoints with their descriptor rows, aligned 1:1."""
    keypoints: Tuple[Keypoint, ...]
    descriptors: np.ndarray  # float32, shape (N, D)

    def __post_init__(self):
        if len(self.keypoints) != len(self.descriptors):
            raise ValueError(
                f"descriptor count {len(self.descriptors)} does not match "
                f"keypoint count {len(self.keypoints)}")

    def __len__(self) -> int:
        return len(self.keypoints)

    @property
    def is_empty(self) -> bool:
        return len(self.keypoints) == 0

    def points(self) -> np.ndarray:
        return np.float32([kp.location.as_tuple() for kp in self.keypoints]).reshape(-1, 2)

    @classmethod
    def empty(cls, dim: int = 128) -> DescriptorSet:
        return cls(keypoints=(), descriptors=np.empty((0, dim), dtype=np.float32))


@dataclass(frozen=True, slots=True)
class Correspondence:
    query_index: int
    train_index: int
    distance: float


@dataclass(frozen=True, slots=True)
class Quad:
    """Four corners in drawing order: top-left, top-right, bottom-right, bottom-left."""
    corners: Tuple[Point2D, Point2D, Point2D, Point2D]

    def as_array(self) -> np.ndarray:
        return np.float32([p.as_tuple() for p in self.corners]).reshape(4, 2)

    @classmethod
    def from_array(cls, arr) -> Quad:
        pts = np.asarray(arr, dtype=np.float64).reshape(4, 2)
        return cls(tuple(Point2D(float(x), float(y)) for x, y in pts))


@dataclass(slots=True)
class ReferencePatch:
    image: np.ndarray  # cropped copy (BGR or gray)
    rect: Rect  # where the crop came from in the source frame
    features: DescriptorSet
    target_id: str = ""

    @property
    def corners(self) -> Quad:
        """Corners of the patch in its own local frame."""
        h, w = self.image.shape[:2]
        return Quad((Point2D(0.0, 0.0), Point2D(float(w), 0.0),
                     Point2D(float(w), float(h)), Point2D(0.0, float(h))))


class TrackStatus(str, Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    LOCATED = "located"
    LOST = "lost"


@dataclass(slots=True)
class TrackState:
    status: TrackStatus = TrackStatus.IDLE
    quad: Optional[Quad] = None


@dataclass(slots=True)
class TrackUpdate:
    """What one call to TrackingSession.on_frame produced."""
    state: TrackState
    match_count: int = 0
    inlier_count: int = 0
    dropped_reason: Optional[str] = None  # 'stale' | 'missed'

    @property
    def located(self) -> bool:
        return self.state.status is TrackStatus.LOCATED


@dataclass(slots=True)
class SelectionState:
    dragging: bool = False
    rect: Rect = field(default_factory=lambda: Rect(0, 0, 0, 0))

    def snapshot(self) -> SelectionState:
        """Detached copy, unaffected by later pointer events."""
        return SelectionState(self.dragging, self.rect.copy())


class SelectionStatus(str, Enum):
    IGNORED = "ignored"
    COMMITTED = "committed"
    TOO_SMALL = "selection too small"
    INSUFFICIENT_FEATURES = "insufficient features"


@dataclass(slots=True)
class SelectionOutcome:
    status: SelectionStatus
    rect: Optional[Rect] = None
    patch: Optional[ReferencePatch] = None

    @property
    def committed(self) -> bool:
        return self.status is SelectionStatus.COMMITTED

    @property
    def message(self) -> str:
        return self.status.value


class PointerKind(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"


@dataclass(frozen=True, slots=True)
class PointerEvent:
    kind: PointerKind
    x: int
    y: int


@dataclass(slots=True)
class PipelineState:
    frame: Any  # numpy ndarray (BGR), overlays drawn
    track: TrackState
    selection: SelectionState
    match_count: int
    latency_ms: int
    fps: float
    messages: List[str] = field(default_factory=list)
