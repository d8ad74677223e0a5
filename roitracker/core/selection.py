"""Pointer-driven region-of-interest selection.

Turns down/move/up pointer events into a committed, validated rectangle and
builds the ReferencePatch for it. The machine is Idle -> Dragging -> (commit)
-> Idle; a commit either yields a patch or reports why it was rejected.
"""
from __future__ import annotations
import logging
import uuid
from typing import Optional

import numpy as np

from roitracker.core.entities import (PointerEvent, PointerKind, Rect, ReferencePatch,
                                      SelectionOutcome, SelectionState, SelectionStatus)
from roitracker.core.features import FeatureExtractor
from roitracker.core.geometry import clamp_point, frame_rect

logger = logging.getLogger(__name__)


class SelectionStateMachine:
    def __init__(self, extractor: FeatureExtractor, min_size: int = 10, min_keypoints: int = 4):
        self.extractor = extractor
        self.min_size = min_size
        self.min_keypoints = min_keypoints
        self.state = SelectionState()
        self._frame: Optional[np.ndarray] = None

    @classmethod
    def from_config(cls, cfg, extractor: FeatureExtractor) -> SelectionStateMachine:
        return cls(extractor, min_size=cfg.min_selection_size,
                   min_keypoints=cfg.min_patch_keypoints)

    @property
    def dragging(self) -> bool:
        return self.state.dragging

    def bind_frame(self, frame: np.ndarray) -> None:
        """Set the frame that bounds pointer input and is cropped on commit."""
        self._frame = frame

    def _bounds(self) -> Optional[Rect]:
        return frame_rect(self._frame) if self._frame is not None else None

    def on_pointer_down(self, x: int, y: int) -> SelectionOutcome:
        bounds = self._bounds()
        if bounds is None or not bounds.contains(x, y):
            return SelectionOutcome(SelectionStatus.IGNORED)
        x, y = clamp_point(x, y, bounds.width, bounds.height)
        self.state.dragging = True
        self.state.rect = Rect(x, y, 0, 0)
        return SelectionOutcome(SelectionStatus.IGNORED, rect=self.state.rect.copy())

    def on_pointer_move(self, x: int, y: int) -> SelectionOutcome:
        bounds = self._bounds()
        if not self.state.dragging or bounds is None:
            return SelectionOutcome(SelectionStatus.IGNORED)
        x, y = clamp_point(x, y, bounds.width, bounds.height, edge=True)
        rect = self.state.rect
        rect.width = x - rect.x
        rect.height = y - rect.y
        return SelectionOutcome(SelectionStatus.IGNORED, rect=rect.copy())

    def on_pointer_up(self, x: int, y: int) -> SelectionOutcome:
        if not self.state.dragging:
            return SelectionOutcome(SelectionStatus.IGNORED)
        self.on_pointer_move(x, y)
        self.state.dragging = False
        rect = self.state.rect.normalized()
        self.state.rect = rect
        return self.commit(rect)

    def dispatch(self, event: PointerEvent) -> SelectionOutcome:
        if event.kind is PointerKind.DOWN:
            return self.on_pointer_down(event.x, event.y)
        if event.kind is PointerKind.MOVE:
            return self.on_pointer_move(event.x, event.y)
        return self.on_pointer_up(event.x, event.y)

    def commit(self, rect: Rect) -> SelectionOutcome:
        """Validate a finished rectangle and build its ReferencePatch."""
        rect = rect.normalized()
        if rect.width < self.min_size or rect.height < self.min_size:
            logger.info("selection %dx%d rejected: below %dpx", rect.width, rect.height, self.min_size)
            return SelectionOutcome(SelectionStatus.TOO_SMALL, rect=rect)

        bounds = self._bounds()
        if bounds is None:
            return SelectionOutcome(SelectionStatus.IGNORED, rect=rect)
        rect = rect.intersect(bounds)
        if rect.width < self.min_size or rect.height < self.min_size:
            return SelectionOutcome(SelectionStatus.TOO_SMALL, rect=rect)

        crop = self._frame[rect.y:rect.y + rect.height, rect.x:rect.x + rect.width].copy()
        features = self.extractor.extract(crop)
        if len(features) < self.min_keypoints:
            logger.info("selection %s rejected: %d keypoints (need %d)",
                        rect, len(features), self.min_keypoints)
            return SelectionOutcome(SelectionStatus.INSUFFICIENT_FEATURES, rect=rect)

        patch = ReferencePatch(image=crop, rect=rect, features=features,
                               target_id=uuid.uuid4().hex[:8])
        logger.info("selection committed at %s with %d keypoints", rect, len(features))
        return SelectionOutcome(SelectionStatus.COMMITTED, rect=rect, patch=patch)
