"""Per-frame re-acquisition of the selected object.

The session is either without a target or tracking one ReferencePatch. Each
frame runs extract -> match (patch descriptors as query) -> homography. Two
guards drop the target: too many consecutive frames without a fit, and a
quad that stays within a small tolerance of one anchor position for too many
consecutive frames (a matcher locked on a static false positive).
"""
from __future__ import annotations
import logging
from enum import Enum
from typing import Optional

import numpy as np

from roitracker.core.entities import Quad, ReferencePatch, TrackState, TrackStatus, TrackUpdate
from roitracker.core.features import FeatureExtractor
from roitracker.core.geometry import max_corner_displacement
from roitracker.core.homography import GeometryEstimator
from roitracker.core.logging_config import clear_target_id, set_target_id
from roitracker.core.matching import Matcher

logger = logging.getLogger(__name__)


class SessionMode(str, Enum):
    NO_TARGET = "no_target"
    TRACKING = "tracking"


class TrackingSession:
    def __init__(self, extractor: FeatureExtractor, matcher: Matcher, estimator: GeometryEstimator,
                 stale_frame_limit: int = 90, stale_tolerance_px: float = 0.5,
                 miss_limit: int = 30):
        self.extractor = extractor
        self.matcher = matcher
        self.estimator = estimator
        self.stale_frame_limit = stale_frame_limit
        self.stale_tolerance_px = stale_tolerance_px
        self.miss_limit = miss_limit

        self.mode = SessionMode.NO_TARGET
        self.state = TrackState()
        self.patch: Optional[ReferencePatch] = None
        self.miss_streak = 0
        self.stale_streak = 0
        # quad the current stale streak is measured against
        self._stale_anchor: Optional[Quad] = None

    @classmethod
    def from_config(cls, cfg, extractor: Optional[FeatureExtractor] = None) -> TrackingSession:
        return cls(extractor or FeatureExtractor.from_config(cfg),
                   Matcher.from_config(cfg),
                   GeometryEstimator.from_config(cfg),
                   stale_frame_limit=cfg.stale_track_frame_limit,
                   stale_tolerance_px=cfg.stale_tolerance_px,
                   miss_limit=cfg.consecutive_miss_limit)

    @property
    def tracking(self) -> bool:
        return self.mode is SessionMode.TRACKING

    def on_selection_committed(self, patch: ReferencePatch) -> None:
        """Start tracking ``patch``, replacing any current target."""
        if self.patch is not None:
            logger.info("target %s replaced by new selection", self.patch.target_id)
        self.patch = patch
        self.mode = SessionMode.TRACKING
        self.state = TrackState(TrackStatus.LOST)
        self.miss_streak = 0
        self.stale_streak = 0
        self._stale_anchor = None
        set_target_id(patch.target_id)
        logger.info("tracking target at %s (%d keypoints)", patch.rect, len(patch.features))

    def note_selecting(self, dragging: bool) -> None:
        """Reflect an in-progress drag in the state while no target is held."""
        if self.mode is SessionMode.NO_TARGET:
            self.state = TrackState(TrackStatus.SELECTING if dragging else TrackStatus.IDLE)

    def reset(self) -> None:
        if self.patch is not None:
            logger.info("target cleared")
        self._drop()
        self.state = TrackState()

    def on_frame(self, frame: np.ndarray) -> TrackUpdate:
        if self.mode is SessionMode.NO_TARGET or self.patch is None:
            return TrackUpdate(state=self.state)

        scene = self.extractor.extract(frame)
        reference = self.patch.features
        good = self.matcher.match(reference, scene)
        estimate = self.estimator.estimate(good, reference, scene, self.patch.corners)

        if not estimate.located:
            return self._on_miss(len(good))

        self.miss_streak = 0
        anchor = self._stale_anchor
        if anchor is not None and max_corner_displacement(anchor, estimate.quad) <= self.stale_tolerance_px:
            self.stale_streak += 1
        else:
            self._stale_anchor = estimate.quad
            self.stale_streak = 0
        self.state = TrackState(TrackStatus.LOCATED, estimate.quad)

        if self.stale_frame_limit > 0 and self.stale_streak >= self.stale_frame_limit:
            logger.info("target static for %d frames, dropping", self.stale_streak)
            self._drop()
            self.state = TrackState(TrackStatus.LOST)
            return TrackUpdate(state=self.state, match_count=len(good),
                               inlier_count=estimate.inlier_count, dropped_reason='stale')

        return TrackUpdate(state=self.state, match_count=len(good),
                           inlier_count=estimate.inlier_count)

    def _on_miss(self, match_count: int) -> TrackUpdate:
        self.miss_streak += 1
        self.stale_streak = 0
        self._stale_anchor = None
        # last known position stays available to consumers while lost
        self.state = TrackState(TrackStatus.LOST, self.state.quad)
        logger.debug("object not found (%d matches, miss %d)", match_count, self.miss_streak)
        if self.miss_limit > 0 and self.miss_streak >= self.miss_limit:
            logger.info("target missed %d consecutive frames, dropping", self.miss_streak)
            self._drop()
            self.state = TrackState(TrackStatus.LOST)
            return TrackUpdate(state=self.state, match_count=match_count, dropped_reason='missed')
        return TrackUpdate(state=self.state, match_count=match_count)

    def _drop(self) -> None:
        self.patch = None
        self.mode = SessionMode.NO_TARGET
        self.miss_streak = 0
        self.stale_streak = 0
        self._stale_anchor = None
        clear_target_id()
