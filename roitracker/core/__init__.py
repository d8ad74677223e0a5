"""Core domain entities and tracking algorithms."""

from .entities import (Point2D, Rect, Keypoint, DescriptorSet, Correspondence, Quad,
                       ReferencePatch, TrackStatus, TrackState, TrackUpdate, SelectionState,
                       SelectionStatus, SelectionOutcome, PointerKind, PointerEvent, PipelineState)
from .exceptions import ApplicationError, ConfigError, FrameSourceError
from .features import FeatureExtractor
from .matching import Matcher
from .homography import GeometryEstimator, Estimate
from .selection import SelectionStateMachine
from .tracking import TrackingSession, SessionMode

__all__ = [
    "Point2D", "Rect", "Keypoint", "DescriptorSet", "Correspondence", "Quad",
    "ReferencePatch", "TrackStatus", "TrackState", "TrackUpdate", "SelectionState",
    "SelectionStatus", "SelectionOutcome", "PointerKind", "PointerEvent", "PipelineState",
    "ApplicationError", "ConfigError", "FrameSourceError",
    "FeatureExtractor", "Matcher", "GeometryEstimator", "Estimate",
    "SelectionStateMachine", "TrackingSession", "SessionMode",
]
