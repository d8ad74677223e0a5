"""Frame I/O collaborators and the frame loop."""

from .frame_source import FrameSource
from .display import OpenCVDisplay
from .pipeline import TrackingPipeline

__all__ = ["FrameSource", "OpenCVDisplay", "TrackingPipeline"]
