"""
Interactive region-of-interest selection and feature-based object re-acquisition.
"""

__version__ = "1.0.0"

from .config.settings import Config, load_config, save_config
from .core.entities import Rect, Quad, ReferencePatch, TrackState, TrackStatus, PipelineState

__all__ = [
    "Config", "load_config", "save_config",
    "Rect", "Quad", "ReferencePatch", "TrackState", "TrackStatus", "PipelineState"
]
