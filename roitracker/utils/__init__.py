"""Utility helpers."""

from .image_utils import Preprocessor, reduce_noise, equalize_contrast, overlay_edges

__all__ = ["Preprocessor", "reduce_noise", "equalize_contrast", "overlay_edges"]
