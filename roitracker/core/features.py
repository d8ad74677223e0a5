"""Keypoint detection and description.

SIFT keypoints with 128-float descriptors, matched under L2. Detection runs
on a grayscale copy of the input; identical input gives identical output.
"""
from __future__ import annotations
import logging
from typing import Optional

import cv2
import numpy as np

from roitracker.core.entities import DescriptorSet, Keypoint, Point2D

logger = logging.getLogger(__name__)

DESCRIPTOR_SIZE = 128
# below this intensity spread the image carries no usable structure
_FLAT_STDDEV = 1.0


class FeatureExtractor:
    def __init__(self, contrast_threshold: float = 0.04, edge_threshold: float = 10.0,
                 max_features: int = 0):
        self.contrast_threshold = contrast_threshold
        self.edge_threshold = edge_threshold
        self.max_features = max_features
        self._sift = cv2.SIFT_create(nfeatures=max_features,
                                     contrastThreshold=contrast_threshold,
                                     edgeThreshold=edge_threshold)

    @classmethod
    def from_config(cls, cfg) -> FeatureExtractor:
        return cls(contrast_threshold=cfg.feature_contrast_threshold,
                   edge_threshold=cfg.feature_edge_threshold,
                   max_features=cfg.max_features)

    def extract(self, image: Optional[np.ndarray]) -> DescriptorSet:
        """Detect keypoints and compute descriptors.

        Empty or near-uniform images produce an empty set instead of an error.
        """
        if image is None or image.size == 0:
            return DescriptorSet.empty(DESCRIPTOR_SIZE)
        gray = to_gray(image)
        if float(gray.std()) < _FLAT_STDDEV:
            return DescriptorSet.empty(DESCRIPTOR_SIZE)

        cv_kps, desc = self._sift.detectAndCompute(gray, None)
        if desc is None or not cv_kps:
            return DescriptorSet.empty(DESCRIPTOR_SIZE)

        keypoints = tuple(
            Keypoint(location=Point2D(float(kp.pt[0]), float(kp.pt[1])),
                     scale=float(kp.size), orientation=float(kp.angle))
            for kp in cv_kps)
        logger.debug("extracted %d keypoints from %dx%d image",
                     len(keypoints), gray.shape[1], gray.shape[0])
        return DescriptorSet(keypoints=keypoints, descriptors=np.asarray(desc, dtype=np.float32))


def to_gray(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        gray = image
    elif image.shape[2] == 4:
        gray = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    else:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if gray.dtype != np.uint8:
        gray = cv2.normalize(gray, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    return gray
