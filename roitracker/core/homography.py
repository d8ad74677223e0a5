"""Robust perspective-transform estimation between patch and scene."""
from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Optional, Sequence

import cv2
import numpy as np

from roitracker.core.entities import Correspondence, DescriptorSet, Quad
from roitracker.core.geometry import project_corners

logger = logging.getLogger(__name__)

# a homography has 8 degrees of freedom: 4 point pairs
MIN_CORRESPONDENCES = 4


@dataclass(slots=True)
class Estimate:
    quad: Optional[Quad] = None
    homography: Optional[np.ndarray] = None
    inlier_count: int = 0
    correspondence_count: int = 0

    @property
    def located(self) -> bool:
        return self.quad is not None


class GeometryEstimator:
    def __init__(self, min_correspondences: int = MIN_CORRESPONDENCES,
                 reproj_threshold: float = 5.0):
        self.min_correspondences = max(MIN_CORRESPONDENCES, min_correspondences)
        self.reproj_threshold = reproj_threshold

    @classmethod
    def from_config(cls, cfg) -> GeometryEstimator:
        return cls(min_correspondences=cfg.min_correspondences,
                   reproj_threshold=cfg.ransac_reproj_threshold)

    def estimate(self, correspondences: Sequence[Correspondence], reference: DescriptorSet,
                 scene: DescriptorSet, reference_corners: Quad) -> Estimate:
        """Fit reference->scene homography and project the reference corners.

        ``query_index`` indexes ``reference``; ``train_index`` indexes ``scene``.
        Ill-conditioned fits are returned as computed.
        """
        n = len(correspondences)
        if n < self.min_correspondences:
            return Estimate(correspondence_count=n)

        src = np.float32([reference.keypoints[c.query_index].location.as_tuple()
                          for c in correspondences]).reshape(-1, 1, 2)
        dst = np.float32([scene.keypoints[c.train_index].location.as_tuple()
                          for c in correspondences]).reshape(-1, 1, 2)
        try:
            H, mask = cv2.findHomography(src, dst, cv2.RANSAC, self.reproj_threshold)
        except cv2.error as e:
            logger.debug("findHomography failed on %d points: %s", n, e)
            return Estimate(correspondence_count=n)
        if H is None:
            return Estimate(correspondence_count=n)

        inliers = int(mask.sum()) if mask is not None else 0
        return Estimate(quad=project_corners(H, reference_corners), homography=H,
                        inlier_count=inliers, correspondence_count=n)
