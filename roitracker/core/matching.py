"""Descriptor matching: nearest neighbour + relative distance filter."""
from __future__ import annotations
import logging
from typing import List, Sequence

import cv2

from roitracker.core.entities import Correspondence, DescriptorSet

logger = logging.getLogger(__name__)


class Matcher:
    """Brute-force L2 matcher.

    Every query descriptor gets exactly one candidate (its nearest train
    descriptor). Candidates are then kept only if their distance is below
    ``multiplier * min_distance``; ``epsilon`` lower-bounds min_distance so an
    exact match does not collapse the threshold to zero.
    """

    def __init__(self, multiplier: float = 3.0, epsilon: float = 10.0):
        if multiplier <= 0:
            raise ValueError("multiplier must be positive")
        self.multiplier = multiplier
        self.epsilon = epsilon
        self._bf = cv2.BFMatcher(cv2.NORM_L2, crossCheck=False)

    @classmethod
    def from_config(cls, cfg) -> Matcher:
        return cls(multiplier=cfg.match_distance_multiplier, epsilon=cfg.min_distance_epsilon)

    def nearest(self, query: DescriptorSet, train: DescriptorSet) -> List[Correspondence]:
        if query.is_empty or train.is_empty:
            return []
        raw = self._bf.match(query.descriptors, train.descriptors)
        return [Correspondence(m.queryIdx, m.trainIdx, float(m.distance)) for m in raw]

    def filter(self, correspondences: Sequence[Correspondence]) -> List[Correspondence]:
        if not correspondences:
            return []
        min_dist = max(min(c.distance for c in correspondences), self.epsilon)
        limit = self.multiplier * min_dist
        return [c for c in correspondences if c.distance < limit]

    def match(self, query: DescriptorSet, train: DescriptorSet) -> List[Correspondence]:
        candidates = self.nearest(query, train)
        good = self.filter(candidates)
        logger.debug("matched %d/%d candidates", len(good), len(candidates))
        return good
