"""Test doubles and synthetic image builders shared by the test suite."""
from typing import List

import cv2
import numpy as np

from roitracker.core.entities import DescriptorSet, Keypoint, Point2D


def make_textured_frame(width: int = 640, height: int = 480, seed: int = 7) -> np.ndarray:
    """Deterministic BGR frame full of high-contrast shapes (plenty of SIFT keypoints)."""
    rng = np.random.default_rng(seed)
    image = np.full((height, width, 3), 90, dtype=np.uint8)
    for _ in range(260):
        color = tuple(int(c) for c in rng.integers(0, 256, size=3))
        x, y = int(rng.integers(0, width)), int(rng.integers(0, height))
        if rng.random() < 0.5:
            w, h = int(rng.integers(6, 40)), int(rng.integers(6, 40))
            cv2.rectangle(image, (x, y), (x + w, y + h), color, -1)
        else:
            cv2.circle(image, (x, y), int(rng.integers(3, 20)), color, -1)
    return image


def make_descriptor_set(points, descriptors) -> DescriptorSet:
    kps = tuple(Keypoint(Point2D(float(x), float(y)), 4.0, 0.0) for x, y in points)
    if not kps:
        return DescriptorSet.empty(8)
    return DescriptorSet(kps, np.asarray(descriptors, dtype=np.float32).reshape(len(kps), -1))


class ScriptedExtractor:
    """Stands in for FeatureExtractor: returns queued DescriptorSets in order."""

    def __init__(self, results: List[DescriptorSet] = None, default: DescriptorSet = None):
        self.results = list(results or [])
        self.default = default if default is not None else DescriptorSet.empty(8)
        self.calls = 0

    def extract(self, image):
        self.calls += 1
        if self.results:
            return self.results.pop(0)
        return self.default


class ListFrameSource:
    def __init__(self, frames):
        self.frames = list(frames)
        self.reads = 0

    def next_frame(self):
        if not self.frames:
            return None
        self.reads += 1
        return self.frames.pop(0)


class RecordingRenderer:
    """Records presented frames and patches; replays scripted key codes (-1 when exhausted)."""

    def __init__(self, keys=None):
        self.keys = list(keys or [])
        self.presented = []
        self.patches = []
        self.pointer_handler = None

    def attach_pointer_handler(self, handler):
        self.pointer_handler = handler

    def present(self, image):
        self.presented.append(image)
        return self.keys.pop(0) if self.keys else -1

    def show_patch(self, image):
        self.patches.append(image)

    def close(self):
        pass
