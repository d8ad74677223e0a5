"""Frame source backed by cv2.VideoCapture (camera index or video file)."""

import cv2
import logging
from typing import Optional, Tuple, Union
import numpy as np

from roitracker.core.exceptions import FrameSourceError

logger = logging.getLogger(__name__)


class FrameSource:
    """Synchronous frame supplier: one ``next_frame()`` call per loop iteration."""

    def __init__(self, source: Union[str, int] = 0, width: Optional[int] = None,
                 height: Optional[int] = None, max_read_failures: int = 5):
        """Initialize frame source.

        Args:
            source: Camera index (int or digit string) or path to a video file
            width: Requested frame width (cameras only)
            height: Requested frame height (cameras only)
            max_read_failures: Consecutive failed camera reads treated as end-of-stream
        """
        self.source = int(source) if isinstance(source, str) and source.isdigit() else source
        self.width = width
        self.height = height
        self.max_read_failures = max_read_failures
        self._capture: Optional[cv2.VideoCapture] = None
        self._failures = 0

    @classmethod
    def from_config(cls, cfg) -> "FrameSource":
        return cls(cfg.source, width=cfg.camera_width, height=cfg.camera_height)

    @property
    def is_camera(self) -> bool:
        return isinstance(self.source, int)

    def open(self) -> None:
        """Open the device or file.

        Raises:
            FrameSourceError: If it cannot be opened
        """
        self.close()
        self._capture = cv2.VideoCapture(self.source)
        if not self._capture.isOpened():
            self._capture.release()
            self._capture = None
            raise FrameSourceError(f"Failed to open frame source {self.source!r}")

        if self.is_camera:
            if self.width:
                self._capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            if self.height:
                self._capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._failures = 0
        w, h = self.get_resolution()
        logger.info(f"Frame source opened: {self.source!r} ({w}x{h})")

    def next_frame(self) -> Optional[np.ndarray]:
        """Return the next frame, or None at end-of-stream."""
        if self._capture is None:
            return None
        while True:
            ok, frame = self._capture.read()
            if ok and frame is not None:
                self._failures = 0
                return frame
            if not self.is_camera:
                logger.info("End of video file reached")
                return None
            self._failures += 1
            if self._failures >= self.max_read_failures:
                logger.warning(f"Camera returned no frame {self._failures} times, stopping")
                return None

    def get_resolution(self) -> Tuple[int, int]:
        if self._capture is not None and self._capture.isOpened():
            return (int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH)),
                    int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT)))
        return (0, 0)

    def close(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None

    def __enter__(self) -> "FrameSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
