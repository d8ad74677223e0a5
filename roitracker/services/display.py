"""OpenCV HighGUI window: presents frames and forwards mouse/keyboard input."""

import cv2
import logging
from typing import Callable, Optional
import numpy as np

from roitracker.core.entities import PointerEvent, PointerKind

logger = logging.getLogger(__name__)

_EVENT_KINDS = {
    cv2.EVENT_LBUTTONDOWN: PointerKind.DOWN,
    cv2.EVENT_MOUSEMOVE: PointerKind.MOVE,
    cv2.EVENT_LBUTTONUP: PointerKind.UP,
}


def to_pointer_event(event: int, x: int, y: int) -> Optional[PointerEvent]:
    kind = _EVENT_KINDS.get(event)
    return PointerEvent(kind, x, y) if kind is not None else None


class OpenCVDisplay:
    """Renderer and pointer input backed by one named window.

    The tracked reference patch can be shown in a second window.

    Mouse callbacks fire inside ``cv2.waitKey``, i.e. between frame
    iterations on the loop thread.
    """

    def __init__(self, window_name: str = "roitracker", delay_ms: int = 10):
        self.window_name = window_name
        self.reference_window_name = f"{window_name} - reference"
        self.delay_ms = delay_ms
        self._open = False
        self._reference_open = False

    @classmethod
    def from_config(cls, cfg) -> "OpenCVDisplay":
        return cls(cfg.window_name, cfg.frame_delay_ms)

    def open(self) -> None:
        if not self._open:
            cv2.namedWindow(self.window_name, cv2.WINDOW_AUTOSIZE)
            self._open = True

    def attach_pointer_handler(self, handler: Callable[[PointerEvent], None]) -> None:
        self.open()

        def _on_mouse(event, x, y, flags, param):
            pointer = to_pointer_event(event, x, y)
            if pointer is not None:
                handler(pointer)

        cv2.setMouseCallback(self.window_name, _on_mouse)

    def present(self, image: np.ndarray) -> int:
        """Show ``image`` and pump window events. Returns the key pressed or -1."""
        self.open()
        cv2.imshow(self.window_name, image)
        return cv2.waitKey(self.delay_ms)

    def show_patch(self, image: np.ndarray) -> None:
        """Show the current reference patch in its own window."""
        if not self._reference_open:
            cv2.namedWindow(self.reference_window_name, cv2.WINDOW_AUTOSIZE)
            self._reference_open = True
        cv2.imshow(self.reference_window_name, image)

    def close(self) -> None:
        if self._reference_open:
            self._destroy(self.reference_window_name)
            self._reference_open = False
        if self._open:
            self._destroy(self.window_name)
            self._open = False

    @staticmethod
    def _destroy(name: str) -> None:
        try:
            cv2.destroyWindow(name)
        except cv2.error as e:
            logger.debug(f"Window {name!r} already gone: {e}")
