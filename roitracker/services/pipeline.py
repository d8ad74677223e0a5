"""Frame loop orchestration: capture, selection, tracking, overlays, present."""
from __future__ import annotations
import logging
import time
from typing import Callable, List, Optional

from roitracker.core.entities import (PipelineState, PointerEvent, SelectionOutcome,
                                      SelectionStatus, TrackStatus, TrackUpdate)
from roitracker.core.overlay import draw_quad, draw_selection, draw_status
from roitracker.core.selection import SelectionStateMachine
from roitracker.core.tracking import TrackingSession
from roitracker.utils.image_utils import Preprocessor

logger = logging.getLogger(__name__)

ESCAPE = 27
QUIT_KEYS = {ESCAPE, ord('q')}
TOGGLE_KEYS = {ord('n'): 'denoise', ord('c'): 'equalize_contrast', ord('e'): 'edge_overlay'}
RESET_KEY = ord('r')


class TrackingPipeline:
    """Single-threaded loop; one frame is fully processed before the next is read.

    Pointer events are applied as they arrive (between iterations), and quit
    is only honoured at a frame boundary.
    """

    def __init__(self, frame_source, renderer, selection: SelectionStateMachine,
                 session: TrackingSession, preprocessor: Optional[Preprocessor] = None,
                 show_reference: bool = False):
        self.frame_source = frame_source
        self.renderer = renderer
        self.selection = selection
        self.session = session
        self.preprocessor = preprocessor or Preprocessor()
        self.show_reference = show_reference
        self._listeners: List[Callable[[PipelineState], None]] = []
        self._messages: List[str] = []
        self._running = False
        self.frames_processed = 0

    @property
    def running(self) -> bool:
        return self._running

    def add_listener(self, cb: Callable[[PipelineState], None]) -> None:
        self._listeners.append(cb)

    def handle_pointer(self, event: PointerEvent) -> SelectionOutcome:
        outcome = self.selection.dispatch(event)
        if outcome.committed:
            self.session.on_selection_committed(outcome.patch)
            if self.show_reference:
                self.renderer.show_patch(outcome.patch.image)
        elif outcome.status in (SelectionStatus.TOO_SMALL, SelectionStatus.INSUFFICIENT_FEATURES):
            self._messages.append(outcome.message)
        return outcome

    def handle_key(self, key: int) -> None:
        if key < 0:
            return
        key &= 0xFF
        if key in QUIT_KEYS:
            logger.info("quit requested")
            self.stop()
        elif key in TOGGLE_KEYS:
            self.preprocessor.toggle(TOGGLE_KEYS[key])
        elif key == RESET_KEY:
            self.session.reset()

    def step(self) -> Optional[PipelineState]:
        """Process one frame. Returns None when the source is exhausted."""
        start = time.time()
        raw = self.frame_source.next_frame()
        if raw is None:
            return None

        frame = self.preprocessor.prepare(raw)
        self.selection.bind_frame(frame)
        self.session.note_selecting(self.selection.dragging)
        update: TrackUpdate = self.session.on_frame(frame)

        canvas = self.preprocessor.decorate(frame)
        if update.state.status is TrackStatus.LOCATED:
            draw_quad(canvas, update.state.quad)
        if self.selection.dragging:
            draw_selection(canvas, self.selection.state.rect)
        draw_status(canvas, update.state, update.match_count)
        if update.dropped_reason:
            self._messages.append(f"target dropped ({update.dropped_reason})")

        latency_ms = int((time.time() - start) * 1000)
        fps = 1000.0 / latency_ms if latency_ms > 0 else 0.0
        state = PipelineState(frame=canvas, track=update.state,
                              selection=self.selection.state.snapshot(),
                              match_count=update.match_count, latency_ms=latency_ms, fps=fps,
                              messages=self._messages)
        self._messages = []
        self.frames_processed += 1

        for cb in self._listeners:
            try:
                cb(state)
            except Exception:
                logger.exception("pipeline listener failed")
        return state

    def run(self) -> int:
        """Run until end-of-stream or quit. Returns the number of frames processed."""
        self._running = True
        self.renderer.attach_pointer_handler(self.handle_pointer)
        try:
            while self._running:
                state = self.step()
                if state is None:
                    logger.info("frame source exhausted")
                    break
                self.handle_key(self.renderer.present(state.frame))
        finally:
            self._running = False
        return self.frames_processed

    def stop(self) -> None:
        self._running = False
