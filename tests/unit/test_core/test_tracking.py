"""Unit tests for TrackingSession lifetime rules."""
import numpy as np

from roitracker.core.entities import DescriptorSet, Rect, ReferencePatch, TrackStatus
from roitracker.core.homography import GeometryEstimator
from roitracker.core.logging_config import get_target_id
from roitracker.core.matching import Matcher
from roitracker.core.tracking import SessionMode, TrackingSession
from tests.helpers import ScriptedExtractor, make_descriptor_set

REF_POINTS = [(5, 5), (70, 8), (40, 30), (10, 55), (75, 50), (30, 12)]
DESCRIPTORS = np.eye(len(REF_POINTS), 8, dtype=np.float32) * 100


def _patch(target_id="a"):
    features = make_descriptor_set(REF_POINTS, DESCRIPTORS)
    return ReferencePatch(image=np.zeros((60, 80, 3), np.uint8), rect=Rect(0, 0, 80, 60),
                          features=features, target_id=target_id)


def _scene(dx=0.0, dy=0.0):
    return make_descriptor_set([(x + dx, y + dy) for x, y in REF_POINTS], DESCRIPTORS)


def _partial_scene(n):
    """Only the first n reference descriptors appear in the scene."""
    return make_descriptor_set(REF_POINTS[:n], DESCRIPTORS[:n])


def _session(extractor, **kwargs):
    params = dict(stale_frame_limit=5, stale_tolerance_px=0.5, miss_limit=3)
    params.update(kwargs)
    return TrackingSession(extractor, Matcher(multiplier=3.0, epsilon=1.0), GeometryEstimator(), **params)


FRAME = np.zeros((10, 10, 3), np.uint8)


class TestTrackingSession:

    def test_no_target_does_not_process_frames(self):
        extractor = ScriptedExtractor()
        session = _session(extractor)

        update = session.on_frame(FRAME)

        assert update.state.status is TrackStatus.IDLE
        assert extractor.calls == 0

    def test_commit_starts_tracking(self):
        session = _session(ScriptedExtractor())
        session.on_selection_committed(_patch("abc"))

        assert session.mode is SessionMode.TRACKING
        assert session.tracking
        assert get_target_id() == "abc"

    def test_located_quad_follows_translation(self):
        session = _session(ScriptedExtractor([_scene(30, 20)]))
        session.on_selection_committed(_patch())

        update = session.on_frame(FRAME)

        assert update.located
        assert update.match_count == len(REF_POINTS)
        np.testing.assert_allclose(update.state.quad.corners[0].as_tuple(), (30, 20), atol=0.5)
        np.testing.assert_allclose(update.state.quad.corners[2].as_tuple(), (110, 80), atol=0.5)

    def test_consecutive_misses_drop_target(self):
        """No overlap with the reference for miss_limit frames ends tracking."""
        session = _session(ScriptedExtractor(default=DescriptorSet.empty(8)), miss_limit=3)
        session.on_selection_committed(_patch())

        updates = [session.on_frame(FRAME) for _ in range(3)]

        assert [u.state.status for u in updates] == [TrackStatus.LOST] * 3
        assert [u.dropped_reason for u in updates] == [None, None, 'missed']
        assert session.mode is SessionMode.NO_TARGET
        assert session.patch is None
        assert get_target_id() is None

    def test_too_few_good_matches_count_as_miss(self):
        session = _session(ScriptedExtractor(default=_partial_scene(3)), miss_limit=2)
        session.on_selection_committed(_patch())

        first = session.on_frame(FRAME)
        second = session.on_frame(FRAME)

        assert first.match_count == 3
        assert not first.located
        assert second.dropped_reason == 'missed'

    def test_success_resets_miss_streak(self):
        empty = DescriptorSet.empty(8)
        extractor = ScriptedExtractor([empty, empty, _scene(1, 0), empty, empty])
        session = _session(extractor, miss_limit=3)
        session.on_selection_committed(_patch())

        updates = [session.on_frame(FRAME) for _ in range(5)]

        assert updates[2].located
        assert all(u.dropped_reason is None for u in updates)
        assert session.tracking
        assert session.miss_streak == 2

    def test_static_quad_is_dropped_as_stale(self):
        """An unchanging located quad for stale_frame_limit frames ends tracking."""
        session = _session(ScriptedExtractor(default=_scene(10, 10)), stale_frame_limit=4)
        session.on_selection_committed(_patch())

        first = session.on_frame(FRAME)
        later = [session.on_frame(FRAME) for _ in range(4)]

        assert first.located
        assert [u.dropped_reason for u in later] == [None, None, None, 'stale']
        assert later[-1].state.status is TrackStatus.LOST
        assert session.mode is SessionMode.NO_TARGET

    def test_moving_object_is_never_stale(self):
        scenes = [_scene(i * 3.0, 0) for i in range(12)]
        session = _session(ScriptedExtractor(scenes), stale_frame_limit=2)
        session.on_selection_committed(_patch())

        updates = [session.on_frame(FRAME) for _ in range(12)]

        assert all(u.located for u in updates)
        assert session.tracking

    def test_slow_drift_is_never_stale(self):
        """Sub-tolerance steps still add up to real motion."""
        scenes = [_scene(i * 0.45, 0) for i in range(30)]
        session = _session(ScriptedExtractor(scenes), stale_frame_limit=10, stale_tolerance_px=0.5)
        session.on_selection_committed(_patch())

        updates = [session.on_frame(FRAME) for _ in range(30)]

        assert all(u.dropped_reason is None for u in updates)
        assert all(u.located for u in updates)
        assert session.tracking

    def test_jitter_within_tolerance_goes_stale(self):
        scenes = [_scene(0.2 * (i % 2), 0) for i in range(5)]
        session = _session(ScriptedExtractor(scenes), stale_frame_limit=4, stale_tolerance_px=0.5)
        session.on_selection_committed(_patch())

        updates = [session.on_frame(FRAME) for _ in range(5)]

        assert updates[-1].dropped_reason == 'stale'
        assert session.mode is SessionMode.NO_TARGET

    def test_stale_guard_disabled_with_zero_limit(self):
        session = _session(ScriptedExtractor(default=_scene()), stale_frame_limit=0)
        session.on_selection_committed(_patch())

        updates = [session.on_frame(FRAME) for _ in range(20)]

        assert all(u.located for u in updates)
        assert session.tracking

    def test_new_selection_preempts_current_target(self):
        empty = DescriptorSet.empty(8)
        session = _session(ScriptedExtractor(default=empty), miss_limit=3)
        session.on_selection_committed(_patch("first"))
        session.on_frame(FRAME)
        session.on_frame(FRAME)

        replacement = _patch("second")
        session.on_selection_committed(replacement)

        assert session.patch is replacement
        assert session.miss_streak == 0
        assert session.state.status is TrackStatus.LOST
        assert session.state.quad is None
        assert get_target_id() == "second"
        # the counter restarted, so two more misses do not drop it
        session.on_frame(FRAME)
        session.on_frame(FRAME)
        assert session.tracking

    def test_note_selecting_only_without_target(self):
        session = _session(ScriptedExtractor())
        session.note_selecting(True)
        assert session.state.status is TrackStatus.SELECTING
        session.note_selecting(False)
        assert session.state.status is TrackStatus.IDLE

        session.on_selection_committed(_patch())
        session.note_selecting(True)
        assert session.state.status is TrackStatus.LOST

    def test_reset_clears_target(self):
        session = _session(ScriptedExtractor())
        session.on_selection_committed(_patch())
        session.reset()
        assert session.mode is SessionMode.NO_TARGET
        assert session.patch is None
        assert session.state.status is TrackStatus.IDLE

    def test_from_config(self, config):
        config.consecutive_miss_limit = 7
        config.stale_track_frame_limit = 11
        session = TrackingSession.from_config(config)
        assert session.miss_limit == 7
        assert session.stale_frame_limit == 11


class TestTrackingWithRealFeatures:

    def test_same_frame_locates_selection(self, extractor, textured_frame, reference_patch):
        session = TrackingSession(extractor, Matcher(), GeometryEstimator())
        session.on_selection_committed(reference_patch)

        update = session.on_frame(textured_frame)

        assert update.located
        expected = np.float32([[192, 128], [384, 128], [384, 288], [192, 288]])
        np.testing.assert_allclose(update.state.quad.as_array(), expected, atol=2.0)

    def test_static_frame_goes_stale(self, extractor, textured_frame, reference_patch):
        session = TrackingSession(extractor, Matcher(), GeometryEstimator(),
                                  stale_frame_limit=3, miss_limit=30)
        session.on_selection_committed(reference_patch)

        assert session.on_frame(textured_frame).located
        updates = [session.on_frame(textured_frame) for _ in range(3)]

        assert updates[-1].dropped_reason == 'stale'
        assert session.mode is SessionMode.NO_TARGET

    def test_featureless_frames_drop_target(self, extractor, blank_frame, reference_patch):
        session = TrackingSession(extractor, Matcher(), GeometryEstimator(), miss_limit=4)
        session.on_selection_committed(reference_patch)

        updates = [session.on_frame(blank_frame) for _ in range(4)]

        assert all(u.match_count == 0 for u in updates)
        assert updates[-1].dropped_reason == 'missed'
        assert session.mode is SessionMode.NO_TARGET
