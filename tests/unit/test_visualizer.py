"""
Tests for skeleton drawing and the debug display windows.
"""
import numpy as np
import pytest

from core.models.body_parts import COCO_PART_CONNECTIONS
from skeleton_tracking.visualizer import FrameDisplayer, draw_pose
from skeleton_tracking.visualizer import frame_displayer


def arm_keypoints(score=0.9):
    keypoints = np.zeros((1, 18, 3), dtype=np.float32)
    keypoints[0, 1] = (10, 20, score)   # Neck
    keypoints[0, 2] = (50, 20, score)   # RShoulder
    return keypoints


def test_draws_limbs_at_full_alpha():
    frame = np.zeros((60, 80, 3), dtype=np.uint8)
    draw_pose(frame, arm_keypoints(), COCO_PART_CONNECTIONS, alpha=1.0)
    assert frame[20, 30, 2] > 200
    assert frame[20, 30, 0] == 0


def test_scale_maps_to_output_coordinates():
    frame = np.zeros((60, 120, 3), dtype=np.uint8)
    draw_pose(frame, arm_keypoints(), COCO_PART_CONNECTIONS, scale=2.0, alpha=1.0)
    assert frame[40, 60].max() > 0
    assert frame[20, 30].max() == 0


def test_zero_alpha_leaves_frame_unchanged():
    frame = np.full((60, 80, 3), 40, dtype=np.uint8)
    draw_pose(frame, arm_keypoints(), COCO_PART_CONNECTIONS, alpha=0.0)
    assert np.all(frame == 40)


def test_partial_alpha_blends():
    frame = np.zeros((60, 80, 3), dtype=np.uint8)
    draw_pose(frame, arm_keypoints(), COCO_PART_CONNECTIONS, alpha=0.5)
    assert 90 <= frame[20, 30, 2] <= 130


def test_undetected_parts_are_skipped():
    frame = np.zeros((60, 80, 3), dtype=np.uint8)
    draw_pose(frame, arm_keypoints(score=0.0), COCO_PART_CONNECTIONS, alpha=1.0)
    assert frame.max() == 0


def test_rejects_non_array_frame():
    with pytest.raises(ValueError):
        draw_pose([[0]], arm_keypoints(), COCO_PART_CONNECTIONS)


class FakeHighGui:
    """Records highgui calls in place of the real OpenCV window functions."""

    WINDOW_NORMAL = 0
    error = RuntimeError

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        def record(*args):
            self.calls.append((name,) + args[:1])
            return -1
        return record


@pytest.fixture
def highgui(monkeypatch):
    fake = FakeHighGui()
    monkeypatch.setattr(frame_displayer, 'cv', fake)
    return fake


def test_displayer_lifecycle(highgui):
    displayer = FrameDisplayer(output_size=(64, 48))
    frame = np.zeros((48, 64, 4), dtype=np.uint8)

    with pytest.raises(RuntimeError):
        displayer.show(frame, frame)

    displayer.open()
    assert displayer.show(frame, frame[:, :, :3]) == -1
    displayer.close()
    displayer.close()

    names = [call[0] for call in highgui.calls]
    assert names[:2] == ['namedWindow', 'namedWindow']
    assert ('imshow', 'view') in highgui.calls
    assert ('imshow', 'skeleton') in highgui.calls
    assert ('waitKey', 30) in highgui.calls
    assert names.count('destroyWindow') == 2
