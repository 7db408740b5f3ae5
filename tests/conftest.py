"""
Shared fixtures: a recording fake pose engine and small resolved configurations.
"""
import threading

import numpy as np
import pytest

from core.config import resolve_config
from core.models.base_model import PoseEngine


class FakePoseEngine(PoseEngine):
    """Pose engine that records every call and returns fixed keypoints."""

    def __init__(self, config, fail_on=None):
        super().__init__(config)
        self.calls = []
        self.fail_on = fail_on
        self.initialized = False
        self.released = False
        self.init_thread = None
        self.call_threads = set()
        self.render_scale = None
        self.forward_input_size = None

    def _record(self, name):
        self.calls.append(name)
        self.call_threads.add(threading.get_ident())
        if name == self.fail_on:
            raise RuntimeError(f"{name} exploded")

    def initialization_on_thread(self):
        self.calls.append('initialization_on_thread')
        self.init_thread = threading.get_ident()
        self.initialized = True

    def format_input(self, frame):
        self._record('format_input')
        net_w, net_h = self.config.net_input_size.as_tuple()
        return np.zeros((self.config.num_scales, 3, net_h, net_w), dtype=np.float32)

    def format_output(self, frame):
        self._record('format_output')
        out_w, out_h = self.config.output_size.as_tuple()
        return 2.0, np.full((out_h, out_w, 3), 100.0, dtype=np.float32)

    def forward_pass(self, net_input, input_size):
        self._record('forward_pass')
        self.forward_input_size = input_size

    def get_pose_keypoints(self):
        self._record('get_pose_keypoints')
        return np.array([[[10.0, 10.0, 0.9], [20.0, 20.0, 0.8]]], dtype=np.float32)

    def render_pose(self, output_array, keypoints, scale_input_to_output=1.0):
        self._record('render_pose')
        self.render_scale = scale_input_to_output
        return output_array

    def format_to_image(self, output_array):
        self._record('format_to_image')
        return output_array.astype(np.uint8)

    def release(self):
        self.calls.append('release')
        self.released = True


@pytest.fixture
def small_config():
    return resolve_config({
        'resolution': '64x48',
        'net_resolution': '32x32',
        'model_pose': 'COCO',
        'alpha_pose': 0.6,
    })


@pytest.fixture
def fake_engine(small_config):
    return FakePoseEngine(small_config)


@pytest.fixture
def fake_engine_cls():
    return FakePoseEngine
