"""
OpenPose body model implementation running on onnxruntime.
"""
import logging
import os
from typing import List, Tuple

import cv2
import numpy as np
import onnxruntime as ort

from core.config import PoseConfig
from core.errors import EngineError
from skeleton_tracking.visualizer.skeleton_drawer import draw_pose

from .base_model import PoseEngine
from .body_parts import BODY_PARTS, MODEL_FILES, PART_CONNECTIONS

logger = logging.getLogger(__name__)

NET_STRIDE = 16


def to_bgr(frame: np.ndarray) -> np.ndarray:
    """Drop alpha / expand grayscale so the frame is HxWx3 BGR."""
    if frame.ndim == 2:
        return cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
    if frame.shape[2] == 4:
        return cv2.cvtColor(frame, cv2.COLOR_BGRA2BGR)
    return frame


def resize_fixed_aspect_ratio(image: np.ndarray, ratio: float,
                              target_size: Tuple[int, int]) -> np.ndarray:
    """
    Resize image by ratio and paste it at the top-left of a zero canvas of target_size.

    Args:
        image: HxWxC array
        ratio: resize factor applied to both axes
        target_size: (width, height) of the returned canvas

    Returns:
        Canvas with the same dtype and channel count as image
    """
    target_w, target_h = target_size
    h, w = image.shape[:2]
    new_w = min(target_w, max(1, int(round(w * ratio))))
    new_h = min(target_h, max(1, int(round(h * ratio))))
    resized = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_CUBIC if ratio > 1 else cv2.INTER_AREA)
    if resized.ndim == 2:
        resized = resized[:, :, np.newaxis]
    canvas = np.zeros((target_h, target_w, resized.shape[2]), dtype=image.dtype)
    canvas[:new_h, :new_w] = resized
    return canvas


class OpenPoseModel(PoseEngine):
    """OpenPose COCO / MPI body model: multi-scale heatmap averaging and peak keypoints."""

    def __init__(self, config: PoseConfig, detection_threshold: float = 0.1):
        super().__init__(config)
        self.detection_threshold = detection_threshold
        self.body_parts: List[str] = BODY_PARTS[config.pose_model]
        self.part_connections = PART_CONNECTIONS[config.pose_model]
        self.model_path = os.path.join(config.model_folder, MODEL_FILES[config.pose_model])
        self.device = 'cpu'
        self.session = None
        self.input_name = None
        self._heatmaps = None
        self._net_to_input_scale = 1.0

    def _get_providers(self):
        gpu_id = self.config.num_gpu_start
        if 'CUDAExecutionProvider' in ort.get_available_providers():
            return [("CUDAExecutionProvider", {"device_id": gpu_id}), "CPUExecutionProvider"], f"cuda:{gpu_id}"
        logger.warning("CUDA not available, falling back to CPU")
        return ["CPUExecutionProvider"], "cpu"

    def initialization_on_thread(self) -> None:
        """Load the pose network onto the configured device."""
        if self.session is not None:
            return
        if not os.path.exists(self.model_path):
            raise EngineError(f"Pose model not found: {self.model_path}")

        providers, self.device = self._get_providers()
        try:
            self.session = ort.InferenceSession(self.model_path, providers=providers)
        except Exception as e:
            raise EngineError(f"Failed to load pose model {self.model_path}: {e}") from e
        self.input_name = self.session.get_inputs()[0].name
        logger.info(f"Loaded {self.config.pose_model.value} model from {self.model_path} on {self.device}")

    def release(self) -> None:
        self.session = None
        self._heatmaps = None

    def _scale_ratios(self) -> List[float]:
        return [1.0 - i * self.config.scale_gap for i in range(self.config.num_scales)]

    def _base_ratio(self, input_size: Tuple[int, int]) -> float:
        width, height = input_size
        net_w, net_h = self.config.net_input_size.as_tuple()
        return min(net_w / width, net_h / height)

    def format_input(self, frame: np.ndarray) -> np.ndarray:
        bgr = to_bgr(frame)
        h, w = bgr.shape[:2]
        net_size = self.config.net_input_size.as_tuple()
        base_ratio = self._base_ratio((w, h))

        scales = []
        for scale in self._scale_ratios():
            # Non-positive ratios from large scale gaps collapse to one stride
            ratio = max(base_ratio * scale, NET_STRIDE / max(w, h))
            canvas = resize_fixed_aspect_ratio(bgr, ratio, net_size).astype(np.float32)
            scales.append((canvas / 256.0 - 0.5).transpose(2, 0, 1))
        return np.stack(scales).astype(np.float32)

    def format_output(self, frame: np.ndarray) -> Tuple[float, np.ndarray]:
        bgr = to_bgr(frame)
        h, w = bgr.shape[:2]
        out_w, out_h = self.config.output_size.as_tuple()
        scale_input_to_output = min(out_w / w, out_h / h)
        output_array = resize_fixed_aspect_ratio(bgr, scale_input_to_output, (out_w, out_h))
        return scale_input_to_output, output_array.astype(np.float32)

    def forward_pass(self, net_input: np.ndarray, input_size: Tuple[int, int]) -> None:
        if self.session is None:
            raise EngineError("Pose engine used before initialization_on_thread()")

        width, height = input_size
        net_w, net_h = self.config.net_output_size.as_tuple()
        base_ratio = self._base_ratio(input_size)
        valid_w = min(net_w, max(1, int(round(width * base_ratio))))
        valid_h = min(net_h, max(1, int(round(height * base_ratio))))
        num_parts = len(self.body_parts)

        accumulated = np.zeros((valid_h, valid_w, num_parts), dtype=np.float32)
        for scale, blob in zip(self._scale_ratios(), net_input):
            try:
                outputs = self.session.run(None, {self.input_name: blob[np.newaxis]})
            except Exception as e:
                raise EngineError(f"Pose inference failed: {e}") from e
            heatmaps = outputs[0][0, :num_parts].transpose(1, 2, 0)
            heatmaps = cv2.resize(heatmaps, (net_w, net_h), interpolation=cv2.INTER_CUBIC)
            if heatmaps.ndim == 2:
                heatmaps = heatmaps[:, :, np.newaxis]
            ratio = max(base_ratio * scale, NET_STRIDE / max(width, height))
            scaled_w = min(net_w, max(1, int(round(width * ratio))))
            scaled_h = min(net_h, max(1, int(round(height * ratio))))
            cropped = heatmaps[:scaled_h, :scaled_w]
            resized = cv2.resize(cropped, (valid_w, valid_h), interpolation=cv2.INTER_CUBIC)
            if resized.ndim == 2:
                resized = resized[:, :, np.newaxis]
            accumulated += resized

        self._heatmaps = accumulated / max(1, len(net_input))
        self._net_to_input_scale = 1.0 / base_ratio

    def get_pose_keypoints(self) -> np.ndarray:
        num_parts = len(self.body_parts)
        if self._heatmaps is None:
            return np.zeros((0, num_parts, 3), dtype=np.float32)

        person = np.zeros((num_parts, 3), dtype=np.float32)
        for part in range(num_parts):
            _, max_val, _, max_loc = cv2.minMaxLoc(np.ascontiguousarray(self._heatmaps[:, :, part]))
            if max_val > self.detection_threshold:
                person[part] = (max_loc[0] * self._net_to_input_scale,
                                max_loc[1] * self._net_to_input_scale,
                                max_val)

        if not np.any(person[:, 2] > 0):
            return np.zeros((0, num_parts, 3), dtype=np.float32)
        return person[np.newaxis]

    def render_pose(self, output_array: np.ndarray, keypoints: np.ndarray,
                    scale_input_to_output: float = 1.0) -> np.ndarray:
        return draw_pose(output_array, keypoints, self.part_connections,
                         scale=scale_input_to_output, alpha=self.config.alpha_pose)

    def format_to_image(self, output_array: np.ndarray) -> np.ndarray:
        return np.clip(output_array, 0, 255).astype(np.uint8)
