"""
Base pose engine interface consumed by the frame pipeline.
"""
from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np

from core.config import PoseConfig


class PoseEngine(ABC):
    """Abstract pose-estimation engine: formatting, inference and rendering for one frame."""

    def __init__(self, config: PoseConfig):
        """
        Initialize engine with the resolved configuration.

        Args:
            config: PoseConfig holding sizes, model variant, device and rendering options.
        """
        self.config = config
        self.model_name = self.__class__.__name__

    @abstractmethod
    def initialization_on_thread(self) -> None:
        """
        Load models and rendering resources on the calling thread.

        Must run once, on the thread that will process frames, before the first frame.
        """
        pass

    @abstractmethod
    def format_input(self, frame: np.ndarray) -> np.ndarray:
        """
        Format a BGRA frame into the network input tensor.

        Returns:
            float32 array of shape (num_scales, 3, net_height, net_width)
        """
        pass

    @abstractmethod
    def format_output(self, frame: np.ndarray) -> Tuple[float, np.ndarray]:
        """
        Format a BGRA frame into the output (render) buffer.

        Returns:
            Tuple of (scale_input_to_output, float32 array of shape (out_h, out_w, 3))
        """
        pass

    @abstractmethod
    def forward_pass(self, net_input: np.ndarray, input_size: Tuple[int, int]) -> None:
        """Run the network on net_input; input_size is the original (width, height)."""
        pass

    @abstractmethod
    def get_pose_keypoints(self) -> np.ndarray:
        """
        Keypoints of the last forward pass.

        Returns:
            float32 array of shape (people, parts, 3) with x, y, score in input-frame pixels
        """
        pass

    @abstractmethod
    def render_pose(self, output_array: np.ndarray, keypoints: np.ndarray,
                    scale_input_to_output: float = 1.0) -> np.ndarray:
        """Render keypoints in place onto output_array, blending with the configured alpha."""
        pass

    @abstractmethod
    def format_to_image(self, output_array: np.ndarray) -> np.ndarray:
        """Convert an output buffer into a displayable uint8 BGR image."""
        pass

    def release(self) -> None:
        """Release engine resources. Safe to call more than once."""
        pass
