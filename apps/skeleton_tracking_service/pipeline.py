"""
Frame pipeline: one image message in, one rendered skeleton image out.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from core.config import PoseConfig
from core.errors import DecodeError, EngineError
from core.models import OpenPoseModel, PoseEngine
from skeleton_tracking.utils.serializers import TARGET_ENCODING, ImageMessage, to_bgra8
from skeleton_tracking.visualizer import FrameDisplayer

logger = logging.getLogger(__name__)


class FrameStatus(Enum):
    OK = "ok"
    DECODE_ERROR = "decode_error"
    ENGINE_ERROR = "engine_error"


@dataclass
class FrameResult:
    """Outcome of processing one frame."""
    status: FrameStatus
    frame_id: int = 0
    image: Optional[np.ndarray] = None
    keypoints: Optional[np.ndarray] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status is FrameStatus.OK


class FramePipeline:
    """
    Runs decode -> format -> inference -> render -> display for a single frame.

    Holds no per-frame state; only the engine and the optional debug display
    live across calls. initialize_on_thread() and every process() call must
    happen on the same thread.
    """

    def __init__(self, config: PoseConfig, engine: Optional[PoseEngine] = None,
                 debug: bool = False, displayer: Optional[FrameDisplayer] = None):
        self.config = config
        self.engine = engine if engine is not None else OpenPoseModel(config)
        self.debug = debug
        if debug and displayer is None:
            displayer = FrameDisplayer(output_size=config.output_size.as_tuple())
        self.displayer = displayer if debug else None
        self._initialized = False

    def initialize_on_thread(self) -> None:
        """Open the debug window and load the engine on the calling thread."""
        if self._initialized:
            return
        if self.displayer is not None:
            self.displayer.open()
        try:
            self.engine.initialization_on_thread()
        except Exception:
            if self.displayer is not None:
                self.displayer.close()
            raise
        self._initialized = True
        logger.info(f"Frame pipeline ready: output {self.config.output_size}, "
                    f"net {self.config.net_input_size}, model {self.config.pose_model.value}")

    def close(self) -> None:
        """Release the engine, then destroy the debug window."""
        try:
            self.engine.release()
        finally:
            if self.displayer is not None:
                self.displayer.close()
            self._initialized = False

    def __enter__(self):
        self.initialize_on_thread()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _estimate(self, frame: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        engine = self.engine
        net_input = engine.format_input(frame)
        scale_input_to_output, output_array = engine.format_output(frame)
        engine.forward_pass(net_input, (frame.shape[1], frame.shape[0]))
        keypoints = engine.get_pose_keypoints()
        engine.render_pose(output_array, keypoints, scale_input_to_output)
        output_image = engine.format_to_image(output_array)
        return output_image, keypoints

    def process(self, message: ImageMessage) -> FrameResult:
        """
        Process one image message.

        Never raises for bad frames: decode and engine failures are logged and
        reported through the returned FrameResult.
        """
        frame_id = message.frame_id
        try:
            frame = to_bgra8(message)
        except DecodeError as e:
            logger.error(f"Could not convert from '{message.encoding}' to '{TARGET_ENCODING}'. ({e})")
            return FrameResult(FrameStatus.DECODE_ERROR, frame_id=frame_id, error=e)

        try:
            output_image, keypoints = self._estimate(frame)
        except Exception as e:
            if not isinstance(e, EngineError):
                e = EngineError(f"{type(e).__name__}: {e}")
            logger.error(f"Pose engine failed on frame {frame_id}: {e}")
            return FrameResult(FrameStatus.ENGINE_ERROR, frame_id=frame_id, error=e)

        if self.displayer is not None:
            self.displayer.show(frame, output_image)

        logger.debug(f"Frame {frame_id}: {len(keypoints)} person(s)")
        return FrameResult(FrameStatus.OK, frame_id=frame_id, image=output_image, keypoints=keypoints)
