import asyncio
import logging
from abc import ABC
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional, Union

import cv2

from skeleton_tracking.metrics.prometheus import MetricsLabelContext, service_messages_consumed_total
from skeleton_tracking.utils.serializers import ImageMessage, encode_image_message

logger = logging.getLogger(__name__)


class VideoInput(ABC):
    """Local camera / video file source producing bgr8 image messages via OpenCV."""

    def __init__(self, config: Dict[str, Any]):
        super().__init__()
        source = config.get('source', 0)
        # Camera indices arrive as strings from connection strings
        self.source: Union[int, str] = int(source) if str(source).isdigit() else source
        self.task_id = config.get('task_id', 'local')
        self.loop_video = str(config.get('loop', False)).lower() in ('1', 'true', 'yes')
        self.topic = f"video:{self.source}"

        self.capture: cv2.VideoCapture | None = None
        self.is_running = False
        self.frame_id = 0
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="video_input")
        self._loop: asyncio.AbstractEventLoop | None = None
        self._metrics_context = MetricsLabelContext(
            service=config.get('service_name', 'unknown'),
            worker_id='input',
            topic=self.topic,
            initial_task_id=self.task_id,
        )

    async def initialize(self) -> bool:
        self._loop = asyncio.get_running_loop()
        self.capture = await self._loop.run_in_executor(self._executor, cv2.VideoCapture, self.source)
        if not self.capture.isOpened():
            logger.error(f"Failed to open video source {self.source}")
            await self._loop.run_in_executor(self._executor, self.capture.release)
            self.capture = None
            return False
        self.is_running = True
        logger.info(f"Video input opened: {self.source}")
        return True

    def _read_frame(self):
        ok, frame = self.capture.read()
        if not ok and self.loop_video:
            self.capture.set(cv2.CAP_PROP_POS_FRAMES, 0)
            ok, frame = self.capture.read()
        return frame if ok else None

    async def read_data(self) -> Optional[ImageMessage]:
        """Read the next frame; raises EOFError when the source is exhausted."""
        if not self.is_running:
            raise RuntimeError("Video input not initialized or stopped")

        frame = await self._loop.run_in_executor(self._executor, self._read_frame)
        if frame is None:
            self.is_running = False
            raise EOFError(f"Video source {self.source} exhausted after {self.frame_id} frames")

        message = encode_image_message(frame, encoding='bgr8', frame_id=self.frame_id, task_id=self.task_id)
        self.frame_id += 1
        service_messages_consumed_total.labels(**self._metrics_context.labels_for(self.task_id)).inc()
        return message

    async def cleanup(self):
        self.is_running = False
        if self.capture is not None:
            await self._loop.run_in_executor(self._executor, self.capture.release)
            self.capture = None
        self._executor.shutdown(wait=True)
        logger.info("Video input cleaned up")
