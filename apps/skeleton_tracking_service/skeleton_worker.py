#!/usr/bin/env python3
"""
Skeleton tracking worker: feeds image messages through the frame pipeline.
"""
import logging
from typing import Dict, Optional

from core.errors import ConfigError
from skeleton_tracking.base_worker import BaseWorker
from skeleton_tracking.metrics.prometheus import service_decode_errors_total, service_frames_errors_total
from skeleton_tracking.utils.serializers import ImageMessage

from .pipeline import FramePipeline, FrameResult, FrameStatus

logger = logging.getLogger(__name__)


class SkeletonTrackingWorker(BaseWorker):
    """Pose estimation worker owning one FramePipeline on its processing thread."""

    def __init__(self, worker_id: int, device: str,
                 model_config: Dict,
                 input_interface,
                 output_interface=None):
        super().__init__(worker_id, device, model_config,
                         input_interface, output_interface)
        if 'pose_config' not in model_config:
            raise ConfigError("model_config requires a resolved 'pose_config'")

        self.pipeline: Optional[FramePipeline] = None
        self.frame_count = 0
        logger.info(f"SkeletonTrackingWorker {worker_id} created for device {device}")

    def _model_init(self):
        """Create the pipeline and load the engine on the worker thread."""
        try:
            engine_factory = self.model_config.get('engine_factory')
            pose_config = self.model_config['pose_config']
            engine = engine_factory(pose_config) if engine_factory is not None else None
            self.pipeline = FramePipeline(pose_config, engine=engine,
                                          debug=self.model_config.get('debug', False))
            self.pipeline.initialize_on_thread()

            logger.info(f"Pose engine initialized successfully on device: {self.device}")

        except Exception as e:
            logger.error(f"Failed to initialize pose engine: {e}")
            raise

    def _model_close(self):
        if self.pipeline is not None:
            self.pipeline.close()
            self.pipeline = None
            logger.info(f"SkeletonTrackingWorker {self.worker_id} released after {self.frame_count} frames")

    def _predict(self, inputs: ImageMessage) -> Optional[FrameResult]:
        """Run the pipeline on one frame; failed frames are counted and dropped."""
        result = self.pipeline.process(inputs)
        labels = self.get_metrics_labels(inputs.task_id)

        if result.status is FrameStatus.DECODE_ERROR:
            service_decode_errors_total.labels(**labels).inc()
            return None
        if result.status is FrameStatus.ENGINE_ERROR:
            service_frames_errors_total.labels(**labels).inc()
            return None

        self.frame_count += 1
        return result
