#!/usr/bin/env python3
"""
Skeleton tracking service: image topic in, pose-rendered frames (optionally) on screen.
"""
import argparse
import asyncio
import logging
import sys
from typing import Any, Callable, Dict, Optional

import yaml

from core.config import PoseConfig, options_from_sources, resolve_config
from core.errors import ConfigError
from core.utils.config_loader import (
    CONFIG_SECTION,
    find_config_file,
    get_environment_config,
    load_config,
)
from skeleton_tracking.io import KafkaInput, VideoInput
from skeleton_tracking.metrics.prometheus import start_metrics_server
from skeleton_tracking.utils.parse_config_string import parse_config_string
from skeleton_tracking.utils.setup_logging import setup_logging

from .skeleton_worker import SkeletonTrackingWorker

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "dev_skeleton_tracking_config.yaml"
DEFAULT_INPUT = "kafka://localhost:9092,topic=raw_frames_{task_id},group_id=skeleton_tracking_{task_id}"

OPTION_FLAGS = (
    'logging_level', 'model_pose', 'model_folder', 'net_resolution', 'resolution',
    'num_gpu_start', 'scale_gap', 'num_scales', 'alpha_pose',
)


class SkeletonTrackingService:
    """Wires one input interface to one SkeletonTrackingWorker."""

    def __init__(self, pose_config: PoseConfig, input_url: str = DEFAULT_INPUT,
                 task_id: str = "default", debug: bool = False,
                 metrics_port: Optional[int] = None,
                 engine_factory: Optional[Callable] = None):
        self.pose_config = pose_config
        self.input_url = input_url
        self.task_id = task_id
        self.debug = debug
        self.metrics_port = metrics_port
        self.engine_factory = engine_factory

        self.input_interface = None
        self.worker = None

        logger.info(f"{self.get_service_name()} initialized with task_id: '{self.task_id}'")

    def get_service_name(self) -> str:
        return "Skeleton Tracking Service"

    def create_input_interface(self):
        """Create the input interface described by the input connection string."""
        config = parse_config_string(self.input_url, task_id=self.task_id)
        protocol = config['protocol']

        if protocol == 'kafka':
            return KafkaInput({
                'bootstrap_servers': config['location'],
                'topic': config.get('topic', f"raw_frames_{self.task_id}"),
                'group_id': config.get('group_id', f"skeleton_tracking_{self.task_id}"),
                'auto_offset_reset': config.get('auto_offset_reset', 'latest'),
                'task_id': self.task_id,
            }, metrics_service=self.get_service_name(), metrics_task_id=self.task_id)
        if protocol in ('video', 'camera', 'file'):
            return VideoInput({
                'source': config['location'],
                'loop': config.get('loop', False),
                'task_id': self.task_id,
                'service_name': self.get_service_name(),
            })
        raise ConfigError(f"Unsupported input '{self.input_url}', expected kafka://, camera:// or video://")

    def get_model_config(self) -> Dict[str, Any]:
        return {
            'pose_config': self.pose_config,
            'debug': self.debug,
            'engine_factory': self.engine_factory,
            'task_id': self.task_id,
            'service_name': self.get_service_name(),
        }

    def get_device(self) -> str:
        return f"cuda:{self.pose_config.num_gpu_start}"

    async def start_service(self):
        """Start the input, then process frames until the input ends or the task is cancelled."""
        try:
            if self.metrics_port:
                start_metrics_server(self.metrics_port)
                logger.info(f"Prometheus metrics exposed on port {self.metrics_port}")

            self.input_interface = self.create_input_interface()
            if not await self.input_interface.initialize():
                raise RuntimeError(f"Failed to initialize input {self.input_url}")

            self.worker = SkeletonTrackingWorker(
                worker_id=0,
                device=self.get_device(),
                model_config=self.get_model_config(),
                input_interface=self.input_interface,
            )
            logger.info(f"{self.get_service_name()} started for task: {self.task_id}")
            await self.worker.run()

        except Exception as e:
            logger.error(f"Error running {self.get_service_name()}: {e}")
            raise
        finally:
            await self._cleanup()

    async def _cleanup(self):
        logger.info(f"Cleaning up {self.get_service_name()}...")
        if self.input_interface is not None:
            try:
                await self.input_interface.cleanup()
            except Exception as e:
                logger.error(f"Error during cleanup: {e}")
            self.input_interface = None


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Skeleton Tracking Service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --task-id camera1
  %(prog)s --input camera://0 --debug --model-pose MPI
  %(prog)s --input video://walk.mp4 --resolution 960x540 --net-resolution 320x176

Option precedence: command line > SKELETON_TRACKING_<OPTION> environment > config file > defaults.
        """
    )
    parser.add_argument('--config', type=str, default=None,
                        help=f'Path to configuration file (default: {DEFAULT_CONFIG_PATH} if present)')
    parser.add_argument('--task-id', type=str, default=None,
                        help='Task ID used in topic and consumer group names')
    parser.add_argument('--input', type=str, default=None,
                        help='Input connection string, e.g. kafka://host:9092,topic=raw_frames_{task_id}')
    parser.add_argument('--debug', action='store_true', default=None,
                        help='Show input and rendered frames in debug windows')
    parser.add_argument('--metrics-port', type=int, default=None,
                        help='Expose Prometheus metrics on this port')

    pose = parser.add_argument_group('pose options')
    pose.add_argument('--logging-level', type=int, default=None,
                      help='Integer in [0, 255]; 0 outputs every log message, 255 none (default 3)')
    pose.add_argument('--model-pose', type=str, default=None,
                      help='Model to be used: COCO, MPI, MPI_4_layers (default COCO)')
    pose.add_argument('--model-folder', type=str, default=None,
                      help='Folder where the pose models are located (default models/)')
    pose.add_argument('--net-resolution', type=str, default=None,
                      help='Network input resolution, multiples of 16 (default 656x368)')
    pose.add_argument('--resolution', type=str, default=None,
                      help='Display resolution (default 1280x720)')
    pose.add_argument('--num-gpu-start', type=int, default=None,
                      help='GPU device start number (default 0)')
    pose.add_argument('--scale-gap', type=float, default=None,
                      help='Scale gap between scales; no effect unless num_scales > 1 (default 0.3)')
    pose.add_argument('--num-scales', type=int, default=None,
                      help='Number of scales to average (default 1)')
    pose.add_argument('--alpha-pose', type=float, default=None,
                      help='Blending factor in [0, 1] for body part rendering (default 0.6)')
    return parser.parse_args(argv)


def build_service(args, environ=None) -> SkeletonTrackingService:
    """
    Resolve configuration from file, environment and arguments, and build the service.

    Raises:
        ConfigError: if the configuration cannot be resolved
    """
    file_config: Dict[str, Any] = {}
    config_path = args.config or (DEFAULT_CONFIG_PATH if find_config_file(DEFAULT_CONFIG_PATH) else None)
    if config_path:
        try:
            file_config = load_config(config_path)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot load configuration {config_path}: {e}") from e

    service_section = file_config.get('service', {}) or {}
    cli_options = {name: getattr(args, name) for name in OPTION_FLAGS}
    options = options_from_sources(
        file_config.get(CONFIG_SECTION, {}) or {},
        {**get_environment_config(environ=environ), **{k: v for k, v in cli_options.items() if v is not None}},
    )
    pose_config = resolve_config(options)

    debug = args.debug if args.debug is not None else bool(service_section.get('debug', False))
    metrics_port = args.metrics_port if args.metrics_port is not None else service_section.get('metrics_port')
    return SkeletonTrackingService(
        pose_config=pose_config,
        input_url=args.input or service_section.get('input', DEFAULT_INPUT),
        task_id=args.task_id or service_section.get('task_id', 'default'),
        debug=debug,
        metrics_port=metrics_port,
    )


async def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    setup_logging('INFO')

    try:
        service = build_service(args)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(2)

    setup_logging(service.pose_config.logging_level)

    try:
        await service.start_service()
    except KeyboardInterrupt:
        logger.info("Service interrupted by user")
    except Exception as e:
        logger.error(f"Service error: {e}")
        raise


if __name__ == "__main__":
    asyncio.run(main())
