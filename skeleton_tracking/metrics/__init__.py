"""Prometheus metric helpers for skeleton tracking services."""

from .prometheus import *  # noqa: F401,F403

__all__ = [
    'MetricsLabelContext',
    'start_metrics_server',
    'service_frames_processed_total',
    'service_frames_errors_total',
    'service_frame_processing_seconds',
    'service_messages_consumed_total',
    'service_decode_errors_total',
]
