"""Shared Prometheus metric definitions for skeleton tracking services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from prometheus_client import Counter, Histogram, start_http_server

LABEL_NAMES = ("service", "task_id", "worker_id", "topic")
DEFAULT_TASK_ID = "unknown"


# Core processing metrics
service_frames_processed_total = Counter(
    "service_frames_processed_total",
    "Total number of frames rendered by the pipeline.",
    LABEL_NAMES,
)

service_frames_errors_total = Counter(
    "service_frames_errors_total",
    "Total number of frames that failed inside the pose engine.",
    LABEL_NAMES,
)

service_frame_processing_seconds = Histogram(
    "service_frame_processing_seconds",
    "Latency in seconds for processing a single frame.",
    LABEL_NAMES,
    buckets=(
        0.001,
        0.005,
        0.01,
        0.02,
        0.05,
        0.1,
        0.25,
        0.5,
        1,
        2,
        5,
        10,
    ),
)


# Input metrics
service_messages_consumed_total = Counter(
    "service_messages_consumed_total",
    "Total number of image messages consumed from the input source.",
    LABEL_NAMES,
)

service_decode_errors_total = Counter(
    "service_decode_errors_total",
    "Total number of image messages that could not be decoded.",
    LABEL_NAMES,
)


def start_metrics_server(port: int, addr: str = "0.0.0.0") -> None:
    """Expose the default registry over HTTP."""
    start_http_server(port, addr=addr)


@dataclass
class MetricsLabelContext:
    """Helper for reusing Prometheus labels with dynamic task ids."""

    service: str
    worker_id: str
    topic: str
    initial_task_id: Optional[str] = None

    def __post_init__(self) -> None:
        self._base_labels = {
            "service": self.service or "unknown",
            "worker_id": str(self.worker_id) if self.worker_id is not None else "unknown",
            "topic": self.topic or "unknown",
        }
        initial = self.initial_task_id or DEFAULT_TASK_ID
        self._label_cache: Dict[str, Dict[str, str]] = {}
        self.labels_for(initial)

    def labels_for(self, task_id: Optional[str]) -> Dict[str, str]:
        """Return labels for the provided task id and cache the result."""

        normalized = str(task_id) if task_id else DEFAULT_TASK_ID
        if normalized not in self._label_cache:
            labels = {**self._base_labels, "task_id": normalized}
            self._label_cache[normalized] = labels
        return self._label_cache[normalized]

