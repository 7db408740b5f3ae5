import asyncio
import logging
import time
from abc import ABC
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

from kafka import KafkaConsumer
from kafka.errors import KafkaError

from core.errors import DecodeError
from skeleton_tracking.metrics.prometheus import (
    MetricsLabelContext,
    service_decode_errors_total,
    service_messages_consumed_total,
)
from skeleton_tracking.utils.serializers import ImageMessage, deserialize_image_message

logger = logging.getLogger(__name__)


class KafkaInput(ABC):
    """Image topic subscription using kafka-python, handing out one frame per read."""

    def __init__(
        self,
        config: Dict[str, Any],
        *,
        metrics_service: Optional[str] = None,
        metrics_task_id: Optional[str] = None,
    ):
        super().__init__()
        self.bootstrap_servers = config["bootstrap_servers"]
        self.topic = config['topic']
        self.group_id = config.get('group_id', f"skeleton_tracking_{int(time.time())}")
        self.auto_offset_reset = config.get('auto_offset_reset', 'latest')
        self.poll_timeout_ms = int(config.get('poll_timeout_ms', 100))
        self.enable_auto_commit = config.get('enable_auto_commit', True)

        # One polling thread; records are consumed strictly one at a time
        self._executor = ThreadPoolExecutor(max_workers=1,
                                            thread_name_prefix=f"kafka_{self.group_id}")
        self._loop: asyncio.AbstractEventLoop | None = None

        self.consumer = None
        self.is_running = False

        self._default_task_id = metrics_task_id or config.get('task_id') or 'default_task'
        self._metrics_context = MetricsLabelContext(
            service=metrics_service or 'unknown',
            worker_id='input',
            topic=self.topic,
            initial_task_id=self._default_task_id,
        )

    # initialize the Kafka consumer on the polling thread
    async def initialize(self) -> bool:
        """Initialize Kafka connection."""
        try:
            self._loop = asyncio.get_running_loop()

            logger.info(f"Starting Kafka consumer for servers {self.bootstrap_servers}")

            self.consumer = await self._loop.run_in_executor(self._executor, self._create_consumer)
            self.is_running = True

            logger.info(f"Kafka connection established, subscribed to topic: {self.topic}")
            return True

        except Exception as e:
            logger.error(f"Failed to initialize Kafka input: {e}")
            return False

    def _create_consumer(self) -> KafkaConsumer:
        return KafkaConsumer(
            self.topic,
            bootstrap_servers=self.bootstrap_servers,
            group_id=self.group_id,
            auto_offset_reset=self.auto_offset_reset,
            max_poll_records=1,
            enable_auto_commit=self.enable_auto_commit,
            value_deserializer=lambda v: v)

    def _poll_one(self):
        records = self.consumer.poll(timeout_ms=self.poll_timeout_ms, max_records=1)
        for partition_records in records.values():
            for record in partition_records:
                return record
        return None

    def _parse_record(self, value: bytes) -> Optional[ImageMessage]:
        """Parse one record; malformed records are counted and skipped."""
        try:
            message = deserialize_image_message(value)
        except DecodeError as e:
            labels = self._metrics_context.labels_for(self._default_task_id)
            service_decode_errors_total.labels(**labels).inc()
            logger.warning(f"Skipping malformed record on {self.topic}: {e}")
            return None

        if message.task_id is None:
            message.task_id = self._default_task_id
        labels = self._metrics_context.labels_for(message.task_id)
        service_messages_consumed_total.labels(**labels).inc()
        return message

    async def read_data(self) -> Optional[ImageMessage]:
        """Poll the next record; returns None when nothing arrived within the poll timeout."""
        if not self.is_running:
            raise RuntimeError("Kafka input not initialized or stopped")
        try:
            record = await self._loop.run_in_executor(self._executor, self._poll_one)
        except asyncio.CancelledError:
            logger.info("Kafka input read_data task cancelled")
            raise
        except KafkaError as e:
            logger.error(f"Error reading Kafka message: {e}")
            raise

        if record is None:
            return None
        return self._parse_record(record.value)

    async def cleanup(self):
        """Clean up Kafka resources."""
        self.is_running = False
        if self.consumer:
            try:
                await self._loop.run_in_executor(self._executor, self.consumer.close)
            except KafkaError as e:
                logger.error(f"Error closing Kafka consumer: {e}")
            self.consumer = None

        self._executor.shutdown(wait=True)
        logger.info("Kafka input cleaned up")
