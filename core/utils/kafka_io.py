"""
Kafka image topic producer.
"""
import logging

from kafka import KafkaProducer
from kafka.errors import KafkaError

from skeleton_tracking.utils.serializers import ImageMessage, serialize_image_message

logger = logging.getLogger(__name__)


class ImageTopicProducer:
    """Publishes ImageMessages as JSON records on an image topic."""

    def __init__(self, topic: str, bootstrap_servers: str = 'localhost:9092', producer=None):
        self.topic = topic
        self.producer = producer if producer is not None else KafkaProducer(
            bootstrap_servers=bootstrap_servers,
            value_serializer=serialize_image_message,
            max_request_size=52428800,  # 50MB for raw frames
            buffer_memory=104857600,    # 100MB buffer
            compression_type='gzip'
        )

    def send(self, message: ImageMessage) -> bool:
        """Send one frame and wait for the broker acknowledgement."""
        try:
            future = self.producer.send(self.topic, value=message)
            record_metadata = future.get(timeout=10)
            logger.debug(f"Frame {message.frame_id} sent to {self.topic} partition "
                         f"{record_metadata.partition} offset {record_metadata.offset}")
            return True
        except KafkaError as e:
            logger.error(f"Failed to send frame {message.frame_id} to {self.topic}: {e}")
            return False

    def close(self):
        """Flush pending records and close the producer connection."""
        self.producer.flush()
        self.producer.close()
