"""
Tests for the frame publisher with a stub capture and stub Kafka producer.
"""
import numpy as np
import pytest

from apps.skeleton_tracking_service.publish_frames import parse_args, publish
from core.utils.kafka_io import ImageTopicProducer
from skeleton_tracking.utils.serializers import deserialize_image_message, serialize_image_message, to_bgra8


class StubCapture:
    def __init__(self, count):
        self.frames = [np.full((6, 8, 3), i, dtype=np.uint8) for i in range(count)]

    def read(self):
        if not self.frames:
            return False, None
        return True, self.frames.pop(0)


class StubFuture:
    partition = 0
    offset = 0

    def get(self, timeout=None):
        return self


class StubKafkaProducer:
    def __init__(self):
        self.records = []
        self.closed = False

    def send(self, topic, value):
        self.records.append((topic, serialize_image_message(value)))
        return StubFuture()

    def flush(self):
        pass

    def close(self):
        self.closed = True


@pytest.mark.parametrize("encoding", ["bgr8", "mono8", "rgba8", "png"])
def test_published_records_decode(encoding):
    stub = StubKafkaProducer()
    producer = ImageTopicProducer('raw_frames_cam1', producer=stub)

    sent = publish(StubCapture(3), producer, encoding=encoding, task_id='cam1')
    producer.close()

    assert sent == 3
    assert stub.closed
    assert [topic for topic, _ in stub.records] == ['raw_frames_cam1'] * 3
    message = deserialize_image_message(stub.records[2][1])
    assert message.frame_id == 2
    assert message.task_id == 'cam1'
    assert message.encoding == encoding
    frame = to_bgra8(message)
    assert frame.shape == (6, 8, 4)
    assert frame[0, 0, 0] == 2


def test_max_frames():
    stub = StubKafkaProducer()
    sent = publish(StubCapture(5), ImageTopicProducer('t', producer=stub), encoding='bgr8', max_frames=2)
    assert sent == 2
    assert len(stub.records) == 2


def test_parse_args_defaults():
    args = parse_args(['walk.mp4'])
    assert args.encoding == 'jpeg'
    assert args.topic is None
    assert args.task_id == 'camera1'
