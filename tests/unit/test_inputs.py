"""
Tests for the inbound interfaces without a broker or camera.
"""
import asyncio

import numpy as np
import pytest

from skeleton_tracking.io import KafkaInput, VideoInput
from skeleton_tracking.utils.serializers import encode_image_message, serialize_image_message


class Record:
    def __init__(self, value):
        self.value = value


class StubConsumer:
    def __init__(self, values):
        self.values = list(values)
        self.closed = False

    def poll(self, timeout_ms=0, max_records=None):
        if not self.values:
            return {}
        return {('raw_frames_cam1', 0): [Record(self.values.pop(0))]}

    def close(self):
        self.closed = True


def kafka_input():
    return KafkaInput({
        'bootstrap_servers': 'localhost:9092',
        'topic': 'raw_frames_cam1',
        'group_id': 'tracker_cam1',
        'task_id': 'cam1',
    }, metrics_service='Skeleton Tracking Test')


@pytest.mark.asyncio
async def test_kafka_input_reads_one_record_at_a_time():
    frame = np.zeros((4, 4, 3), dtype=np.uint8)
    good = serialize_image_message(encode_image_message(frame, frame_id=5))
    consumer = StubConsumer([good, b'not json'])

    interface = kafka_input()
    interface.consumer = consumer
    interface._loop = asyncio.get_running_loop()
    interface.is_running = True

    message = await interface.read_data()
    assert message.frame_id == 5
    assert message.task_id == 'cam1'
    assert await interface.read_data() is None   # malformed, skipped
    assert await interface.read_data() is None   # nothing within the poll timeout

    await interface.cleanup()
    assert consumer.closed
    assert interface.consumer is None


@pytest.mark.asyncio
async def test_kafka_input_skips_tombstones():
    frame = np.zeros((4, 4, 3), dtype=np.uint8)
    good = serialize_image_message(encode_image_message(frame, frame_id=8))
    consumer = StubConsumer([None, good])

    interface = kafka_input()
    interface.consumer = consumer
    interface._loop = asyncio.get_running_loop()
    interface.is_running = True

    assert await interface.read_data() is None
    assert (await interface.read_data()).frame_id == 8
    await interface.cleanup()


@pytest.mark.asyncio
async def test_kafka_input_requires_initialization():
    interface = kafka_input()
    with pytest.raises(RuntimeError):
        await interface.read_data()
    await interface.cleanup()


class StubCapture:
    def __init__(self, count):
        self.count = count
        self.position = 0
        self.released = False

    def read(self):
        if self.position >= self.count:
            return False, None
        self.position += 1
        return True, np.full((4, 6, 3), self.position, dtype=np.uint8)

    def set(self, prop, value):
        self.position = int(value)
        return True

    def release(self):
        self.released = True


def video_input(capture, loop=False):
    interface = VideoInput({'source': 'walk.mp4', 'task_id': 'cam1', 'loop': loop})
    interface.capture = capture
    interface._loop = asyncio.get_running_loop()
    interface.is_running = True
    return interface


@pytest.mark.asyncio
async def test_video_input_ends_with_eof():
    capture = StubCapture(2)
    interface = video_input(capture)

    first = await interface.read_data()
    second = await interface.read_data()
    assert (first.frame_id, second.frame_id) == (0, 1)
    assert first.encoding == 'bgr8'
    with pytest.raises(EOFError):
        await interface.read_data()

    await interface.cleanup()
    assert capture.released


@pytest.mark.asyncio
async def test_video_input_loops():
    interface = video_input(StubCapture(1), loop=True)
    frame_ids = [(await interface.read_data()).frame_id for _ in range(3)]
    assert frame_ids == [0, 1, 2]
    await interface.cleanup()


def test_video_source_parsing():
    assert VideoInput({'source': '2'}).source == 2
    assert VideoInput({'source': 'walk.mp4'}).topic == 'video:walk.mp4'


class ClosedCapture:
    instances = []

    def __init__(self, source):
        self.source = source
        self.released = False
        ClosedCapture.instances.append(self)

    def isOpened(self):
        return False

    def release(self):
        self.released = True


@pytest.mark.asyncio
async def test_unopenable_source_is_released(monkeypatch):
    monkeypatch.setattr('skeleton_tracking.io.video_input_interface.cv2.VideoCapture', ClosedCapture)
    interface = VideoInput({'source': 'missing.mp4'})

    assert await interface.initialize() is False
    assert ClosedCapture.instances[-1].released
    assert interface.capture is None
    await interface.cleanup()
