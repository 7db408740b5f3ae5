#!/usr/bin/env python3
"""
Publish frames from a camera or video file onto the image topic.

Stands in for a camera driver when running the skeleton tracking service
against a Kafka broker.
"""
import argparse
import logging
import sys
import time

import cv2

from core.utils.kafka_io import ImageTopicProducer
from skeleton_tracking.utils.serializers import RAW_ENCODINGS, COMPRESSED_ENCODINGS, encode_image_message
from skeleton_tracking.utils.setup_logging import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Publish video frames to a Kafka image topic")
    parser.add_argument('source', help='Video file path or camera index')
    parser.add_argument('--bootstrap-servers', default='localhost:9092')
    parser.add_argument('--topic', default=None, help='Image topic (default raw_frames_<task_id>)')
    parser.add_argument('--task-id', default='camera1')
    parser.add_argument('--encoding', default='jpeg',
                        choices=sorted(set(RAW_ENCODINGS) | set(COMPRESSED_ENCODINGS)))
    parser.add_argument('--fps', type=float, default=0.0,
                        help='Publishing rate; 0 publishes as fast as frames are read')
    parser.add_argument('--max-frames', type=int, default=0, help='Stop after this many frames (0 = all)')
    return parser.parse_args(argv)


def publish(capture, producer: ImageTopicProducer, encoding: str = 'jpeg', task_id=None,
            fps: float = 0.0, max_frames: int = 0) -> int:
    """Read frames from capture and send them; returns the number of frames sent."""
    interval = 1.0 / fps if fps > 0 else 0.0
    sent = 0
    while max_frames <= 0 or sent < max_frames:
        ok, frame = capture.read()
        if not ok:
            break
        if encoding == 'mono8':
            frame = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        elif encoding in ('rgb8', 'bgra8', 'rgba8'):
            frame = cv2.cvtColor(frame, {'rgb8': cv2.COLOR_BGR2RGB,
                                         'bgra8': cv2.COLOR_BGR2BGRA,
                                         'rgba8': cv2.COLOR_BGR2RGBA}[encoding])
        message = encode_image_message(frame, encoding=encoding, frame_id=sent, task_id=task_id)
        if producer.send(message):
            sent += 1
        if interval:
            time.sleep(interval)
    return sent


def main(argv=None):
    args = parse_args(argv)
    setup_logging('INFO')

    source = int(args.source) if args.source.isdigit() else args.source
    capture = cv2.VideoCapture(source)
    if not capture.isOpened():
        logger.error(f"Cannot open video source {args.source}")
        sys.exit(1)

    topic = args.topic or f"raw_frames_{args.task_id}"
    producer = ImageTopicProducer(topic, bootstrap_servers=args.bootstrap_servers)
    try:
        sent = publish(capture, producer, encoding=args.encoding, task_id=args.task_id,
                       fps=args.fps, max_frames=args.max_frames)
        logger.info(f"Published {sent} frames to {topic}")
    except KeyboardInterrupt:
        logger.info("Publishing interrupted by user")
    finally:
        capture.release()
        producer.close()


if __name__ == "__main__":
    main()
