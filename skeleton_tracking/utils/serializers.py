"""
Image message (de)serialization for the skeleton tracking pipeline.

Frames travel as JSON records modelled after a camera image message:
``height``, ``width``, ``encoding``, ``step`` and base64 ``data``, plus
``task_id``, ``frame_id`` and ``timestamp`` metadata.
"""
import base64
import binascii
import json
import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional

import cv2
import numpy as np

from core.errors import DecodeError

logger = logging.getLogger(__name__)

TARGET_ENCODING = "bgra8"

# encoding -> (channels, cv2 conversion to BGRA or None when already BGRA)
RAW_ENCODINGS = {
    "bgr8": (3, cv2.COLOR_BGR2BGRA),
    "rgb8": (3, cv2.COLOR_RGB2BGRA),
    "bgra8": (4, None),
    "rgba8": (4, cv2.COLOR_RGBA2BGRA),
    "mono8": (1, cv2.COLOR_GRAY2BGRA),
}

COMPRESSED_ENCODINGS = {
    "jpeg": ".jpg",
    "png": ".png",
}


@dataclass
class ImageMessage:
    """One camera frame as received from the image topic."""
    height: int
    width: int
    encoding: str
    step: int
    data: bytes
    frame_id: int = 0
    timestamp: Optional[str] = None
    task_id: Optional[str] = None


def _iso_timestamp() -> str:
    now = time.time()
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(now)) + f".{int(now % 1 * 1e6):06d}Z"


def to_bgra8(message: ImageMessage) -> np.ndarray:
    """
    Convert an image message into a BGRA (bgra8) frame.

    Args:
        message: Incoming image message

    Returns:
        HxWx4 uint8 numpy array

    Raises:
        DecodeError: unknown encoding, inconsistent size/step, or undecodable payload
    """
    encoding = message.encoding

    if encoding in COMPRESSED_ENCODINGS:
        if not message.data:
            raise DecodeError(f"Empty {encoding} payload", encoding)
        try:
            image = cv2.imdecode(np.frombuffer(message.data, np.uint8), cv2.IMREAD_UNCHANGED)
        except cv2.error as e:
            raise DecodeError(f"Failed to decode {encoding} payload: {e}", encoding) from e
        if image is None:
            raise DecodeError(f"Failed to decode {encoding} payload", encoding)
        if image.dtype == np.uint16:
            # 16-bit PNG: keep the high byte
            image = (image >> 8).astype(np.uint8)
        elif image.dtype != np.uint8:
            raise DecodeError(f"Unsupported {encoding} sample type {image.dtype}", encoding)
        if image.ndim == 2:
            return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
        if image.shape[2] == 3:
            return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
        return image

    if encoding not in RAW_ENCODINGS:
        raise DecodeError(f"Unsupported encoding '{encoding}'", encoding)

    channels, conversion = RAW_ENCODINGS[encoding]
    height, width = int(message.height), int(message.width)
    if height <= 0 or width <= 0:
        raise DecodeError(f"Invalid image size {width}x{height}", encoding)

    row_bytes = width * channels
    step = int(message.step) if message.step else row_bytes
    if step < row_bytes or len(message.data) < step * height:
        raise DecodeError(
            f"Image data too short: {len(message.data)} bytes for {width}x{height} step {step}", encoding)

    rows = np.frombuffer(message.data, dtype=np.uint8, count=step * height).reshape(height, step)
    frame = rows[:, :row_bytes].reshape(height, width, channels)
    if conversion is None:
        return frame.copy()
    return cv2.cvtColor(frame, conversion)


def image_message_from_dict(payload: Dict) -> ImageMessage:
    """
    Build an ImageMessage from a decoded JSON record.

    Raises:
        DecodeError: missing fields or invalid base64 data
    """
    encoding = str(payload.get("encoding", "unknown")) if isinstance(payload, dict) else "unknown"
    try:
        data = base64.b64decode(payload["data"], validate=True)
        return ImageMessage(
            height=int(payload.get("height", 0)),
            width=int(payload.get("width", 0)),
            encoding=str(payload["encoding"]),
            step=int(payload.get("step", 0)),
            data=data,
            frame_id=int(payload.get("frame_id", 0)),
            timestamp=payload.get("timestamp"),
            task_id=payload.get("task_id"),
        )
    except (KeyError, TypeError, ValueError, binascii.Error) as e:
        raise DecodeError(f"Malformed image message: {e}", encoding) from e


def image_message_to_dict(message: ImageMessage) -> Dict:
    """Serialize an ImageMessage into a JSON-compatible dictionary."""
    return {
        "task_id": message.task_id,
        "frame_id": message.frame_id,
        "timestamp": message.timestamp,
        "encoding": message.encoding,
        "height": message.height,
        "width": message.width,
        "step": message.step,
        "data": base64.b64encode(message.data).decode('utf-8'),
    }


def encode_image_message(frame: np.ndarray, encoding: str = "bgr8", frame_id: int = 0,
                         task_id: Optional[str] = None, quality: int = 90) -> ImageMessage:
    """
    Wrap a numpy frame into an ImageMessage.

    Args:
        frame: Image array laid out as the given encoding (BGR for compressed encodings)
        encoding: One of the raw encodings or 'jpeg' / 'png'
        frame_id: Frame sequence number
        task_id: Optional task identifier
        quality: JPEG compression quality

    Returns:
        ImageMessage ready to be serialized
    """
    if encoding in COMPRESSED_ENCODINGS:
        params = [int(cv2.IMWRITE_JPEG_QUALITY), quality] if encoding == "jpeg" else []
        success, buffer = cv2.imencode(COMPRESSED_ENCODINGS[encoding], frame, params)
        if not success:
            raise ValueError(f"Failed to encode frame to {encoding}")
        height, width = frame.shape[:2]
        return ImageMessage(height=height, width=width, encoding=encoding, step=0,
                            data=buffer.tobytes(), frame_id=frame_id,
                            timestamp=_iso_timestamp(), task_id=task_id)

    if encoding not in RAW_ENCODINGS:
        raise ValueError(f"Unsupported encoding '{encoding}'")
    frame = np.ascontiguousarray(frame, dtype=np.uint8)
    height, width = frame.shape[:2]
    channels = RAW_ENCODINGS[encoding][0]
    return ImageMessage(height=height, width=width, encoding=encoding, step=width * channels,
                        data=frame.tobytes(), frame_id=frame_id,
                        timestamp=_iso_timestamp(), task_id=task_id)


def serialize_image_message(message: ImageMessage) -> bytes:
    """Serialize message to JSON bytes for the image topic."""
    return json.dumps(image_message_to_dict(message)).encode('utf-8')


def deserialize_image_message(data: bytes) -> ImageMessage:
    """Deserialize JSON bytes from the image topic."""
    if not isinstance(data, (bytes, bytearray)):
        raise DecodeError(f"Image record has no payload ({type(data).__name__})")
    try:
        payload = json.loads(data.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(f"Image record is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise DecodeError("Image record is not a JSON object")
    return image_message_from_dict(payload)
