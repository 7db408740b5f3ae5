# Input interfaces
from .kafka_input_interface import KafkaInput
from .video_input_interface import VideoInput

__all__ = [
    'KafkaInput',
    'VideoInput',
]
