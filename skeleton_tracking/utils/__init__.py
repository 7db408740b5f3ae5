from .parse_config_string import parse_config_string
from .serializers import (
    ImageMessage, to_bgra8, encode_image_message,
    image_message_from_dict, image_message_to_dict,
    serialize_image_message, deserialize_image_message
)
from .setup_logging import setup_logging, priority_to_log_level

__all__ = [
    'setup_logging', 'priority_to_log_level',
    'parse_config_string',
    # Serialization utilities
    'ImageMessage', 'to_bgra8', 'encode_image_message',
    'image_message_from_dict', 'image_message_to_dict',
    'serialize_image_message', 'deserialize_image_message'
]
