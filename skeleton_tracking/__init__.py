# Import io interfaces
from .io import *

# Import workers
from .base_worker import BaseWorker

# Import utilities
from .utils import *

__version__ = "1.0.0"

__all__ = [
    # Core classes
    'BaseWorker',
    # I/O interfaces (imported from .io)
    'KafkaInput',
    'VideoInput',
    # Utilities (imported from .utils)
    'ImageMessage', 'to_bgra8', 'encode_image_message',
    'image_message_from_dict', 'image_message_to_dict',
    'serialize_image_message', 'deserialize_image_message',
    'setup_logging', 'priority_to_log_level',
    'parse_config_string',
]
