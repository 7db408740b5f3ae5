from .config import PoseConfig, PoseModel, Size, SkeletonTrackingOptions, resolve_config
from .errors import ConfigError, DecodeError, EngineError, SkeletonTrackingError

__all__ = [
    'PoseConfig',
    'PoseModel',
    'Size',
    'SkeletonTrackingOptions',
    'resolve_config',
    'ConfigError',
    'DecodeError',
    'EngineError',
    'SkeletonTrackingError',
]
