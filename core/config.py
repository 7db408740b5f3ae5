"""
Startup configuration for skeleton tracking.

Raw option values (from YAML, environment or command line) are collected in
SkeletonTrackingOptions and resolved exactly once into an immutable PoseConfig
that is handed to the pipeline.
"""
import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConfigError

logger = logging.getLogger(__name__)

_RESOLUTION_PATTERN = re.compile(r"\s*(\d+)x(\d+)\s*")

_RESOLUTION_EXAMPLES = {
    'resolution': '960x540',
    'net_resolution': '656x368 (multiples of 16)',
}


class PoseModel(Enum):
    """Pretrained pose network variants."""
    COCO_18 = "COCO_18"
    MPI_15 = "MPI_15"
    MPI_15_4 = "MPI_15_4"


POSE_MODEL_NAMES = {
    'COCO': PoseModel.COCO_18,
    'MPI': PoseModel.MPI_15,
    'MPI_4_layers': PoseModel.MPI_15_4,
}


@dataclass(frozen=True)
class Size:
    width: int
    height: int

    def as_tuple(self):
        return self.width, self.height

    def __str__(self):
        return f"{self.width}x{self.height}"


class SkeletonTrackingOptions(BaseModel):
    """Raw startup options, with the defaults used when an option is not given."""
    model_config = ConfigDict(extra='ignore', protected_namespaces=())

    logging_level: int = 3
    model_pose: str = "COCO"
    model_folder: str = "models/"
    net_resolution: str = "656x368"
    resolution: str = "1280x720"
    num_gpu_start: int = 0
    scale_gap: float = 0.3
    num_scales: int = 1
    alpha_pose: float = 0.6


@dataclass(frozen=True)
class PoseConfig:
    """Resolved, immutable configuration consumed by the pose engine and pipeline."""
    output_size: Size
    net_input_size: Size
    net_output_size: Size
    pose_model: PoseModel
    model_folder: str
    num_gpu_start: int = 0
    num_scales: int = 1
    scale_gap: float = 0.3
    alpha_pose: float = 0.6
    logging_level: int = 3


def parse_resolution(value: str, name: str = 'resolution') -> Size:
    """Parse a ``WIDTHxHEIGHT`` string into a Size with positive dimensions."""
    example = _RESOLUTION_EXAMPLES.get(name, '960x540')
    match = _RESOLUTION_PATTERN.fullmatch(value) if isinstance(value, str) else None
    if match is None:
        raise ConfigError(f"Error, {name} format ({value}) invalid, should be e.g., {example}")
    width, height = int(match.group(1)), int(match.group(2))
    if width <= 0 or height <= 0:
        raise ConfigError(f"Error, {name} ({value}) must have positive width and height, e.g., {example}")
    return Size(width, height)


def pose_model_from_string(name: str) -> PoseModel:
    """Map a pose model name (COCO, MPI, MPI_4_layers) to its variant."""
    try:
        return POSE_MODEL_NAMES[name]
    except (KeyError, TypeError):
        raise ConfigError(
            f"String '{name}' does not correspond to any model ({', '.join(POSE_MODEL_NAMES)})"
        ) from None


def resolve_config(options: Union[SkeletonTrackingOptions, Mapping[str, Any], None] = None) -> PoseConfig:
    """
    Resolve raw options into a PoseConfig.

    Args:
        options: option model, plain mapping of option values, or None for defaults.

    Returns:
        The validated, immutable configuration.

    Raises:
        ConfigError: if any option is malformed or options contradict each other.
    """
    if options is None:
        options = SkeletonTrackingOptions()
    elif not isinstance(options, SkeletonTrackingOptions):
        try:
            options = SkeletonTrackingOptions(**dict(options))
        except ValidationError as e:
            raise ConfigError(f"Invalid skeleton tracking options: {e}") from e

    logger.debug(f"Resolving configuration from options: {options.model_dump()}")

    if not 0 <= options.logging_level <= 255:
        raise ConfigError("Wrong logging_level value, must be in the range [0, 255].")

    output_size = parse_resolution(options.resolution, 'resolution')
    net_input_size = parse_resolution(options.net_resolution, 'net_resolution')
    net_output_size = net_input_size
    pose_model = pose_model_from_string(options.model_pose)

    if not 0. <= options.alpha_pose <= 1.:
        raise ConfigError("Alpha value for blending must be in the range [0,1].")
    if options.num_scales < 1:
        raise ConfigError("num_scales must be at least 1.")
    if options.num_scales > 1 and not options.scale_gap > 0.:
        raise ConfigError("Incompatible flag configuration: scale_gap must be greater than 0 or num_scales = 1.")
    if options.num_gpu_start < 0:
        raise ConfigError("num_gpu_start must be a non-negative device index.")

    config = PoseConfig(
        output_size=output_size,
        net_input_size=net_input_size,
        net_output_size=net_output_size,
        pose_model=pose_model,
        model_folder=os.path.expanduser(options.model_folder),
        num_gpu_start=options.num_gpu_start,
        num_scales=options.num_scales,
        scale_gap=float(options.scale_gap),
        alpha_pose=float(options.alpha_pose),
        logging_level=options.logging_level,
    )
    logger.debug(f"Resolved configuration: {config}")
    return config


def options_from_sources(file_config: Optional[Mapping[str, Any]] = None,
                         overrides: Optional[Mapping[str, Any]] = None) -> SkeletonTrackingOptions:
    """Merge file options and overrides (later wins, None values skipped) into an option model."""
    merged = {}
    for source in (file_config or {}, overrides or {}):
        merged.update({k: v for k, v in source.items() if v is not None})
    try:
        return SkeletonTrackingOptions(**merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid skeleton tracking options: {e}") from e
