from .base_model import PoseEngine
from .openpose_model import OpenPoseModel

__all__ = ['PoseEngine', 'OpenPoseModel']
