from .pipeline import FramePipeline, FrameResult, FrameStatus
from .skeleton_worker import SkeletonTrackingWorker

__all__ = ['FramePipeline', 'FrameResult', 'FrameStatus', 'SkeletonTrackingWorker']
