from .frame_displayer import FrameDisplayer
from .skeleton_drawer import draw_pose

__all__ = ['FrameDisplayer', 'draw_pose']
