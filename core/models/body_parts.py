"""
Body part tables for the supported pose model variants.

Heatmap channel i of a network output corresponds to BODY_PARTS[model][i];
the background channel follows the last body part.
"""
from typing import Dict, List, Tuple

from core.config import PoseModel

COCO_BODY_PARTS = [
    "Nose", "Neck",
    "RShoulder", "RElbow", "RWrist",
    "LShoulder", "LElbow", "LWrist",
    "RHip", "RKnee", "RAnkle",
    "LHip", "LKnee", "LAnkle",
    "REye", "LEye", "REar", "LEar",
]

MPI_BODY_PARTS = [
    "Head", "Neck",
    "RShoulder", "RElbow", "RWrist",
    "LShoulder", "LElbow", "LWrist",
    "RHip", "RKnee", "RAnkle",
    "LHip", "LKnee", "LAnkle",
    "Chest",
]

COCO_PART_CONNECTIONS: Dict[str, List[Tuple[int, int]]] = {
    'right_arm': [(1, 2), (2, 3), (3, 4)],
    'left_arm': [(1, 5), (5, 6), (6, 7)],
    'right_leg': [(1, 8), (8, 9), (9, 10)],
    'left_leg': [(1, 11), (11, 12), (12, 13)],
    'head': [(1, 0), (0, 14), (14, 16), (0, 15), (15, 17)],
}

MPI_PART_CONNECTIONS: Dict[str, List[Tuple[int, int]]] = {
    'head': [(0, 1)],
    'right_arm': [(1, 2), (2, 3), (3, 4)],
    'left_arm': [(1, 5), (5, 6), (6, 7)],
    'torso': [(1, 14)],
    'right_leg': [(14, 8), (8, 9), (9, 10)],
    'left_leg': [(14, 11), (11, 12), (12, 13)],
}

BODY_PARTS: Dict[PoseModel, List[str]] = {
    PoseModel.COCO_18: COCO_BODY_PARTS,
    PoseModel.MPI_15: MPI_BODY_PARTS,
    PoseModel.MPI_15_4: MPI_BODY_PARTS,
}

PART_CONNECTIONS: Dict[PoseModel, Dict[str, List[Tuple[int, int]]]] = {
    PoseModel.COCO_18: COCO_PART_CONNECTIONS,
    PoseModel.MPI_15: MPI_PART_CONNECTIONS,
    PoseModel.MPI_15_4: MPI_PART_CONNECTIONS,
}

# Relative to the configured model folder
MODEL_FILES: Dict[PoseModel, str] = {
    PoseModel.COCO_18: "pose/coco/pose_iter_440000.onnx",
    PoseModel.MPI_15: "pose/mpi/pose_iter_160000.onnx",
    PoseModel.MPI_15_4: "pose/mpi/pose_iter_160000_4_stages.onnx",
}
