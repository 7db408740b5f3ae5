from typing import Dict, List, Tuple

import cv2
import numpy as np

PART_COLORS: Dict[str, Tuple[int, int, int]] = {
    'left_arm': (255, 0, 0),  # Blue
    'right_arm': (0, 0, 255),  # Red
    'torso': (0, 255, 0),  # Green
    'left_leg': (0, 255, 255),  # Yellow
    'right_leg': (255, 0, 255),  # Magenta
    'head': (255, 255, 255)  # White
}


def draw_pose(
        frame: np.ndarray,
        keypoints: np.ndarray,
        part_connections: Dict[str, List[Tuple[int, int]]],
        scale: float = 1.0,
        alpha: float = 1.0,
        joint_color: Tuple[int, int, int] = (0, 0, 255),
        joint_radius: int = 3,
        line_thickness: int = 2
) -> np.ndarray:
    """
    Draw skeletons for multiple persons on the frame and blend them in place.

    Args:
        frame (np.ndarray): The image buffer to draw on (modified in place).
        keypoints (np.ndarray): (people, parts, 3) array of x, y, score in input-frame pixels.
        part_connections (dict): Limb name -> list of (start_part, end_part) index pairs.
        scale (float): Input-to-output scale applied to keypoint coordinates.
        alpha (float): Blending factor; 1 shows the skeleton completely, 0 hides it.
        joint_color (tuple): Color for the joints.
        joint_radius (int): Radius of the joints.
        line_thickness (int): Thickness of skeleton lines.

    Returns:
        np.ndarray: The frame with blended skeletons.
    """
    if not isinstance(frame, np.ndarray):
        raise ValueError("Frame must be a numpy array")

    if alpha <= 0 or keypoints is None or len(keypoints) == 0:
        return frame

    overlay = frame.copy()

    for person_pose in keypoints:
        for part, connections in part_connections.items():
            color = PART_COLORS.get(part, (0, 255, 0))
            for idx_start, idx_end in connections:
                if idx_start >= len(person_pose) or idx_end >= len(person_pose):
                    continue
                x1, y1, score1 = person_pose[idx_start]
                x2, y2, score2 = person_pose[idx_end]
                if score1 <= 0 or score2 <= 0:
                    continue
                pt1 = (int(x1 * scale), int(y1 * scale))
                pt2 = (int(x2 * scale), int(y2 * scale))
                cv2.line(overlay, pt1, pt2, color, thickness=line_thickness, lineType=cv2.LINE_AA)

        # Draw joints
        for x, y, score in person_pose:
            if score <= 0:
                continue
            center = (int(x * scale), int(y * scale))
            cv2.circle(overlay, center, joint_radius, joint_color, thickness=-1, lineType=cv2.LINE_AA)

    cv2.addWeighted(overlay, alpha, frame, 1.0 - alpha, 0, dst=frame)
    return frame
