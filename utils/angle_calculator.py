"""
Angle Calculator Utility
Calculates joint angles and line tilts from 2D body landmarks.
"""

import numpy as np
from typing import Dict, Tuple


class AngleCalculator:
    """
    Trigonometric primitives for pose analysis.

    Uses 8 key angles for yoga pose checks:
    - left_elbow, right_elbow
    - left_shoulder, right_shoulder
    - left_hip, right_hip
    - left_knee, right_knee
    """

    # Angle definitions: joint_key -> (label, point_a, vertex, point_b)
    ANGLE_DEFINITIONS: Dict[str, Tuple[str, str, str, str]] = {
        'left_elbow': ('Left Elbow', 'left_shoulder', 'left_elbow', 'left_wrist'),
        'right_elbow': ('Right Elbow', 'right_shoulder', 'right_elbow', 'right_wrist'),
        'left_shoulder': ('Left Shoulder', 'left_hip', 'left_shoulder', 'left_elbow'),
        'right_shoulder': ('Right Shoulder', 'right_hip', 'right_shoulder', 'right_elbow'),
        'left_hip': ('Left Hip', 'left_shoulder', 'left_hip', 'left_knee'),
        'right_hip': ('Right Hip', 'right_shoulder', 'right_hip', 'right_knee'),
        'left_knee': ('Left Knee', 'left_hip', 'left_knee', 'left_ankle'),
        'right_knee': ('Right Knee', 'right_hip', 'right_knee', 'right_ankle'),
    }

    @staticmethod
    def calculate_angle(
        point_a: Tuple[float, float],
        vertex: Tuple[float, float],
        point_b: Tuple[float, float]
    ) -> float:
        """
        Calculate angle at vertex between point_a and point_b.

        The magnitude of the cross product is used so the result does not
        depend on which way the joint bends.

        Args:
            point_a: First point (x, y)
            vertex: Vertex point where angle is measured
            point_b: Second point (x, y)

        Returns:
            Angle in degrees [0, 180]
        """
        v = np.asarray(vertex, dtype=float)
        va = np.asarray(point_a, dtype=float) - v
        vb = np.asarray(point_b, dtype=float) - v

        dot = va[0] * vb[0] + va[1] * vb[1]
        cross = va[0] * vb[1] - va[1] * vb[0]

        return float(np.degrees(np.arctan2(abs(cross), dot)))

    @staticmethod
    def calculate_line_angle(
        point_1: Tuple[float, float],
        point_2: Tuple[float, float]
    ) -> float:
        """
        Angle of the line point_1 -> point_2 against the horizontal.

        Returns:
            Angle in degrees (-180, 180]
        """
        dx = float(point_2[0]) - float(point_1[0])
        dy = float(point_2[1]) - float(point_1[1])
        return float(np.degrees(np.arctan2(dy, dx)))
