"""
Utils: Visualization
Drawing helpers for skeleton overlays and pose feedback panels.
"""

import cv2
import numpy as np
from typing import Iterable, Optional, Tuple

import config

# Skeleton connections (pairs of landmark names)
SKELETON_CONNECTIONS: Tuple[Tuple[str, str], ...] = (
    ('nose', 'left_eye'),
    ('nose', 'right_eye'),
    ('left_eye', 'left_ear'),
    ('right_eye', 'right_ear'),
    ('left_shoulder', 'right_shoulder'),
    ('left_shoulder', 'left_elbow'),
    ('right_shoulder', 'right_elbow'),
    ('left_elbow', 'left_wrist'),
    ('right_elbow', 'right_wrist'),
    ('left_shoulder', 'left_hip'),
    ('right_shoulder', 'right_hip'),
    ('left_hip', 'right_hip'),
    ('left_hip', 'left_knee'),
    ('right_hip', 'right_knee'),
    ('left_knee', 'left_ankle'),
    ('right_knee', 'right_ankle'),
)

# Correction joint keys that refer to a pair of landmarks
_GROUP_JOINTS = {
    'shoulders': ('left_shoulder', 'right_shoulder'),
    'hips': ('left_hip', 'right_hip'),
}


def _to_pixel(x: float, y: float, frame_shape: Tuple[int, ...], normalized: bool) -> Tuple[int, int]:
    if normalized:
        h, w = frame_shape[:2]
        return int(round(x * w)), int(round(y * h))
    return int(round(x)), int(round(y))


def highlight_joints(joint_keys: Iterable[str]) -> Tuple[str, ...]:
    """Expand correction joint keys into landmark names to highlight."""
    names = []
    for key in joint_keys:
        names.extend(_GROUP_JOINTS.get(key, (key,)))
    return tuple(names)


def draw_skeleton(
    frame: np.ndarray,
    skeleton,
    highlight: Iterable[str] = (),
    normalized: bool = False,
    visibility_threshold: float = config.VISIBILITY_THRESHOLD
) -> np.ndarray:
    """
    Draw visible landmarks and bones, highlighting the given landmarks.

    Args:
        frame: BGR frame
        skeleton: Skeleton to draw
        highlight: Landmark names drawn in red
        normalized: True if landmark coordinates are in [0, 1]
        visibility_threshold: Landmarks at or below this are skipped
    """
    frame_copy = frame.copy()
    highlighted = set(highlight)
    landmarks = {
        name: lm for name, lm in skeleton.landmark_dict.items()
        if lm.confidence > visibility_threshold
    }

    for start, end in SKELETON_CONNECTIONS:
        if start not in landmarks or end not in landmarks:
            continue
        color = config.COLOR_RED if (start in highlighted or end in highlighted) else config.COLOR_GREEN
        p1 = _to_pixel(landmarks[start].x, landmarks[start].y, frame_copy.shape, normalized)
        p2 = _to_pixel(landmarks[end].x, landmarks[end].y, frame_copy.shape, normalized)
        cv2.line(frame_copy, p1, p2, color, 3)

    for name, lm in landmarks.items():
        is_highlighted = name in highlighted
        radius = 8 if is_highlighted else 5
        center = _to_pixel(lm.x, lm.y, frame_copy.shape, normalized)
        cv2.circle(frame_copy, center, radius,
                   config.COLOR_RED if is_highlighted else config.COLOR_GREEN, -1)
        cv2.circle(frame_copy, center, radius - 2, config.COLOR_WHITE, -1)

    return frame_copy


def draw_feedback_panel(
    frame: np.ndarray,
    feedback,
    pose_name: Optional[str] = None
) -> np.ndarray:
    """
    Draw score, status and the primary message in a bottom panel.

    Args:
        frame: BGR frame
        feedback: PoseFeedback to display
        pose_name: Optional reference pose name shown above the score
    """
    frame_copy = frame.copy()
    h, w = frame_copy.shape[:2]
    color = config.COLOR_GREEN if feedback.overall_score >= config.THRESHOLD_GOOD else config.COLOR_ORANGE

    # Background box
    cv2.rectangle(frame_copy, (5, h - 110), (w - 5, h - 5), config.COLOR_BLACK, -1)
    cv2.rectangle(frame_copy, (5, h - 110), (w - 5, h - 5), color, 2)

    if pose_name:
        cv2.putText(frame_copy, pose_name, (15, h - 80),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, config.COLOR_WHITE, 1)

    status = feedback.status.value.replace('_', ' ').title()
    cv2.putText(frame_copy, f"Score: {feedback.overall_score} ({status})", (15, h - 50),
                cv2.FONT_HERSHEY_SIMPLEX, 0.8, color, 2)
    cv2.putText(frame_copy, feedback.primary_message, (15, h - 20),
                cv2.FONT_HERSHEY_SIMPLEX, 0.6, config.COLOR_WHITE, 1)

    return frame_copy


def draw_feedback_overlay(
    frame: np.ndarray,
    skeleton,
    feedback,
    pose_name: Optional[str] = None,
    normalized: bool = False
) -> np.ndarray:
    """Skeleton with corrected joints highlighted, plus the feedback panel."""
    highlight = highlight_joints(c.joint_key for c in feedback.corrections)
    annotated = draw_skeleton(frame, skeleton, highlight=highlight, normalized=normalized)
    return draw_feedback_panel(annotated, feedback, pose_name)
