"""
Step 2: Pose Analysis
Derives joint angles, gross alignment, balance and a confidence figure
from a single skeleton.

The analyzer never raises for degraded input: missing or low-confidence
landmarks simply shrink the analysis (fewer angles, default alignment,
lower confidence).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

import config
from utils.angle_calculator import AngleCalculator

from .step1_skeleton import Landmark, Skeleton

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JointAngle:
    """Interior angle at one skeletal vertex."""
    label: str       # e.g. "Left Knee"
    joint_key: str   # e.g. "left_knee"
    angle: float     # degrees [0, 180]


@dataclass(frozen=True)
class BodyAlignment:
    """Gross alignment flags."""
    shoulders_level: bool = False
    hips_level: bool = False
    # Horizontal nose vs. mid-hip offset, clamped to [-1, 1]. A coarse lean
    # indicator only; it does not measure spinal curvature.
    spine_offset: float = 0.0


@dataclass(frozen=True)
class BalanceState:
    """Whole-skeleton centroid used as a weight distribution proxy."""
    center_of_mass: Tuple[float, float] = (0.0, 0.0)
    is_balanced: bool = True


@dataclass(frozen=True)
class PoseAnalysis:
    """Result of analyzing one skeleton."""
    angles: Tuple[JointAngle, ...] = ()
    alignment: BodyAlignment = field(default_factory=BodyAlignment)
    balance: BalanceState = field(default_factory=BalanceState)
    confidence: float = 0.0

    @classmethod
    def empty(cls) -> "PoseAnalysis":
        return cls()

    def angle_for(self, joint_key: str) -> Optional[JointAngle]:
        """Get the measured angle for a joint, if it was visible."""
        for joint_angle in self.angles:
            if joint_angle.joint_key == joint_key:
                return joint_angle
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'angles': [
                {'label': a.label, 'joint_key': a.joint_key, 'angle': float(a.angle)}
                for a in self.angles
            ],
            'alignment': {
                'shoulders_level': self.alignment.shoulders_level,
                'hips_level': self.alignment.hips_level,
                'spine_offset': float(self.alignment.spine_offset),
            },
            'balance': {
                'center_of_mass': [float(v) for v in self.balance.center_of_mass],
                'is_balanced': self.balance.is_balanced,
            },
            'confidence': float(self.confidence),
        }


@dataclass(frozen=True)
class AnalyzerSettings:
    """
    Tunable thresholds for the analyzer.

    spine_scale and balance_margin are in the coordinate units of the
    incoming landmarks; the defaults assume pixel coordinates of a
    config.CAMERA_WIDTH wide frame.
    """
    visibility_threshold: float = config.VISIBILITY_THRESHOLD
    level_tolerance: float = config.LEVEL_TOLERANCE_DEGREES
    spine_scale: float = config.SPINE_OFFSET_SCALE
    balance_margin: float = config.BALANCE_MARGIN

    @classmethod
    def for_normalized_coordinates(
        cls,
        frame_width: float = config.CAMERA_WIDTH
    ) -> "AnalyzerSettings":
        """Settings for landmarks normalized to [0, 1] by frame_width."""
        return cls(
            spine_scale=config.SPINE_OFFSET_SCALE / frame_width,
            balance_margin=config.BALANCE_MARGIN / frame_width,
        )


def is_visible(
    landmark: Optional[Landmark],
    threshold: float = config.VISIBILITY_THRESHOLD
) -> bool:
    """A landmark is visible if present and strictly above the threshold."""
    return landmark is not None and landmark.confidence > threshold


class PoseAnalyzer:
    """
    Rule-based pose analyzer.

    Features:
    - 8 joint angles (elbows, shoulders, hips, knees)
    - Shoulder / hip leveling and a horizontal lean indicator
    - Centroid balance check against the ankles
    - Mean detection confidence
    """

    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or AnalyzerSettings()

    def _visible(self, landmark: Optional[Landmark]) -> bool:
        return is_visible(landmark, self.settings.visibility_threshold)

    # =========================================================================
    # ANGLES
    # =========================================================================

    def extract_angles(self, landmarks: Dict[str, Landmark]) -> Tuple[JointAngle, ...]:
        """Emit one JointAngle per definition whose three points are visible."""
        angles: List[JointAngle] = []

        for joint_key, (label, a_name, v_name, b_name) in AngleCalculator.ANGLE_DEFINITIONS.items():
            pt_a = landmarks.get(a_name)
            vertex = landmarks.get(v_name)
            pt_b = landmarks.get(b_name)

            if not (self._visible(pt_a) and self._visible(vertex) and self._visible(pt_b)):
                continue

            angle = AngleCalculator.calculate_angle(pt_a.point, vertex.point, pt_b.point)
            angles.append(JointAngle(label=label, joint_key=joint_key, angle=angle))

        return tuple(angles)

    # =========================================================================
    # ALIGNMENT & BALANCE
    # =========================================================================

    def _is_level(self, left: Optional[Landmark], right: Optional[Landmark]) -> bool:
        if not (self._visible(left) and self._visible(right)):
            return False
        tilt = abs(AngleCalculator.calculate_line_angle(left.point, right.point))
        return tilt < self.settings.level_tolerance

    def assess_alignment(self, landmarks: Dict[str, Landmark]) -> BodyAlignment:
        left_hip = landmarks.get('left_hip')
        right_hip = landmarks.get('right_hip')
        nose = landmarks.get('nose')

        spine_offset = 0.0
        if self._visible(nose) and self._visible(left_hip) and self._visible(right_hip):
            mid_hip_x = (left_hip.x + right_hip.x) / 2
            spine_offset = (nose.x - mid_hip_x) / self.settings.spine_scale
            spine_offset = float(np.clip(spine_offset, -1.0, 1.0))

        return BodyAlignment(
            shoulders_level=self._is_level(
                landmarks.get('left_shoulder'), landmarks.get('right_shoulder')
            ),
            hips_level=self._is_level(left_hip, right_hip),
            spine_offset=spine_offset,
        )

    def assess_balance(
        self,
        skeleton: Skeleton,
        landmarks: Dict[str, Landmark]
    ) -> BalanceState:
        visible = [lm for lm in skeleton if self._visible(lm)]
        if not visible:
            return BalanceState()

        points = np.array([lm.point for lm in visible], dtype=float)
        cx, cy = points.mean(axis=0)
        center = (float(cx), float(cy))

        is_balanced = True
        left_ankle = landmarks.get('left_ankle')
        right_ankle = landmarks.get('right_ankle')
        if self._visible(left_ankle) and self._visible(right_ankle):
            margin = self.settings.balance_margin
            min_x = min(left_ankle.x, right_ankle.x)
            max_x = max(left_ankle.x, right_ankle.x)
            is_balanced = min_x - margin <= center[0] <= max_x + margin

        return BalanceState(center_of_mass=center, is_balanced=is_balanced)

    # =========================================================================
    # MAIN ANALYSIS
    # =========================================================================

    def analyze(self, skeleton: Optional[Skeleton]) -> PoseAnalysis:
        """
        Analyze one skeleton.

        Returns:
            PoseAnalysis (empty when the skeleton is missing or has no landmarks)
        """
        if skeleton is None or len(skeleton) == 0:
            logger.debug("No landmarks supplied, returning empty analysis")
            return PoseAnalysis.empty()

        landmarks = skeleton.landmark_dict
        angles = self.extract_angles(landmarks)

        # Mean over every landmark, so poorly detected points drag it down
        confidence = float(np.mean([lm.confidence for lm in skeleton]))

        analysis = PoseAnalysis(
            angles=angles,
            alignment=self.assess_alignment(landmarks),
            balance=self.assess_balance(skeleton, landmarks),
            confidence=confidence,
        )
        logger.debug(
            "Analyzed %d landmarks: %d angles, confidence %.2f",
            len(skeleton), len(angles), confidence
        )
        return analysis


def analyze_pose(
    skeleton: Optional[Skeleton],
    settings: Optional[AnalyzerSettings] = None
) -> PoseAnalysis:
    """Analyze a skeleton with a one-off analyzer."""
    return PoseAnalyzer(settings).analyze(skeleton)
