"""
Yoga Pose Feedback Pipeline

4-Step Pipeline:
1. Skeleton - Named 2D landmarks from the keypoint detector
2. Pose Analysis - Joint angles, alignment, balance, confidence
3. Pose Comparison - Score against a reference pose from the catalog
4. Feedback - Status, primary message, ranked corrections, encouragement
"""

from .step1_skeleton import KEYPOINT_NAMES, Landmark, Skeleton
from .step2_pose_analyzer import (
    AnalyzerSettings,
    BalanceState,
    BodyAlignment,
    JointAngle,
    PoseAnalysis,
    PoseAnalyzer,
    analyze_pose,
    is_visible,
)
from .step3_pose_comparator import (
    AngleRequirement,
    CatalogError,
    ComparisonResult,
    Correction,
    PoseComparator,
    PoseRequirements,
    ReferenceCatalog,
    ReferencePose,
    Severity,
    compare_pose_to_reference,
)
from .step4_feedback import (
    FeedbackGenerator,
    FeedbackStatus,
    PoseFeedback,
    generate_feedback,
    score_color,
    status_emoji,
)

__all__ = [
    'KEYPOINT_NAMES',
    'Landmark',
    'Skeleton',
    'AnalyzerSettings',
    'BalanceState',
    'BodyAlignment',
    'JointAngle',
    'PoseAnalysis',
    'PoseAnalyzer',
    'analyze_pose',
    'is_visible',
    'AngleRequirement',
    'CatalogError',
    'ComparisonResult',
    'Correction',
    'PoseComparator',
    'PoseRequirements',
    'ReferenceCatalog',
    'ReferencePose',
    'Severity',
    'compare_pose_to_reference',
    'FeedbackGenerator',
    'FeedbackStatus',
    'PoseFeedback',
    'generate_feedback',
    'score_color',
    'status_emoji',
]
