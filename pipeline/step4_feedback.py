"""
Step 4: Feedback Generation
Turns an analysis (and optional reference pose) into user-facing feedback:
score, status band, primary message, up to 3 ranked corrections and an
encouragement line.

generate() is total: missing analyses, low confidence and missing
references all produce a renderable PoseFeedback.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import config

from .step2_pose_analyzer import PoseAnalysis
from .step3_pose_comparator import (
    Correction,
    PoseComparator,
    ReferenceCatalog,
    ReferencePose,
    Severity,
)

logger = logging.getLogger(__name__)


class FeedbackStatus(Enum):
    """Qualitative tier derived from a score."""
    EXCELLENT = "excellent"
    GOOD = "good"
    NEEDS_WORK = "needs_work"
    POOR = "poor"

    @classmethod
    def from_score(cls, score: float) -> "FeedbackStatus":
        if score >= config.THRESHOLD_EXCELLENT:
            return cls.EXCELLENT
        elif score >= config.THRESHOLD_GOOD:
            return cls.GOOD
        elif score >= config.THRESHOLD_NEEDS_WORK:
            return cls.NEEDS_WORK
        return cls.POOR


ENCOURAGEMENTS: Dict[FeedbackStatus, Tuple[str, ...]] = {
    FeedbackStatus.EXCELLENT: (
        "Perfect form! You're doing great!",
        "Excellent alignment! Keep it up!",
        "Beautiful pose! You've mastered this!",
        "Impressive! Your form is spot on!",
    ),
    FeedbackStatus.GOOD: (
        "Great job! Just a few small adjustments.",
        "You're doing well! Minor tweaks will perfect it.",
        "Almost there! Keep focusing on your alignment.",
        "Good progress! You're getting stronger!",
    ),
    FeedbackStatus.NEEDS_WORK: (
        "Keep practicing! You're improving!",
        "Focus on the corrections and try again.",
        "Every practice makes you better!",
        "You've got this! Pay attention to form.",
    ),
    FeedbackStatus.POOR: (
        "Don't give up! Start with the basics.",
        "Try adjusting your position step by step.",
        "Focus on one correction at a time.",
        "Take it slow and build your foundation.",
    ),
}

STATUS_EMOJI = {
    FeedbackStatus.EXCELLENT: "🌟",
    FeedbackStatus.GOOD: "👍",
    FeedbackStatus.NEEDS_WORK: "💪",
    FeedbackStatus.POOR: "🎯",
}

NO_POSE_MESSAGE = "Unable to detect your pose. Please adjust your position."
NO_POSE_ENCOURAGEMENT = "Make sure your full body is visible to the camera."
LOW_CONFIDENCE_MESSAGE = "Low detection confidence. Please adjust lighting or position."
LOW_CONFIDENCE_ENCOURAGEMENT = "Try standing in better lighting with more space around you."
GENERAL_OK_MESSAGE = "Good posture! Select a pose to check alignment."


@dataclass(frozen=True)
class PoseFeedback:
    """User-facing feedback for one frame."""
    overall_score: int
    status: FeedbackStatus
    primary_message: str
    corrections: Tuple[Correction, ...] = ()
    encouragement: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'overall_score': self.overall_score,
            'status': self.status.value,
            'primary_message': self.primary_message,
            'corrections': [c.to_dict() for c in self.corrections],
            'encouragement': self.encouragement,
        }


def score_color(score: float) -> str:
    """Hex badge color for a score."""
    return config.SCORE_COLORS[FeedbackStatus.from_score(score).value]


def status_emoji(status: FeedbackStatus) -> str:
    return STATUS_EMOJI[status]


class FeedbackGenerator:
    """
    Maps analyses to PoseFeedback.

    The random generator only picks the encouragement line; pass a seeded
    random.Random to make the whole result reproducible.
    """

    MIN_CONFIDENCE = config.MIN_ANALYSIS_CONFIDENCE
    SPINE_LEAN_THRESHOLD = config.SPINE_LEAN_THRESHOLD
    MAX_CORRECTIONS = config.MAX_CORRECTIONS

    def __init__(
        self,
        catalog: Optional[ReferenceCatalog] = None,
        comparator: Optional[PoseComparator] = None,
        rng: Optional[random.Random] = None
    ):
        self.catalog = catalog if catalog is not None else ReferenceCatalog()
        self.comparator = comparator or PoseComparator()
        self.rng = rng or random.Random()

    def pick_encouragement(self, status: FeedbackStatus) -> str:
        return self.rng.choice(ENCOURAGEMENTS[status])

    # =========================================================================
    # MAIN ENTRY POINTS
    # =========================================================================

    def generate(
        self,
        analysis: Optional[PoseAnalysis],
        reference: Optional[ReferencePose] = None
    ) -> PoseFeedback:
        if analysis is None:
            return PoseFeedback(
                overall_score=0,
                status=FeedbackStatus.POOR,
                primary_message=NO_POSE_MESSAGE,
                encouragement=NO_POSE_ENCOURAGEMENT,
            )

        if analysis.confidence < self.MIN_CONFIDENCE:
            return PoseFeedback(
                overall_score=0,
                status=FeedbackStatus.POOR,
                primary_message=LOW_CONFIDENCE_MESSAGE,
                encouragement=LOW_CONFIDENCE_ENCOURAGEMENT,
            )

        if reference is None:
            return self.generate_general(analysis)

        comparison = self.comparator.compare(analysis, reference)
        status = FeedbackStatus.from_score(comparison.score)

        # sorted() is stable, so equal priorities keep comparator order
        corrections = tuple(
            sorted(comparison.corrections, key=lambda c: c.priority)[:self.MAX_CORRECTIONS]
        )

        if not corrections:
            primary_message = reference.success_message
        elif len(corrections) == 1:
            primary_message = corrections[0].message
        else:
            primary_message = f"Focus on: {corrections[0].message}"

        return PoseFeedback(
            overall_score=comparison.score,
            status=status,
            primary_message=primary_message,
            corrections=corrections,
            encouragement=self.pick_encouragement(status),
        )

    def generate_for_pose(
        self,
        analysis: Optional[PoseAnalysis],
        pose_id: Optional[str]
    ) -> PoseFeedback:
        """Generate feedback against a catalog pose id (None = general mode)."""
        reference = None
        if pose_id is not None:
            reference = self.catalog.get(pose_id)
            if reference is None:
                logger.warning("Unknown pose '%s', falling back to general feedback", pose_id)
        return self.generate(analysis, reference)

    def generate_general(self, analysis: PoseAnalysis) -> PoseFeedback:
        """General posture feedback without a reference pose."""
        corrections: List[Correction] = []
        alignment = analysis.alignment

        if not alignment.shoulders_level:
            corrections.append(Correction(
                joint_key='shoulders',
                message="Try to level your shoulders",
                severity=Severity.MINOR,
                priority=1,
            ))

        if not alignment.hips_level:
            corrections.append(Correction(
                joint_key='hips',
                message="Keep your hips level",
                severity=Severity.MINOR,
                priority=1,
            ))

        if abs(alignment.spine_offset) > self.SPINE_LEAN_THRESHOLD:
            direction = "right" if alignment.spine_offset > 0 else "left"
            corrections.append(Correction(
                joint_key='spine',
                message=f"Center your body - leaning {direction}",
                severity=Severity.MINOR,
                priority=2,
            ))

        if not analysis.balance.is_balanced:
            corrections.append(Correction(
                joint_key='balance',
                message="Adjust your weight distribution",
                severity=Severity.MINOR,
                priority=2,
            ))

        priority1 = sum(1 for c in corrections if c.priority == 1)
        priority2 = sum(1 for c in corrections if c.priority == 2)
        score = 100 - config.PRIORITY1_PENALTY * priority1 - config.PRIORITY2_PENALTY * priority2
        score = max(0, min(100, score))
        status = FeedbackStatus.from_score(score)

        return PoseFeedback(
            overall_score=score,
            status=status,
            primary_message=corrections[0].message if corrections else GENERAL_OK_MESSAGE,
            corrections=tuple(corrections[:self.MAX_CORRECTIONS]),
            encouragement=self.pick_encouragement(status),
        )


def generate_feedback(
    analysis: Optional[PoseAnalysis],
    reference: Optional[ReferencePose] = None,
    rng: Optional[random.Random] = None
) -> PoseFeedback:
    """Generate feedback with a one-off generator."""
    return FeedbackGenerator(rng=rng).generate(analysis, reference)
