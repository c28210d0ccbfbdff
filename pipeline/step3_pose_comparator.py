"""
Step 3: Reference Pose Comparison
Scores a pose analysis against a canonical reference pose.

Reference poses are loaded once from a YAML catalog into an immutable
ReferenceCatalog. Each pose carries joint-angle windows (min/max/ideal)
and boolean alignment requirements.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import yaml

import config
from utils.angle_calculator import AngleCalculator

from .step2_pose_analyzer import PoseAnalysis

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised when the reference catalog data is malformed."""


class Severity(Enum):
    """Severity of a correction."""
    MINOR = "minor"
    MAJOR = "major"

    @property
    def priority(self) -> int:
        """1 = fix first, 2 = fix later."""
        return 1 if self is Severity.MAJOR else 2


@dataclass(frozen=True)
class Correction:
    """A single actionable alignment suggestion."""
    joint_key: str
    message: str
    severity: Severity = Severity.MINOR
    priority: int = 2

    def to_dict(self) -> Dict[str, Any]:
        return {
            'joint_key': self.joint_key,
            'message': self.message,
            'severity': self.severity.value,
            'priority': self.priority,
        }


@dataclass(frozen=True)
class AngleRequirement:
    """Expected angle window for one joint."""
    joint_key: str
    min: float
    max: float
    ideal: float


@dataclass(frozen=True)
class PoseRequirements:
    """
    Alignment requirements of a reference pose.

    None means the pose has no opinion. Only shoulders_level and
    hips_level are scored.
    """
    shoulders_level: Optional[bool] = None
    hips_level: Optional[bool] = None
    arms_raised: Optional[bool] = None
    knees_bent: Optional[bool] = None


@dataclass(frozen=True)
class ReferencePose:
    """Canonical target posture."""
    pose_id: str
    name: str
    angles: Tuple[AngleRequirement, ...] = ()
    requirements: PoseRequirements = field(default_factory=PoseRequirements)
    success_message: str = ""

    def __post_init__(self):
        object.__setattr__(self, 'angles', tuple(self.angles))
        if not self.success_message:
            object.__setattr__(self, 'success_message', f"Great {self.name}!")


@dataclass(frozen=True)
class ComparisonResult:
    """Score (0-100) and raw corrections for one comparison."""
    score: int
    corrections: Tuple[Correction, ...] = ()


# =============================================================================
# REFERENCE CATALOG
# =============================================================================

_REQUIREMENT_KEYS = ('shoulders_level', 'hips_level', 'arms_raised', 'knees_bent')


def _parse_angle(pose_id: str, entry: Any) -> AngleRequirement:
    if not isinstance(entry, dict):
        raise CatalogError(f"Pose '{pose_id}': angle entry must be a mapping, got {entry!r}")

    joint = entry.get('joint')
    if joint not in AngleCalculator.ANGLE_DEFINITIONS:
        raise CatalogError(f"Pose '{pose_id}': unknown joint {joint!r}")

    try:
        low = float(entry['min'])
        high = float(entry['max'])
        ideal = float(entry['ideal'])
    except (KeyError, TypeError, ValueError) as e:
        raise CatalogError(f"Pose '{pose_id}': bad angle window for {joint}: {e}") from e

    if not low <= ideal <= high:
        raise CatalogError(
            f"Pose '{pose_id}': {joint} needs min <= ideal <= max, got {low}/{ideal}/{high}"
        )
    return AngleRequirement(joint_key=joint, min=low, max=high, ideal=ideal)


def _parse_requirements(pose_id: str, data: Any) -> PoseRequirements:
    if data is None:
        return PoseRequirements()
    if not isinstance(data, dict):
        raise CatalogError(f"Pose '{pose_id}': requirements must be a mapping")

    unknown = set(data) - set(_REQUIREMENT_KEYS)
    if unknown:
        raise CatalogError(f"Pose '{pose_id}': unknown requirements {sorted(unknown)}")

    values = {}
    for key, value in data.items():
        if not isinstance(value, bool):
            raise CatalogError(f"Pose '{pose_id}': requirement {key} must be true/false")
        values[key] = value
    return PoseRequirements(**values)


class ReferenceCatalog(Mapping):
    """
    Read-only table of reference poses keyed by pose id.

    Built once at startup and shared; nothing in the pipeline mutates it.
    """

    def __init__(self, poses: Union[Mapping, List[ReferencePose], Tuple[ReferencePose, ...]] = ()):
        if isinstance(poses, Mapping):
            table = dict(poses)
        else:
            table = {pose.pose_id: pose for pose in poses}
        self._poses = MappingProxyType(table)

    def __getitem__(self, pose_id: str) -> ReferencePose:
        return self._poses[pose_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._poses)

    def __len__(self) -> int:
        return len(self._poses)

    def __repr__(self) -> str:
        return f"ReferenceCatalog({list(self._poses)})"

    def pose_ids(self) -> List[str]:
        """Get list of all pose ids in catalog order."""
        return list(self._poses)

    @classmethod
    def from_dict(cls, data: Any) -> "ReferenceCatalog":
        """
        Build a catalog from parsed YAML data ({'poses': {id: {...}}}).

        Raises:
            CatalogError: if any pose entry is malformed
        """
        if not isinstance(data, dict) or not isinstance(data.get('poses'), dict):
            raise CatalogError("Catalog must contain a 'poses' mapping")

        poses = []
        for pose_id, pose_data in data['poses'].items():
            if not isinstance(pose_data, dict):
                raise CatalogError(f"Pose '{pose_id}' must be a mapping")

            poses.append(ReferencePose(
                pose_id=str(pose_id),
                name=str(pose_data.get('name', pose_id)),
                angles=tuple(
                    _parse_angle(pose_id, entry)
                    for entry in pose_data.get('angles') or []
                ),
                requirements=_parse_requirements(pose_id, pose_data.get('requirements')),
                success_message=str(pose_data.get('success_message') or ''),
            ))
        return cls(poses)

    @classmethod
    def load(cls, database_path: Optional[Union[str, Path]] = None) -> "ReferenceCatalog":
        """Load the catalog from a YAML file (default from config)."""
        path = Path(database_path or config.DATABASE_PATH)
        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise CatalogError(f"Invalid YAML in {path}: {e}") from e

        catalog = cls.from_dict(data)
        logger.info("Loaded %d reference poses from %s", len(catalog), path)
        return catalog


# =============================================================================
# COMPARATOR
# =============================================================================

class PoseComparator:
    """
    Rule-based comparison of an analysis against a reference pose.

    Every matched angle requirement and every present alignment requirement
    is one check; the score is the mean contribution scaled to 0-100.
    """

    MAJOR_DEVIATION = config.MAJOR_DEVIATION_DEGREES
    IDEAL_FALLOFF = config.IDEAL_FALLOFF_DEGREES
    MAJOR_CONTRIBUTION = config.MAJOR_CONTRIBUTION
    MINOR_CONTRIBUTION = config.MINOR_CONTRIBUTION
    ALIGNMENT_MISS_CONTRIBUTION = config.ALIGNMENT_MISS_CONTRIBUTION

    def _out_of_range(self, joint_key: str, message: str, deviation: float) -> Tuple[Correction, float]:
        severity = Severity.MAJOR if deviation > self.MAJOR_DEVIATION else Severity.MINOR
        contribution = (
            self.MAJOR_CONTRIBUTION if severity is Severity.MAJOR else self.MINOR_CONTRIBUTION
        )
        correction = Correction(
            joint_key=joint_key,
            message=message,
            severity=severity,
            priority=severity.priority,
        )
        return correction, contribution

    def angle_contribution(self, angle: float, requirement: AngleRequirement) -> float:
        """
        Credit for an in-range angle: 1 at the ideal, minus 1 per
        IDEAL_FALLOFF degrees away. Not clamped per joint.
        """
        return 1 - abs(angle - requirement.ideal) / self.IDEAL_FALLOFF

    def compare(self, analysis: PoseAnalysis, reference: ReferencePose) -> ComparisonResult:
        corrections: List[Correction] = []
        total_score = 0.0
        total_checks = 0

        # Check angles
        for requirement in reference.angles:
            actual = analysis.angle_for(requirement.joint_key)
            if actual is None:
                continue

            total_checks += 1
            joint_name = actual.label.lower()

            if actual.angle < requirement.min:
                correction, contribution = self._out_of_range(
                    requirement.joint_key,
                    f"Extend your {joint_name} more",
                    requirement.min - actual.angle,
                )
                corrections.append(correction)
                total_score += contribution
            elif actual.angle > requirement.max:
                correction, contribution = self._out_of_range(
                    requirement.joint_key,
                    f"Bend your {joint_name} more",
                    actual.angle - requirement.max,
                )
                corrections.append(correction)
                total_score += contribution
            else:
                total_score += self.angle_contribution(actual.angle, requirement)

        # Check body alignment requirements
        alignment_checks = (
            ('shoulders', reference.requirements.shoulders_level,
             analysis.alignment.shoulders_level, "Level your shoulders"),
            ('hips', reference.requirements.hips_level,
             analysis.alignment.hips_level, "Level your hips"),
        )
        for joint_key, required, actual_level, message in alignment_checks:
            if required is None:
                continue

            total_checks += 1
            if required and not actual_level:
                corrections.append(Correction(
                    joint_key=joint_key,
                    message=message,
                    severity=Severity.MINOR,
                    priority=Severity.MINOR.priority,
                ))
                total_score += self.ALIGNMENT_MISS_CONTRIBUTION
            else:
                total_score += 1

        if total_checks == 0:
            score = 0
        else:
            raw = min(100.0, max(0.0, total_score / total_checks * 100))
            # Round half up
            score = int(math.floor(raw + 0.5))

        logger.debug(
            "Compared against %s: %d checks, score %d, %d corrections",
            reference.pose_id, total_checks, score, len(corrections)
        )
        return ComparisonResult(score=score, corrections=tuple(corrections))


def compare_pose_to_reference(analysis: PoseAnalysis, reference: ReferencePose) -> ComparisonResult:
    """Compare with a default PoseComparator."""
    return PoseComparator().compare(analysis, reference)
