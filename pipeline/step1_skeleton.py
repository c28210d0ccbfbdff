"""
Step 1: Skeleton Model
Data shapes for one detected body: named 2D landmarks with a confidence.

Landmarks come from an external keypoint detector (COCO 17-keypoint
vocabulary). Coordinates may be pixels or normalized, as long as every
landmark in one skeleton shares the same space.
"""

import numpy as np
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple
from dataclasses import dataclass


# COCO keypoint names (17 keypoints)
KEYPOINT_NAMES: Tuple[str, ...] = (
    'nose',           # 0
    'left_eye',       # 1
    'right_eye',      # 2
    'left_ear',       # 3
    'right_ear',      # 4
    'left_shoulder',  # 5
    'right_shoulder', # 6
    'left_elbow',     # 7
    'right_elbow',    # 8
    'left_wrist',     # 9
    'right_wrist',    # 10
    'left_hip',       # 11
    'right_hip',      # 12
    'left_knee',      # 13
    'right_knee',     # 14
    'left_ankle',     # 15
    'right_ankle',    # 16
)


@dataclass(frozen=True)
class Landmark:
    """Single named body landmark."""
    name: str
    x: float
    y: float
    confidence: float = 0.0

    @property
    def point(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Skeleton:
    """All landmarks of one detected body in one frame."""
    landmarks: Tuple[Landmark, ...] = ()

    def __post_init__(self):
        # Accept any iterable but store an immutable tuple
        object.__setattr__(self, 'landmarks', tuple(self.landmarks))

    def __iter__(self) -> Iterator[Landmark]:
        return iter(self.landmarks)

    def __len__(self) -> int:
        return len(self.landmarks)

    def get(self, name: str) -> Optional[Landmark]:
        """Get first landmark with the given name."""
        for landmark in self.landmarks:
            if landmark.name == name:
                return landmark
        return None

    @property
    def landmark_dict(self) -> Dict[str, Landmark]:
        """Mapping of name -> landmark (first occurrence wins)."""
        result: Dict[str, Landmark] = {}
        for landmark in self.landmarks:
            result.setdefault(landmark.name, landmark)
        return result

    def to_numpy(self) -> np.ndarray:
        """Convert landmarks to numpy array (N, 3): x, y, confidence."""
        if not self.landmarks:
            return np.zeros((0, 3), dtype=np.float32)
        return np.array([
            [lm.x, lm.y, lm.confidence]
            for lm in self.landmarks
        ], dtype=np.float32)

    @classmethod
    def from_keypoints(cls, keypoints: Iterable[Mapping]) -> "Skeleton":
        """
        Build a skeleton from detector keypoint dicts.

        Each keypoint needs 'name', 'x' and 'y'; the confidence is read from
        'score' (detector output) or 'confidence', defaulting to 0.

        Raises:
            ValueError: if a keypoint is not a mapping, lacks a name or
                coordinates, or holds non-numeric values
        """
        landmarks: List[Landmark] = []
        for index, kp in enumerate(keypoints):
            if not isinstance(kp, Mapping):
                raise ValueError(f"Keypoint #{index} is not an object: {kp!r}")
            name = kp.get('name')
            if not name:
                raise ValueError(f"Keypoint #{index} has no name")
            if kp.get('x') is None or kp.get('y') is None:
                raise ValueError(f"Keypoint '{name}' is missing x/y coordinates")

            score = kp.get('score', kp.get('confidence'))
            try:
                x, y = float(kp['x']), float(kp['y'])
                confidence = float(score) if score is not None else 0.0
            except (TypeError, ValueError) as e:
                raise ValueError(f"Keypoint '{name}' has non-numeric values: {e}") from e

            landmarks.append(Landmark(name=str(name), x=x, y=y, confidence=confidence))
        return cls(tuple(landmarks))

    @classmethod
    def from_array(
        cls,
        array: np.ndarray,
        names: Tuple[str, ...] = KEYPOINT_NAMES
    ) -> "Skeleton":
        """
        Build a skeleton from an (N, 3) array of x, y, confidence rows.

        Rows follow the COCO keypoint order unless other names are given.

        Raises:
            ValueError: if the array shape does not match the names
        """
        data = np.asarray(array, dtype=float)
        if data.ndim != 2 or data.shape[1] != 3:
            raise ValueError(f"Expected an (N, 3) array, got shape {data.shape}")
        if data.shape[0] > len(names):
            raise ValueError(
                f"Array has {data.shape[0]} rows but only {len(names)} names"
            )

        return cls(tuple(
            Landmark(name=names[i], x=float(x), y=float(y), confidence=float(c))
            for i, (x, y, c) in enumerate(data)
        ))
