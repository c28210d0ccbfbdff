from __future__ import annotations

from pathlib import Path
import random
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pipeline.step1_skeleton import Landmark, Skeleton
from pipeline.step3_pose_comparator import ReferenceCatalog


# Upright, front-facing body in pixel coordinates (y grows downwards).
STANDING_POINTS = {
    'nose': (320, 60),
    'left_eye': (310, 50),
    'right_eye': (330, 50),
    'left_ear': (300, 55),
    'right_ear': (340, 55),
    'left_shoulder': (300, 120),
    'right_shoulder': (340, 120),
    'left_elbow': (290, 190),
    'right_elbow': (350, 190),
    'left_wrist': (285, 260),
    'right_wrist': (355, 260),
    'left_hip': (300, 260),
    'right_hip': (340, 260),
    'left_knee': (300, 360),
    'right_knee': (340, 360),
    'left_ankle': (300, 460),
    'right_ankle': (340, 460),
}


def build_skeleton(points=None, confidence=0.9, overrides=None, drop=()):
    """Skeleton from a name -> (x, y) mapping with per-landmark overrides."""
    points = dict(STANDING_POINTS if points is None else points)
    overrides = overrides or {}
    landmarks = []
    for name, (x, y) in points.items():
        if name in drop:
            continue
        conf = confidence
        if name in overrides:
            value = overrides[name]
            if isinstance(value, tuple):
                x, y = value[0], value[1]
                conf = value[2] if len(value) > 2 else confidence
            else:
                conf = value
        landmarks.append(Landmark(name=name, x=float(x), y=float(y), confidence=conf))
    return Skeleton(tuple(landmarks))


@pytest.fixture()
def make_skeleton():
    return build_skeleton


@pytest.fixture()
def standing_skeleton() -> Skeleton:
    return build_skeleton()


@pytest.fixture(scope="session")
def catalog() -> ReferenceCatalog:
    return ReferenceCatalog.load()


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)
