import numpy as np
import pytest

from pipeline.step1_skeleton import KEYPOINT_NAMES, Landmark, Skeleton


def test_keypoint_vocabulary():
    assert len(KEYPOINT_NAMES) == 17
    assert KEYPOINT_NAMES[0] == 'nose'
    assert KEYPOINT_NAMES[-1] == 'right_ankle'


def test_from_keypoints_reads_detector_score():
    skeleton = Skeleton.from_keypoints([
        {'name': 'nose', 'x': 10, 'y': 20, 'score': 0.8},
        {'name': 'left_hip', 'x': 1.5, 'y': 2.5, 'confidence': 0.4},
        {'name': 'right_hip', 'x': 3, 'y': 4},
    ])
    assert len(skeleton) == 3
    assert skeleton.get('nose') == Landmark('nose', 10.0, 20.0, 0.8)
    assert skeleton.get('left_hip').confidence == 0.4
    assert skeleton.get('right_hip').confidence == 0.0
    assert skeleton.get('left_ankle') is None


def test_from_keypoints_rejects_unnamed_point():
    with pytest.raises(ValueError):
        Skeleton.from_keypoints([{'x': 1, 'y': 2, 'score': 0.9}])


def test_from_keypoints_rejects_missing_coordinates():
    with pytest.raises(ValueError):
        Skeleton.from_keypoints([{'name': 'nose', 'x': 1, 'score': 0.9}])


def test_from_array_uses_coco_order():
    data = np.arange(17 * 3, dtype=float).reshape(17, 3)
    skeleton = Skeleton.from_array(data)
    assert [lm.name for lm in skeleton] == list(KEYPOINT_NAMES)
    assert skeleton.get('left_shoulder').point == (15.0, 16.0)
    np.testing.assert_allclose(skeleton.to_numpy(), data)


def test_from_array_rejects_bad_shape():
    with pytest.raises(ValueError):
        Skeleton.from_array(np.zeros((17, 2)))
    with pytest.raises(ValueError):
        Skeleton.from_array(np.zeros((18, 3)))


def test_skeleton_is_immutable():
    skeleton = Skeleton([Landmark('nose', 1, 2, 0.5)])
    assert isinstance(skeleton.landmarks, tuple)
    with pytest.raises(AttributeError):
        skeleton.landmarks = ()


def test_empty_skeleton_to_numpy():
    assert Skeleton().to_numpy().shape == (0, 3)


@pytest.mark.parametrize("keypoints", [
    [[300, 120, 0.9]],
    ['nose'],
    [{'name': 'nose', 'x': [1], 'y': 2}],
    [{'name': 'nose', 'x': 'left', 'y': 2}],
    [{'name': 'nose', 'x': 1, 'y': 2, 'score': {'value': 0.9}}],
])
def test_from_keypoints_rejects_malformed_entries(keypoints):
    with pytest.raises(ValueError):
        Skeleton.from_keypoints(keypoints)
