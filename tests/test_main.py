import json
import random

import pytest

from main import YogaFeedbackPipeline, load_skeleton, main
from pipeline.step4_feedback import FeedbackStatus, NO_POSE_MESSAGE


@pytest.fixture()
def skeleton_file(tmp_path, standing_skeleton):
    path = tmp_path / 'frame.json'
    keypoints = [
        {'name': lm.name, 'x': lm.x, 'y': lm.y, 'score': lm.confidence}
        for lm in standing_skeleton
    ]
    path.write_text(json.dumps({'keypoints': keypoints}), encoding='utf-8')
    return path


def test_load_skeleton_accepts_object_or_list(tmp_path, skeleton_file):
    skeleton = load_skeleton(str(skeleton_file))
    assert len(skeleton) == 17

    bare = tmp_path / 'bare.json'
    bare.write_text(json.dumps([{'name': 'nose', 'x': 1, 'y': 2, 'score': 0.5}]), encoding='utf-8')
    assert load_skeleton(str(bare)).get('nose').confidence == 0.5


def test_load_skeleton_rejects_bad_payload(tmp_path):
    path = tmp_path / 'bad.json'
    path.write_text(json.dumps({'people': []}), encoding='utf-8')
    with pytest.raises(ValueError):
        load_skeleton(str(path))


def test_pipeline_process_skeleton(catalog, standing_skeleton):
    pipeline = YogaFeedbackPipeline(catalog=catalog, rng=random.Random(0))
    analysis, feedback = pipeline.process_skeleton(standing_skeleton, 'mountain')

    assert len(analysis.angles) == 8
    assert feedback.status is FeedbackStatus.EXCELLENT

    payload = pipeline.to_payload(analysis, feedback)
    assert payload['color'] == '#22c55e'
    assert payload['emoji'] == '🌟'
    assert payload['analysis']['confidence'] == pytest.approx(0.9)


def test_pipeline_without_skeleton(catalog):
    pipeline = YogaFeedbackPipeline(catalog=catalog)
    analysis, feedback = pipeline.process_skeleton(None, 'mountain')
    assert analysis.angles == ()
    assert feedback.primary_message == NO_POSE_MESSAGE


def test_cli_prints_feedback_json(skeleton_file, capsys):
    code = main(['--skeleton', str(skeleton_file), '--pose', 'mountain', '--seed', '3'])
    assert code == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload['status'] == 'excellent'
    assert payload['overall_score'] >= 90
    assert payload['corrections'] == []


def test_cli_general_mode(skeleton_file, capsys):
    assert main(['--skeleton', str(skeleton_file)]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload['overall_score'] == 100


def test_cli_lists_poses(capsys):
    assert main(['--list-poses']) == 0
    out = capsys.readouterr().out
    assert 'mountain: Mountain Pose (Tadasana)' in out
    assert 'downdog:' in out


@pytest.mark.parametrize("payload", [
    [[300, 120, 0.9]],
    {'keypoints': [{'name': 'nose', 'x': [1], 'y': 2}]},
])
def test_cli_rejects_malformed_skeleton(tmp_path, capsys, payload):
    path = tmp_path / 'bad.json'
    path.write_text(json.dumps(payload), encoding='utf-8')

    assert main(['--skeleton', str(path)]) == 2
    assert 'cannot load skeleton' in capsys.readouterr().err


def test_cli_requires_skeleton(capsys):
    assert main([]) == 2
    assert '--skeleton' in capsys.readouterr().err


def test_cli_reports_bad_catalog(tmp_path, skeleton_file, capsys):
    broken = tmp_path / 'broken.yaml'
    broken.write_text("poses: 3\n", encoding='utf-8')
    assert main(['--skeleton', str(skeleton_file), '--database', str(broken)]) == 2
    assert 'catalog' in capsys.readouterr().err


def test_cli_writes_overlay(tmp_path, skeleton_file, capsys):
    cv2 = pytest.importorskip("cv2")
    np = pytest.importorskip("numpy")

    image = tmp_path / 'frame.png'
    output = tmp_path / 'out.png'
    cv2.imwrite(str(image), np.zeros((480, 640, 3), dtype=np.uint8))

    code = main([
        '--skeleton', str(skeleton_file), '--pose', 'tree',
        '--image', str(image), '--output', str(output),
    ])
    assert code == 0
    assert output.exists()
    assert cv2.imread(str(output)).any()
