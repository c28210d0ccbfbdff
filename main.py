"""
Yoga Pose Feedback - Single Frame Analysis
==========================================

4-Step Pipeline:
1. Skeleton - Load detector keypoints for one frame
2. Pose Analysis - Joint angles, alignment, balance
3. Pose Comparison - Score against a reference pose (optional)
4. Feedback - Status, message, corrections, encouragement

Usage:
    python main.py --list-poses
    python main.py --skeleton frame.json                  # General posture feedback
    python main.py --skeleton frame.json --pose mountain  # Compare with Mountain Pose
    python main.py --skeleton frame.json --pose tree --image frame.jpg --output out.jpg

The skeleton file holds detector output for one body: either a list of
keypoints or an object with a "keypoints" list. Each keypoint has
"name", "x", "y" and "score".
"""

import argparse
import json
import logging
import random
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

# Import configuration
import config

from pipeline.step1_skeleton import Skeleton
from pipeline.step2_pose_analyzer import AnalyzerSettings, PoseAnalysis, PoseAnalyzer
from pipeline.step3_pose_comparator import CatalogError, PoseComparator, ReferenceCatalog
from pipeline.step4_feedback import FeedbackGenerator, PoseFeedback, score_color, status_emoji

logger = logging.getLogger(__name__)


class YogaFeedbackPipeline:
    """Complete skeleton -> analysis -> comparison -> feedback pipeline."""

    def __init__(
        self,
        catalog: Optional[ReferenceCatalog] = None,
        settings: Optional[AnalyzerSettings] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize the pipeline.

        Args:
            catalog: Reference catalog (default: loaded from config.DATABASE_PATH)
            settings: Analyzer thresholds (default: pixel coordinates)
            rng: Random generator for encouragement lines
        """
        self.catalog = catalog if catalog is not None else ReferenceCatalog.load()
        self.analyzer = PoseAnalyzer(settings)
        self.feedback_generator = FeedbackGenerator(
            catalog=self.catalog,
            comparator=PoseComparator(),
            rng=rng
        )

    def process_skeleton(
        self,
        skeleton: Optional[Skeleton],
        pose_id: Optional[str] = None
    ) -> Tuple[PoseAnalysis, PoseFeedback]:
        """
        Process a single skeleton through the full pipeline.

        Returns:
            (analysis, feedback); a missing skeleton yields "unable to detect"
            feedback
        """
        analysis = self.analyzer.analyze(skeleton)
        if skeleton is None:
            return analysis, self.feedback_generator.generate(None, None)

        feedback = self.feedback_generator.generate_for_pose(analysis, pose_id)
        return analysis, feedback

    def to_payload(self, analysis: PoseAnalysis, feedback: PoseFeedback) -> Dict[str, Any]:
        payload = feedback.to_dict()
        payload['color'] = score_color(feedback.overall_score)
        payload['emoji'] = status_emoji(feedback.status)
        payload['analysis'] = analysis.to_dict()
        return payload


def load_skeleton(path: str) -> Skeleton:
    """Load detector keypoints for one body from a JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    keypoints = data.get('keypoints') if isinstance(data, dict) else data
    if not isinstance(keypoints, list):
        raise ValueError(f"{path}: expected a keypoint list")
    return Skeleton.from_keypoints(keypoints)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Yoga Pose Feedback - Single Frame Analysis',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument('--skeleton', type=str, help='Path to skeleton JSON file')
    parser.add_argument('--pose', type=str, default=None,
                        help='Reference pose id (omit for general feedback)')
    parser.add_argument('--database', type=str, default=str(config.DATABASE_PATH),
                        help='Path to reference pose catalog YAML')
    parser.add_argument('--normalized', action='store_true',
                        help='Landmark coordinates are normalized to [0, 1]')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the encouragement picker')
    parser.add_argument('--list-poses', action='store_true',
                        help='List reference poses and exit')

    # Overlay output
    parser.add_argument('--image', type=str, help='Frame to draw the overlay on')
    parser.add_argument('--output', type=str, default='output_result.jpg',
                        help='Where to save the annotated frame')

    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    return parser.parse_args(argv)


def _save_overlay(args, skeleton: Skeleton, feedback: PoseFeedback, pose_name: Optional[str]) -> None:
    import cv2
    from utils.visualization import draw_feedback_overlay

    frame = cv2.imread(args.image)
    if frame is None:
        raise ValueError(f"Cannot read image {args.image}")

    annotated = draw_feedback_overlay(
        frame, skeleton, feedback,
        pose_name=pose_name,
        normalized=args.normalized
    )
    cv2.imwrite(args.output, annotated)
    logger.info("Saved overlay to %s", args.output)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        catalog = ReferenceCatalog.load(Path(args.database))
    except (OSError, CatalogError) as e:
        print(f"Error: cannot load catalog: {e}", file=sys.stderr)
        return 2

    if args.list_poses:
        for pose_id in catalog.pose_ids():
            print(f"{pose_id}: {catalog[pose_id].name}")
        return 0

    if not args.skeleton:
        print("Error: --skeleton is required", file=sys.stderr)
        return 2

    try:
        skeleton = load_skeleton(args.skeleton)
    except (OSError, ValueError) as e:
        print(f"Error: cannot load skeleton: {e}", file=sys.stderr)
        return 2

    settings = AnalyzerSettings.for_normalized_coordinates() if args.normalized else None
    rng = random.Random(args.seed) if args.seed is not None else None
    pipeline = YogaFeedbackPipeline(catalog=catalog, settings=settings, rng=rng)

    analysis, feedback = pipeline.process_skeleton(skeleton, args.pose)
    print(json.dumps(pipeline.to_payload(analysis, feedback), indent=2, ensure_ascii=False))

    if args.image:
        reference = catalog.get(args.pose) if args.pose else None
        try:
            _save_overlay(args, skeleton, feedback, reference.name if reference else None)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
