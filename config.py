"""
Yoga Pose Feedback Configuration
================================

Central configuration file for all pipeline parameters.
"""

from pathlib import Path

# =============================================================================
# Camera Settings
# =============================================================================
CAMERA_WIDTH = 640   # Reference frame width the pixel thresholds below assume
CAMERA_HEIGHT = 480

# =============================================================================
# Skeleton / Visibility Settings
# =============================================================================
VISIBILITY_THRESHOLD = 0.3   # Landmark is visible only if confidence > this
MIN_ANALYSIS_CONFIDENCE = 0.3  # Below this the feedback refuses to score

# =============================================================================
# Alignment & Balance Settings (pixel units unless noted)
# =============================================================================
LEVEL_TOLERANCE_DEGREES = 10.0  # Shoulders/hips count as level under this tilt
SPINE_OFFSET_SCALE = 100.0      # nose-to-mid-hip offset divided by this
BALANCE_MARGIN = 50.0           # Allowed centroid drift outside the ankles

# =============================================================================
# Comparator Settings (degrees)
# =============================================================================
MAJOR_DEVIATION_DEGREES = 20.0  # Past min/max by more than this -> major
IDEAL_FALLOFF_DEGREES = 30.0    # In-range credit drops by 1 per this many degrees
MAJOR_CONTRIBUTION = 0.3
MINOR_CONTRIBUTION = 0.6
ALIGNMENT_MISS_CONTRIBUTION = 0.5

# =============================================================================
# Feedback Settings
# =============================================================================
THRESHOLD_EXCELLENT = 90
THRESHOLD_GOOD = 70
THRESHOLD_NEEDS_WORK = 50

SPINE_LEAN_THRESHOLD = 0.3
PRIORITY1_PENALTY = 20
PRIORITY2_PENALTY = 10
MAX_CORRECTIONS = 3

# =============================================================================
# Reference Catalog
# =============================================================================
DATABASE_PATH = Path(__file__).parent / "pipeline" / "data" / "reference_poses.yaml"

# =============================================================================
# Display Settings
# =============================================================================
# Colors (BGR format)
COLOR_GREEN = (0, 255, 0)
COLOR_ORANGE = (0, 165, 255)
COLOR_RED = (68, 68, 239)
COLOR_WHITE = (255, 255, 255)
COLOR_BLACK = (0, 0, 0)

# Score badge colors (hex, for the UI layer)
SCORE_COLORS = {
    "excellent": "#22c55e",
    "good": "#84cc16",
    "needs_work": "#eab308",
    "poor": "#ef4444",
}
