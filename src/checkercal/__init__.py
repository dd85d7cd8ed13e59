# checkercal - Checkerboard grid reconstruction and homography calibration

__version__ = "0.1.0"

# Core types
from checkercal.types import (
    BoardConfig,
    CalibrationResult,
    CornerLink,
    CornerMatch,
    DetectionConfig,
    DetectionResult,
    Quad,
    QuadArena,
)

# Configuration
from checkercal.config import (
    load_config,
    save_config,
)

# Pixel collaborators
from checkercal.imaging import (
    DebugTracer,
    ImageOps,
    NullTracer,
    OpenCVImageOps,
)

# Detection and calibration
from checkercal.calibration import (
    binarize,
    calibrate_from_image,
    compute_homography,
    decompose_homography,
    detect_checkerboard,
    detect_quads,
    ground_truth_quads,
    link_corners,
    match_corners_for_homography,
    merge_quads,
    number_quads,
)

__all__ = [
    # Core types
    "BoardConfig",
    "CalibrationResult",
    "CornerLink",
    "CornerMatch",
    "DetectionConfig",
    "DetectionResult",
    "Quad",
    "QuadArena",
    # Configuration
    "load_config",
    "save_config",
    # Pixel collaborators
    "DebugTracer",
    "ImageOps",
    "NullTracer",
    "OpenCVImageOps",
    # Detection and calibration
    "binarize",
    "calibrate_from_image",
    "compute_homography",
    "decompose_homography",
    "detect_checkerboard",
    "detect_quads",
    "ground_truth_quads",
    "link_corners",
    "match_corners_for_homography",
    "merge_quads",
    "number_quads",
]
