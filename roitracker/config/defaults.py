"""Default configuration values."""

from typing import Any, Dict

DEFAULT_CONFIG: Dict[str, Any] = {
    # Selection
    "min_selection_size": 10,
    "min_patch_keypoints": 4,

    # Matching / geometry
    "match_distance_multiplier": 3.0,
    "min_distance_epsilon": 10.0,
    "min_correspondences": 4,
    "ransac_reproj_threshold": 5.0,

    # Track lifetime
    "stale_track_frame_limit": 90,
    "stale_tolerance_px": 0.5,
    "consecutive_miss_limit": 30,

    # Feature extraction (SIFT)
    "feature_contrast_threshold": 0.04,
    "feature_edge_threshold": 10.0,
    "max_features": 0,

    # Frame source / display
    "source": "0",
    "camera_width": 640,
    "camera_height": 480,
    "window_name": "roitracker",
    "frame_delay_ms": 10,
    "show_reference_window": True,

    # Preprocessing toggles (initial state)
    "denoise": False,
    "equalize_contrast": False,
    "edge_overlay": False,

    # Logging
    "log_level": "INFO",
    "log_dir": "logs",
    "enable_file_logging": True,
    "structured_logging": False,
}
