"""Configuration dataclass and loading utilities.

Provides a strongly-typed configuration object that is injected into the
tracker components instead of module-level flags.
"""
from __future__ import annotations
from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, Optional
import json, os, logging
from .defaults import DEFAULT_CONFIG
from .env_config import load_environment_config, EnvironmentError
from .validation import SettingsValidator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Config:
    # Selection
    min_selection_size: int = DEFAULT_CONFIG["min_selection_size"]
    min_patch_keypoints: int = DEFAULT_CONFIG["min_patch_keypoints"]

    # Matching / geometry
    match_distance_multiplier: float = DEFAULT_CONFIG["match_distance_multiplier"]
    min_distance_epsilon: float = DEFAULT_CONFIG["min_distance_epsilon"]
    min_correspondences: int = DEFAULT_CONFIG["min_correspondences"]
    ransac_reproj_threshold: float = DEFAULT_CONFIG["ransac_reproj_threshold"]

    # Track lifetime
    stale_track_frame_limit: int = DEFAULT_CONFIG["stale_track_frame_limit"]
    stale_tolerance_px: float = DEFAULT_CONFIG["stale_tolerance_px"]
    consecutive_miss_limit: int = DEFAULT_CONFIG["consecutive_miss_limit"]

    # Feature extraction
    feature_contrast_threshold: float = DEFAULT_CONFIG["feature_contrast_threshold"]
    feature_edge_threshold: float = DEFAULT_CONFIG["feature_edge_threshold"]
    max_features: int = DEFAULT_CONFIG["max_features"]

    # Frame source / display
    source: str = DEFAULT_CONFIG["source"]
    camera_width: int = DEFAULT_CONFIG["camera_width"]
    camera_height: int = DEFAULT_CONFIG["camera_height"]
    window_name: str = DEFAULT_CONFIG["window_name"]
    frame_delay_ms: int = DEFAULT_CONFIG["frame_delay_ms"]
    show_reference_window: bool = DEFAULT_CONFIG["show_reference_window"]

    # Preprocessing
    denoise: bool = DEFAULT_CONFIG["denoise"]
    equalize_contrast: bool = DEFAULT_CONFIG["equalize_contrast"]
    edge_overlay: bool = DEFAULT_CONFIG["edge_overlay"]

    # Logging
    log_level: str = DEFAULT_CONFIG["log_level"]
    log_dir: str = DEFAULT_CONFIG["log_dir"]
    enable_file_logging: bool = DEFAULT_CONFIG["enable_file_logging"]
    structured_logging: bool = DEFAULT_CONFIG["structured_logging"]

    # Arbitrary extra values retained for forward compatibility
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        # merge extra keys at top-level for saving
        extra = d.pop("extra", {})
        d.update(extra)
        return d

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self, key, self.extra.get(key, default))


def load_config(path: str = "config.json", env_file: Optional[str] = None) -> Config:
    """Load configuration from a JSON file, then apply environment overrides.

    Never raises: unreadable or invalid files fall back to defaults and
    out-of-range values are corrected with a warning.

    Args:
        path: Path to config.json file
        env_file: Path to .env file (optional)
    """
    data: Dict[str, Any] = {}

    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded_data = json.load(f)
            if loaded_data is None:
                logger.warning(f"Configuration file '{path}' is empty, using defaults")
            elif not isinstance(loaded_data, dict):
                logger.error(f"Configuration file '{path}' does not contain a valid JSON object, using defaults")
            else:
                data = loaded_data
                logger.info(f"Successfully loaded configuration from '{path}'")
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON configuration file '{path}': {e}. Using defaults.")
        except PermissionError:
            logger.error(f"Permission denied reading configuration file '{path}'. Using defaults.")
        except OSError as e:
            logger.error(f"Error reading configuration file '{path}': {e}. Using defaults.")
    else:
        logger.info(f"Configuration file '{path}' does not exist. Using defaults.")

    merged = {**DEFAULT_CONFIG, **data}

    # Environment variables take priority over the file
    try:
        merged.update(load_environment_config(env_file).overrides())
    except EnvironmentError as e:
        logger.warning(f"Environment configuration ignored: {e}")

    merged, errors = SettingsValidator.validate_all(merged)
    if errors:
        logger.warning(f"Corrected {len(errors)} invalid configuration value(s)")

    # capture unknown keys
    known = [f.name for f in fields(Config) if f.name != "extra"]
    extra = {k: v for k, v in merged.items() if k not in known}
    if extra:
        logger.info(f"Found extra configuration keys: {list(extra.keys())}")
    return Config(**{k: merged[k] for k in known}, extra=extra)


def save_config(cfg: Config, path: str = "config.json") -> None:
    """Save configuration to a JSON file, logging rather than raising on I/O errors."""
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(cfg.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Configuration saved successfully to '{path}'")
    except PermissionError:
        logger.error(f"Permission denied writing configuration file '{path}'")
    except OSError as e:
        logger.error(f"OS error saving configuration file '{path}': {e}")


__all__ = ["Config", "load_config", "save_config"]
