"""Settings validation utilities and types."""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass
import logging
import math

from .defaults import DEFAULT_CONFIG

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation operation."""

    is_valid: bool
    error_message: Optional[str] = None
    corrected_value: Optional[Any] = None


class SettingsValidator:
    """Settings validation with auto-correction to defaults."""

    VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    # key -> (type, minimum, maximum); None means unbounded
    NUMERIC_RANGES: Dict[str, Tuple[type, Optional[float], Optional[float]]] = {
        "min_selection_size": (int, 1, None),
        "min_patch_keypoints": (int, 4, None),
        "match_distance_multiplier": (float, 1.0, None),
        "min_distance_epsilon": (float, 0.0, None),
        "min_correspondences": (int, 4, None),
        "ransac_reproj_threshold": (float, 0.1, None),
        "stale_track_frame_limit": (int, 0, None),
        "stale_tolerance_px": (float, 0.0, None),
        "consecutive_miss_limit": (int, 1, None),
        "feature_contrast_threshold": (float, 0.0, 1.0),
        "feature_edge_threshold": (float, 1.0, None),
        "max_features": (int, 0, None),
        "camera_width": (int, 1, None),
        "camera_height": (int, 1, None),
        "frame_delay_ms": (int, 1, 1000),
    }

    @staticmethod
    def validate_numeric(key: str, value: Any) -> ValidationResult:
        kind, lo, hi = SettingsValidator.NUMERIC_RANGES[key]
        default = DEFAULT_CONFIG[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return ValidationResult(False, f"{key} must be a number", default)
        if not math.isfinite(value):
            return ValidationResult(False, f"{key} must be finite", default)
        if kind is int and float(value) != int(value):
            return ValidationResult(False, f"{key} must be an integer", default)
        if lo is not None and value < lo:
            return ValidationResult(False, f"{key} must be >= {lo}", default)
        if hi is not None and value > hi:
            return ValidationResult(False, f"{key} must be <= {hi}", default)
        return ValidationResult(True, corrected_value=kind(value))

    @staticmethod
    def validate_log_level(value: Any) -> ValidationResult:
        if not isinstance(value, str) or value.upper() not in SettingsValidator.VALID_LOG_LEVELS:
            return ValidationResult(False, f"Invalid log level: {value!r}", DEFAULT_CONFIG["log_level"])
        return ValidationResult(True, corrected_value=value.upper())

    @staticmethod
    def validate_source(value: Any) -> ValidationResult:
        if isinstance(value, bool):
            return ValidationResult(False, "source must be a camera index or path", DEFAULT_CONFIG["source"])
        if isinstance(value, int):
            return ValidationResult(True, corrected_value=str(value))
        if not isinstance(value, str) or not value.strip():
            return ValidationResult(False, "source must be a camera index or path", DEFAULT_CONFIG["source"])
        return ValidationResult(True, corrected_value=value.strip())

    @staticmethod
    def validate_bool(key: str, value: Any) -> ValidationResult:
        if not isinstance(value, bool):
            return ValidationResult(False, f"{key} must be true or false", DEFAULT_CONFIG[key])
        return ValidationResult(True, corrected_value=value)

    @classmethod
    def validate_all(cls, settings: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
        """Validate a merged settings dict.

        Returns:
            (corrected settings, list of error messages)
        """
        corrected = dict(settings)
        errors: List[str] = []
        for key, value in settings.items():
            if key in cls.NUMERIC_RANGES:
                result = cls.validate_numeric(key, value)
            elif key == "log_level":
                result = cls.validate_log_level(value)
            elif key == "source":
                result = cls.validate_source(value)
            elif isinstance(DEFAULT_CONFIG.get(key), bool):
                result = cls.validate_bool(key, value)
            else:
                continue
            if not result.is_valid:
                logger.warning(f"{result.error_message}; using {result.corrected_value!r}")
                errors.append(result.error_message)
            corrected[key] = result.corrected_value
        return corrected, errors
