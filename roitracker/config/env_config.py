"""Environment variable overrides for the configuration file.

Only I/O and logging settings can be overridden from the environment;
tracking parameters live in the JSON config.
"""
import os
import logging
from typing import Any, Dict, Optional
from pathlib import Path
from dataclasses import dataclass

from roitracker.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "ROITRACKER_"


@dataclass(frozen=True)
class EnvironmentConfig:
    """Immutable environment configuration object."""

    source: Optional[str]
    log_level: Optional[str]
    log_dir: Optional[str]
    debug_logging: bool

    def overrides(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.source:
            out["source"] = self.source
        if self.log_dir:
            out["log_dir"] = self.log_dir
        if self.debug_logging:
            out["log_level"] = "DEBUG"
        elif self.log_level:
            out["log_level"] = self.log_level
        return out


class EnvironmentError(ConfigError):
    """Custom exception for environment configuration errors."""
    pass


def load_env_file(env_path: Optional[str] = None) -> Dict[str, str]:
    """Load environment variables from .env file.

    Args:
        env_path: Path to .env file. Defaults to .env in current directory.

    Returns:
        dict: Loaded environment variables
    """
    if env_path is None:
        env_path = ".env"

    env_vars = {}
    env_file_path = Path(env_path)

    if not env_file_path.exists():
        logger.debug(f"Environment file {env_path} not found, using system environment only")
        return env_vars

    try:
        with open(env_file_path, 'r', encoding='utf-8') as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()

                # Skip comments and empty lines
                if not line or line.startswith('#'):
                    continue

                if '=' in line:
                    key, value = line.split('=', 1)
                    key = key.strip()
                    value = value.strip()

                    # Remove quotes if present
                    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                        value = value[1:-1]

                    env_vars[key] = value
                else:
                    logger.warning(f"Invalid line format in {env_path}:{line_num}: {line}")

        logger.info(f"Loaded {len(env_vars)} variables from {env_path}")

    except OSError as e:
        logger.error(f"Error reading environment file {env_path}: {e}")

    return env_vars


def get_env_var(key: str, default: Optional[str] = None,
                env_vars: Optional[Dict[str, str]] = None) -> Optional[str]:
    """Get a prefixed environment variable; .env values win over the process environment."""
    name = ENV_PREFIX + key
    if env_vars and name in env_vars:
        return env_vars[name]
    return os.getenv(name, default)


def load_environment_config(env_file_path: Optional[str] = None) -> EnvironmentConfig:
    """Load environment configuration.

    Raises:
        EnvironmentError: If a variable holds an unusable value
    """
    env_vars = load_env_file(env_file_path)

    log_level = get_env_var("LOG_LEVEL", env_vars=env_vars)
    if log_level is not None and not log_level.strip():
        raise EnvironmentError(f"{ENV_PREFIX}LOG_LEVEL is set but empty")

    debug_str = get_env_var("DEBUG_LOGGING", "false", env_vars=env_vars)

    return EnvironmentConfig(
        source=get_env_var("SOURCE", env_vars=env_vars),
        log_level=log_level,
        log_dir=get_env_var("LOG_DIR", env_vars=env_vars),
        debug_logging=debug_str.lower() in ('true', '1', 'yes', 'on'),
    )


__all__ = [
    "EnvironmentConfig",
    "EnvironmentError",
    "load_env_file",
    "get_env_var",
    "load_environment_config",
]
