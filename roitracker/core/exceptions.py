"""Custom exceptions for the application.

Expected tracking outcomes (rejected selections, missed frames) are return
values, not exceptions.
"""

class ApplicationError(Exception):
    """Base application error."""
    pass

class ConfigError(ApplicationError):
    """Configuration-related errors."""
    pass

class FrameSourceError(ApplicationError):
    """Camera or video file could not be opened."""
    pass
