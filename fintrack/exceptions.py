"""
Custom exception classes for FinTrack.
Only real failures are raised; insufficient data and unparseable text
come back as low-confidence results instead.
"""

class FinTrackException(Exception):
    """Base exception for all FinTrack-specific errors."""
    pass


class DatabaseError(FinTrackException):
    """Raised when database operations fail."""
    pass


class ValidationError(FinTrackException):
    """Raised when an expense or category row fails validation."""
    pass


class AnalyticsError(FinTrackException):
    """Raised when an aggregate or input frame is corrupt (missing columns, negative or NaN amounts)."""
    pass


class FeatureDisabledError(FinTrackException):
    """Raised when the user has switched off the requested AI feature."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f"AI feature '{feature}' is disabled for this user")


class ConfigurationError(FinTrackException):
    """Raised when configuration is invalid or missing."""
    pass
