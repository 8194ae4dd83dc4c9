"""Error types raised by the tracker core."""


class NutriTrackError(Exception):
    """Base class for tracker errors."""


class ValidationError(NutriTrackError, ValueError):
    """Raised when input data is missing required fields or is malformed."""


class StorageError(NutriTrackError):
    """Raised when the underlying blob persistence fails."""


class AnalysisError(NutriTrackError):
    """Raised when the nutrition analysis provider fails or misbehaves."""
