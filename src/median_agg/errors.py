"""Exception hierarchy for the median aggregate."""


class MedianAggError(Exception):
    """Base class for every error raised by median_agg."""


class TypeResolutionError(MedianAggError, LookupError):
    """No ordering capability is available for a value type."""

    def __init__(self, type_id, message: str = None):
        self.type_id = type_id
        if message is None:
            message = f"could not identify a comparison function for type {type_id}"
        super().__init__(message)


class InvalidStateError(MedianAggError):
    """An operation was invoked against a missing or incompatible state."""


class TypeMismatchError(InvalidStateError):
    """Two states (or a state and a value) describe different value types."""


class CorruptDataError(MedianAggError, ValueError):
    """A serialized state is truncated or malformed."""
