from __future__ import annotations


class BucketError(Exception):
    """Base class for bucket adapter level exceptions."""


class ConfigInvalidError(BucketError):
    """Raised when a required configuration field is missing or malformed."""


class UnsupportedSourceError(BucketError):
    """Raised when an upload source does not expose a determinable length."""


class UploadPartFailedError(BucketError):
    """Raised when a multipart part upload fails and the session was aborted."""

    def __init__(self, message: str, *, object_key: str, part_number: int) -> None:
        super().__init__(message)
        self.object_key = object_key
        self.part_number = part_number


class AbortFailedError(BucketError):
    """Raised when aborting a multipart session fails.

    The part failure that triggered the abort is masked by this error; it is
    still available as ``__context__``.
    """

    def __init__(self, message: str, *, object_key: str, part_number: int) -> None:
        super().__init__(message)
        self.object_key = object_key
        self.part_number = part_number


class InvalidRangeError(BucketError):
    """Raised when a requested byte range has an invalid ordering."""


class EmptyNameError(BucketError):
    """Raised when an operation is given an empty object name."""


class ListingFailedError(BucketError):
    """Raised when fetching a listing page fails."""


class VisitorFailedError(BucketError):
    """Raised when the iteration callback fails for an entry."""

    def __init__(self, message: str, *, key: str, is_directory: bool) -> None:
        super().__init__(message)
        self.key = key
        self.is_directory = is_directory


class CancelledError(BucketError):
    """Raised when a long-running operation observes cancellation."""
