"""
Error taxonomy shared by the stores, services and HTTP layer.

The API layer maps each class to an HTTP status via `status_code`.
"""


class TripMateError(Exception):
    """Base exception for Trip Mate errors."""

    status_code = 500

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(TripMateError):
    """Raised when a request field is missing or malformed."""

    status_code = 400


class NotFoundError(TripMateError):
    """Raised when a referenced trip or item does not exist."""

    status_code = 404


class StoreUnavailableError(TripMateError):
    """Raised when the document store cannot be reached or rejects a write."""

    pass


class UploadFailedError(TripMateError):
    """Raised when the object store rejects an upload."""

    pass


class ClassificationFailedError(TripMateError):
    """Raised when the AI gateway fails or returns an unusable response."""

    pass


class DownloadFailedError(TripMateError):
    """Raised when the download proxy cannot fetch the remote asset."""

    def __init__(self, message: str, status_code: int = 500, **context):
        super().__init__(message, **context)
        self.status_code = status_code
