"""
Custom exceptions for imagepig.

Every failure the client can report is one of these types, so callers can
tell a local mistake from a transport failure from a service rejection.
"""


class ImagePigError(Exception):
    """Base exception for all imagepig errors."""

    pass


class ConfigurationError(ImagePigError):
    """Raised when the client is constructed with an invalid credential or config."""

    pass


class ValidationError(ImagePigError):
    """Raised when call arguments are rejected before any request is sent."""

    def __init__(self, message: str, field: str = "") -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Name of the argument that failed validation (optional)
        """
        self.field = field
        super().__init__(message)


class APIError(ImagePigError):
    """Raised when the service rejects a request or returns an unusable body."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        response: str = "",
        service_message: str = "",
    ) -> None:
        """
        Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response: Raw response body (if available)
            service_message: Error text reported by the service, verbatim
        """
        self.status_code = status_code
        self.response = response
        self.service_message = service_message
        super().__init__(message)


class NetworkError(ImagePigError):
    """Raised when the service could not be reached (DNS, connect, TLS)."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """
        Initialize network error.

        Args:
            message: Error message
            original_error: The underlying exception that caused this error
        """
        self.original_error = original_error
        super().__init__(message)


class RequestTimeoutError(ImagePigError):
    """Raised when a request exceeds the configured timeout."""

    pass


class CancellationError(ImagePigError):
    """Raised when an in-flight request is cancelled by the caller."""

    pass


class MissingDataError(ImagePigError):
    """Raised when a result's image bytes cannot be materialized."""

    pass


class ImageIOError(ImagePigError):
    """Raised when saving image bytes to a file fails."""

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class ImageProcessingError(ImagePigError):
    """Raised when an input image cannot be read or decoded."""

    def __init__(self, message: str, image_path: str = "") -> None:
        """
        Initialize image processing error.

        Args:
            message: Error message
            image_path: Path to the image that caused the error
        """
        self.image_path = image_path
        super().__init__(message)
