"""Custom TTS and request exceptions."""


class InputValidationError(ValueError):
    """Raised when a synthesis request is missing or has invalid fields.

    Surfaces to HTTP callers as 400 and never reaches the upstream API.
    """

    pass


class TTSError(Exception):
    """Base exception for TTS-related errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class TTSAuthError(TTSError):
    """Exception raised for authentication failures.

    This typically occurs when:
    - API key is missing or invalid
    - Account has insufficient credits
    """

    pass


class TTSAPIError(TTSError):
    """Exception raised for upstream API failures.

    ``detail`` holds the upstream error body verbatim when one was returned,
    otherwise the stringified original error.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code
        self.detail = detail if detail is not None else message


class TTSTimeoutError(TTSAPIError):
    """Exception raised when an upstream call exceeds its timeout."""

    pass
