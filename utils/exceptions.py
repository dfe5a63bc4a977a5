from typing import Optional


class ValidationError(ValueError):
    """Custom exception for configuration and input validation errors."""

    pass


class TranslationError(RuntimeError):
    """Custom exception for translation API and processing failures."""

    pass


class TransportError(TranslationError):
    """Base exception for HTTP failures, carrying the last observed outcome."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_text: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text


class TransientTransportError(TransportError):
    """A single failed attempt that is worth retrying (network error, 429/500/503)."""

    pass


class FatalHTTPError(TransportError):
    """Non-retryable HTTP status. Raised without further attempts."""

    pass


class RetriesExhaustedError(TransportError):
    """All attempts were used up without a successful response."""

    def __init__(
        self,
        message: str,
        attempts: int,
        last_error: Optional[TransientTransportError] = None,
    ):
        super().__init__(
            message,
            status_code=last_error.status_code if last_error else None,
            response_text=last_error.response_text if last_error else "",
        )
        self.attempts = attempts
        self.last_error = last_error


class EmptyResponseError(TranslationError):
    """The provider answered successfully but the reply text was empty."""

    pass


class ResponseFormatError(TranslationError):
    """The provider's response envelope could not be read."""

    pass
