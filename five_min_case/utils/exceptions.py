"""
Custom exceptions for the five-min-case pipeline.
"""


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, url: str = None, status_code: int = None):
        self.message = message
        self.url = url
        self.status_code = status_code
        super().__init__(self.message)

    def __str__(self):
        error_parts = [self.message]
        if self.url:
            error_parts.append(f"URL: {self.url}")
        if self.status_code:
            error_parts.append(f"Status: {self.status_code}")
        return " - ".join(error_parts)


class NetworkError(PipelineError):
    """Raised when a request to a source or the store fails."""
    pass


class RateLimitError(PipelineError):
    """Raised when a remote service answers 429. Never retried."""

    def __init__(self, message: str, retry_after: int = None, url: str = None):
        self.retry_after = retry_after
        super().__init__(message, url, 429)

    def __str__(self):
        error_str = super().__str__()
        if self.retry_after:
            error_str += f" - Retry after: {self.retry_after}s"
        return error_str


class ParsingError(PipelineError):
    """Raised when a feed, API payload or stored document cannot be parsed."""
    pass


class AuthenticationError(PipelineError):
    """Raised when credentials are rejected."""
    pass


class DataNotFoundError(PipelineError):
    """Raised when expected data cannot be found."""
    pass


class ValidationError(PipelineError):
    """Raised when a record does not match the canonical field set."""

    def __init__(self, message: str, fields=None):
        self.fields = list(fields or [])
        super().__init__(message)

    def __str__(self):
        if self.fields:
            return f"{self.message} - Fields: {', '.join(self.fields)}"
        return self.message


class StoreError(PipelineError):
    """Raised when the document store rejects an operation."""
    pass


class ConflictError(StoreError):
    """Raised when a document with the same id already exists."""
    pass


class ConfigurationError(PipelineError):
    """Raised when a required setting or credential is missing."""
    pass
