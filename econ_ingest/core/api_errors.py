"""
Standardized error classification for the ingestion core.

Provides a unified error hierarchy for provider clients, adapters and the
sync pipeline. Each error type indicates whether the operation should be
retried and includes context for debugging.

Error messages are scrubbed of credentials when the error is constructed,
so anything that ends up in logs or status output is safe to show.
"""

import re
from typing import Optional, Dict, Any, Iterable


# Query-string and header forms in which provider credentials travel
_SECRET_PATTERNS = [
    re.compile(
        r"(?i)\b((?:api_key|apikey|registrationkey|token|access_token)=)([^&\s'\"]+)"
    ),
    re.compile(r"(?i)(x-rapidapi-key['\"]?\s*[:=]\s*['\"]?)([^'\"\s,}]+)"),
    re.compile(r"(?i)(\"registrationkey\"\s*:\s*\")([^\"]+)"),
]

REDACTED = "***"


def redact_secrets(text: str, secrets: Optional[Iterable[Optional[str]]] = None) -> str:
    """
    Mask API keys in free text.

    Args:
        text: Message that may contain credentials
        secrets: Known secret values to mask wherever they appear

    Returns:
        The text with credential values replaced by ``***``
    """
    if not text:
        return text
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(rf"\g<1>{REDACTED}", text)
    for secret in secrets or ():
        if secret and len(secret) >= 4:
            text = text.replace(secret, REDACTED)
    return text


def sanitize_error_message(error: Any, max_length: int = 200) -> str:
    """Render an error for status output: redacted and truncated."""
    message = redact_secrets(str(error) or error.__class__.__name__)
    if len(message) > max_length:
        return message[:max_length] + "..."
    return message


class APIError(Exception):
    """
    Base exception for all API-related errors.

    Attributes:
        message: Human-readable error description (credentials redacted)
        source: Source tag (e.g., 'FRED', 'BLS')
        status_code: HTTP status code if applicable
        response_data: Raw response data for debugging
        retryable: Whether this error should trigger a retry
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
        response_data: Optional[Any] = None,
        retryable: bool = False,
    ):
        message = redact_secrets(message)
        super().__init__(message)
        self.message = message
        self.source = source
        self.status_code = status_code
        self.response_data = response_data
        self.retryable = retryable

    def __str__(self) -> str:
        parts = [self.message]
        if self.source:
            parts.insert(0, f"[{self.source}]")
        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "source": self.source,
            "status_code": self.status_code,
            "retryable": self.retryable,
        }


class RetryableError(APIError):
    """
    Transient errors that should trigger a retry.

    Examples:
    - HTTP 500-599 server errors
    - Network timeouts
    - Connection reset errors
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
        response_data: Optional[Any] = None,
    ):
        super().__init__(
            message=message,
            source=source,
            status_code=status_code,
            response_data=response_data,
            retryable=True,
        )


class RateLimitError(APIError):
    """
    Rate limiting error (HTTP 429 or API-specific throttling).

    The HTTP client waits ``retry_after`` seconds and tries again; this error
    only escapes once the retry budget is spent.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        retry_after: Optional[int] = None,
        response_data: Optional[Any] = None,
    ):
        super().__init__(
            message=message,
            source=source,
            status_code=429,
            response_data=response_data,
            retryable=True,
        )
        self.retry_after = retry_after or 60


class FatalError(APIError):
    """
    Non-retryable errors that indicate a permanent problem.

    Examples:
    - Invalid API key (401)
    - Resource not found (404)
    - Invalid request parameters (400)
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
        response_data: Optional[Any] = None,
    ):
        super().__init__(
            message=message,
            source=source,
            status_code=status_code,
            response_data=response_data,
            retryable=False,
        )


class AuthenticationError(FatalError):
    """Authentication failed - invalid or missing API key (HTTP 401)."""

    def __init__(
        self,
        message: str = "Authentication failed - check API key",
        source: Optional[str] = None,
        response_data: Optional[Any] = None,
    ):
        super().__init__(
            message=message, source=source, status_code=401, response_data=response_data
        )


class NotFoundError(FatalError):
    """Requested resource not found (HTTP 404)."""

    def __init__(
        self,
        message: str = "Resource not found",
        source: Optional[str] = None,
        resource_id: Optional[str] = None,
        response_data: Optional[Any] = None,
    ):
        if resource_id:
            message = f"{message}: {resource_id}"
        super().__init__(
            message=message, source=source, status_code=404, response_data=response_data
        )
        self.resource_id = resource_id


class ValidationError(FatalError):
    """Request validation failed - invalid parameters (HTTP 400)."""

    def __init__(
        self,
        message: str = "Invalid request parameters",
        source: Optional[str] = None,
        response_data: Optional[Any] = None,
    ):
        super().__init__(
            message=message, source=source, status_code=400, response_data=response_data
        )


class ConfigurationError(FatalError):
    """
    Configuration error - missing required settings.

    Raised when an adapter that needs an API key is initialized without one,
    or when an adapter is used before it has been initialized.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        missing_config: Optional[str] = None,
    ):
        super().__init__(message=message, source=source)
        self.missing_config = missing_config


class ConfigNotFoundError(FatalError):
    """An indicator is not declared in the catalog of the requested source."""

    def __init__(self, indicator: str, source: Optional[str] = None):
        where = f" in {source}" if source else ""
        super().__init__(
            message=f"Core indicator configuration not found for {indicator}{where}",
            source=source,
        )
        self.indicator = indicator


class AdapterNotFoundError(FatalError):
    """No adapter is registered for a source tag."""

    def __init__(self, source: str):
        super().__init__(message=f"No adapter registered for source '{source}'")
        self.requested_source = source


class UpstreamError(APIError):
    """
    A provider call failed: non-success HTTP status, exhausted retries or a
    payload that could not be parsed.

    Not retried per call; the scheduler's job-level retry covers it.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
        retryable: bool = False,
    ):
        super().__init__(
            message=message,
            source=source,
            status_code=status_code,
            retryable=retryable,
        )

    @classmethod
    def wrap(cls, error: Exception, source: str) -> "UpstreamError":
        """Convert any client-side failure into an UpstreamError."""
        if isinstance(error, UpstreamError):
            return error
        if isinstance(error, APIError):
            return cls(
                message=error.message,
                source=source,
                status_code=error.status_code,
                retryable=error.retryable,
            )
        return cls(
            message=f"Malformed response: {error.__class__.__name__}: {error}",
            source=source,
        )


class PersistenceError(APIError):
    """Upserting data points failed; aborts only the affected indicator."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message=message, source=source)


class SyncTimeoutError(TimeoutError):
    """A sync job exceeded its wall-clock budget and was cancelled."""

    def __init__(self, job_id: str, timeout_seconds: float):
        super().__init__(
            f"TimeoutError: job {job_id} exceeded {timeout_seconds:g}s and was cancelled"
        )
        self.job_id = job_id
        self.timeout_seconds = timeout_seconds


def classify_http_error(
    status_code: int, response_text: str = "", source: Optional[str] = None
) -> APIError:
    """
    Classify an HTTP error into the appropriate APIError subclass.

    Args:
        status_code: HTTP status code
        response_text: Response body text
        source: Source tag

    Returns:
        Appropriate APIError subclass instance
    """
    if status_code == 429:
        return RateLimitError(
            message=f"Rate limited: {response_text[:200]}", source=source
        )
    elif status_code == 401:
        return AuthenticationError(
            message=f"Authentication failed: {response_text[:200]}", source=source
        )
    elif status_code == 403:
        return FatalError(
            message=f"Access forbidden: {response_text[:200]}",
            source=source,
            status_code=403,
        )
    elif status_code == 404:
        return NotFoundError(message=f"Not found: {response_text[:200]}", source=source)
    elif status_code == 400:
        return ValidationError(
            message=f"Bad request: {response_text[:200]}", source=source
        )
    elif 500 <= status_code < 600:
        return RetryableError(
            message=f"Server error: {response_text[:200]}",
            source=source,
            status_code=status_code,
        )
    else:
        return APIError(
            message=f"HTTP error {status_code}: {response_text[:200]}",
            source=source,
            status_code=status_code,
            retryable=False,
        )


# Failure kinds that do not fail a sync job: throttling clears on its own,
# and configuration problems are not fixed by running the job again.
NON_CRITICAL_FAILURES = frozenset({
    "RateLimitError",
    "ConfigurationError",
    "ConfigNotFoundError",
    "AdapterNotFoundError",
})


def failure_kind(error: BaseException) -> str:
    """
    Name the kind of an indicator-level failure.

    Throttling counts as RateLimitError even after it has been wrapped
    into an UpstreamError.
    """
    if isinstance(error, APIError) and error.status_code == 429:
        return "RateLimitError"
    return error.__class__.__name__
