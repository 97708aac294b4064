class CatalogError(Exception):
    """Base exception for all catalog core errors."""


class AuthExchangeFailure(CatalogError):
    """Raised when the client-credentials exchange fails or returns no usable token."""

    def __init__(self, message: str, status_code: int | None = None, original_error: Exception | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.original_error = original_error


class TransportFailure(CatalogError):
    """Raised when a request cannot be completed (DNS, connection refused, non-2xx status)."""

    def __init__(self, endpoint: str, status_code: int | None = None, original_error: Exception | None = None):
        msg = f"Request to {endpoint} failed"
        if status_code:
            msg += f" (Status: {status_code})"
        if original_error:
            msg += f": {original_error}"
        super().__init__(msg)
        self.endpoint = endpoint
        self.status_code = status_code
        self.original_error = original_error


class ParseFailure(CatalogError):
    """Raised when a response body is not valid JSON or has an unexpected shape."""

    def __init__(self, endpoint: str, details: str):
        super().__init__(f"Failed to parse response from {endpoint}: {details}")
        self.endpoint = endpoint
        self.details = details


class CacheWriteFailure(CatalogError):
    """Raised when a game record cannot be written to the local cache."""

    def __init__(self, remote_id: str, original_error: Exception | None = None):
        super().__init__(f"Failed to cache game '{remote_id}': {original_error}")
        self.remote_id = remote_id
        self.original_error = original_error
