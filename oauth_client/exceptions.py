"""
Custom exceptions for OAuth client library.
"""


class OAuthClientError(Exception):
    """Base exception for OAuth client errors."""
    pass


class MissingCredentialFieldError(OAuthClientError, ValueError):
    """Raised when a credential field required for signing is blank."""

    def __init__(self, field: str):
        super().__init__(f"credential field '{field}' is required")
        self.field = field


class MissingRequestFieldError(OAuthClientError, ValueError):
    """Raised when a request field required for signing is blank."""

    def __init__(self, field: str):
        super().__init__(f"request field '{field}' is required")
        self.field = field


class ReservedParameterError(OAuthClientError, ValueError):
    """Raised when a request parameter uses the oauth_ namespace."""
    pass


class UnsupportedSignatureMethodError(OAuthClientError):
    """Raised when the selected signature method has no implementation."""

    def __init__(self, method):
        super().__init__(f"signature method {method.value} is not supported")
        self.method = method


class MalformedUrlError(OAuthClientError, ValueError):
    """Raised when a URL cannot be parsed as an absolute URI."""
    pass


class ConfigurationError(OAuthClientError):
    """Raised when client configuration is invalid."""
    pass


class HTTPError(OAuthClientError):
    """Raised when HTTP request fails."""
    pass
