"""
OAuth Client Library

A requests-based HTTP client that signs requests with OAuth 1.0a and
can serialize requests through a single-slot concurrency gate.

Example usage:
    from oauth_client import Credential, OAuthClient

    credential = Credential("consumer-key", "consumer-secret",
                            token_key="token", token_secret="token-secret")
    with OAuthClient("https://api.example.com", credential) as client:
        response = client.get("/1/statuses", params={"count": "5"})
"""

from .client import OAuthClient
from .exceptions import (
    OAuthClientError,
    MissingCredentialFieldError,
    MissingRequestFieldError,
    ReservedParameterError,
    UnsupportedSignatureMethodError,
    MalformedUrlError,
    ConfigurationError,
    HTTPError
)
from .gate import ConcurrencyGate, GateState
from .models import (
    Credential,
    ProtocolParameters,
    RequestDescriptor,
    RequestKind,
    SignatureMethod
)
from .oauth import build_authorization_value
from .responses import RestResponse

__version__ = "1.0.0"
__all__ = [
    "OAuthClient",
    "OAuthClientError",
    "MissingCredentialFieldError",
    "MissingRequestFieldError",
    "ReservedParameterError",
    "UnsupportedSignatureMethodError",
    "MalformedUrlError",
    "ConfigurationError",
    "HTTPError",
    "ConcurrencyGate",
    "GateState",
    "Credential",
    "ProtocolParameters",
    "RequestDescriptor",
    "RequestKind",
    "SignatureMethod",
    "build_authorization_value",
    "RestResponse"
]
