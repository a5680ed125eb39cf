"""
OAuth 1.0a request signing.

Builds the Authorization header value for a request: validate the
credential, collect the protocol parameters, render the base string,
sign it and write the header.

See https://developer.twitter.com/en/docs/authentication/oauth-1-0a/creating-a-signature
"""

import base64
import hashlib
import hmac
import time
import uuid
from typing import Any, Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, quote, urlsplit, urlunsplit

from .constants import (
    DEFAULT_PORTS,
    OAUTH_CALLBACK,
    OAUTH_CONSUMER_KEY,
    OAUTH_HEADER_PREFIX,
    OAUTH_NONCE,
    OAUTH_PARAMETER_PREFIX,
    OAUTH_SESSION_HANDLE,
    OAUTH_SIGNATURE,
    OAUTH_SIGNATURE_METHOD,
    OAUTH_TIMESTAMP,
    OAUTH_TOKEN,
    OAUTH_VERIFIER,
    OAUTH_VERSION,
)
from .exceptions import (
    MalformedUrlError,
    MissingCredentialFieldError,
    MissingRequestFieldError,
    ReservedParameterError,
    UnsupportedSignatureMethodError,
)
from .models import (
    Credential,
    ProtocolParameters,
    RequestDescriptor,
    RequestKind,
    SignatureMethod,
)

# Mapping or sequence of pairs, as accepted by requests for params/data
RequestParameters = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]

# RFC 3986 pchar plus "/" and "%"; query and fragment also allow "?"
_URL_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_URL_QUERY_SAFE = _URL_PATH_SAFE + "?"


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def percent_encode(value: str) -> str:
    """Percent-encode everything except A-Z, a-z, 0-9, '-', '.', '_' and '~'."""
    return quote(str(value), safe="")


def generate_timestamp() -> str:
    """Seconds since the Unix epoch as a base-10 string."""
    return str(int(time.time()))


def generate_nonce() -> str:
    """Random 32 character hex token."""
    return uuid.uuid4().hex


def normalize_url(url: str) -> str:
    """
    Normalize an absolute URL for the base string.

    Lower-cases scheme and host, drops the scheme's default port and
    turns an empty path into '/'. Query and fragment are kept; raw
    characters in path, query and fragment are percent-escaped the way
    an HTTP client puts them on the wire, existing escapes are left alone.

    Raises:
        MalformedUrlError: If the URL is not an absolute URI
    """
    try:
        parts = urlsplit(str(url).strip())
        port = parts.port
    except ValueError as e:
        raise MalformedUrlError(f"cannot parse URL {url!r}: {e}") from e

    if not parts.scheme or not parts.hostname:
        raise MalformedUrlError(f"URL {url!r} is not absolute")

    scheme = parts.scheme.lower()
    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    netloc = host
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        netloc = f"{netloc}:{port}"
    userinfo, at, _ = parts.netloc.rpartition("@")
    if at:
        netloc = f"{userinfo}@{netloc}"

    # Escape raw characters (spaces, non-ASCII) and keep existing escapes
    path = quote(parts.path or "/", safe=_URL_PATH_SAFE)
    query = quote(parts.query, safe=_URL_QUERY_SAFE)
    fragment = quote(parts.fragment, safe=_URL_QUERY_SAFE)
    return urlunsplit((scheme, netloc, path, query, fragment))


def validate_inputs(credential: Credential, request_kind: RequestKind,
                    request: RequestDescriptor) -> None:
    """
    Check the fields needed to sign a request of the given kind.

    Checks run in a fixed order and the first failure is raised.

    Raises:
        MissingCredentialFieldError: If a required credential field is blank
        MissingRequestFieldError: If the request URL is blank
    """
    if credential is None:
        raise MissingCredentialFieldError("credential")
    if _is_blank(credential.consumer_key):
        raise MissingCredentialFieldError("consumer_key")
    if _is_blank(credential.consumer_secret):
        raise MissingCredentialFieldError("consumer_secret")
    if request is None or _is_blank(request.url):
        raise MissingRequestFieldError("url")

    if request_kind is RequestKind.ACCESS_TOKEN:
        if _is_blank(credential.token_key):
            raise MissingCredentialFieldError("token_key")
        if _is_blank(credential.token_secret):
            raise MissingCredentialFieldError("token_secret")


def collect_header_parameters(credential: Credential, request_kind: RequestKind,
                              request: RequestDescriptor,
                              nonce: Optional[str] = None,
                              timestamp: Optional[str] = None) -> ProtocolParameters:
    """
    Collect the protocol parameters for one signing operation.

    The signature is never part of the result; it is added by the
    caller once the base string built from these parameters is signed.

    Args:
        credential: Consumer and token credentials
        request_kind: Stage of the OAuth flow
        request: Request being signed
        nonce: Fixed nonce (a fresh one is generated when omitted)
        timestamp: Fixed timestamp (the current time when omitted)

    Returns:
        Sorted protocol parameters
    """
    items = [
        (OAUTH_CONSUMER_KEY, credential.consumer_key),
        (OAUTH_NONCE, nonce if nonce is not None else generate_nonce()),
        (OAUTH_TIMESTAMP, timestamp if timestamp is not None else generate_timestamp()),
        (OAUTH_SIGNATURE_METHOD, credential.signature_method.value),
        (OAUTH_VERSION, credential.version),
    ]

    if not _is_blank(credential.verifier):
        items.append((OAUTH_VERIFIER, credential.verifier))
    if not _is_blank(request.callback_url):
        items.append((OAUTH_CALLBACK, request.callback_url))
    if not _is_blank(request.session_handle):
        items.append((OAUTH_SESSION_HANDLE, request.session_handle))

    if request_kind is RequestKind.ACCESS_TOKEN:
        items.append((OAUTH_TOKEN, credential.token_key))

    return ProtocolParameters(items)


def build_base_string(method: str, url: str, parameters: ProtocolParameters) -> str:
    """
    Render the signature base string.

    Format: METHOD&encoded-url&encoded(key=value)&encoded(key=value)...
    Each key=value pair is encoded as one unit, with the key
    lower-cased, in the parameters' sorted order.

    Raises:
        MalformedUrlError: If the URL is not an absolute URI
    """
    pairs = "&".join(
        percent_encode(f"{key.lower()}={value}") for key, value in parameters
    )
    return "&".join([
        str(method).upper(),
        percent_encode(normalize_url(url)),
        pairs,
    ])


def _signing_key(credential: Credential) -> str:
    # Token secret is unknown while obtaining a request token; the '&' stays
    return "&".join([
        percent_encode(credential.consumer_secret),
        percent_encode(credential.token_secret or ""),
    ])


def generate_signature(credential: Credential, base_string: str) -> str:
    """
    Sign a base string with the credential's signature method.

    Args:
        credential: Credential holding the secrets and signature method
        base_string: Output of build_base_string()

    Returns:
        Percent-encoded base64 signature

    Raises:
        UnsupportedSignatureMethodError: If the method is not implemented
    """
    method = credential.signature_method
    if method is SignatureMethod.HMAC_SHA1:
        mac = hmac.new(
            _signing_key(credential).encode("ascii"),
            base_string.encode("ascii"),
            hashlib.sha1
        )
        signature = base64.b64encode(mac.digest()).decode("ascii")
        return percent_encode(signature)

    raise UnsupportedSignatureMethodError(method)


def write_authorization_header(parameters: ProtocolParameters,
                               include_prefix: bool = False) -> str:
    """Render parameters as key="value" pairs, optionally prefixed with 'OAuth '."""
    header = ",".join(f'{key}="{value}"' for key, value in parameters)
    if include_prefix:
        return f"{OAUTH_HEADER_PREFIX} {header}"
    return header


def _parameter_text(key, value) -> str:
    # Same scalar handling as requests' form/query encoding
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    raise TypeError(f"request parameter {key!r} has unsupported value type {type(value).__name__}")


def _request_parameters(parameters: Optional[RequestParameters]) -> ProtocolParameters:
    """
    Flatten request parameters the way requests puts them on the wire.

    List and tuple values become repeated pairs, None values are dropped.
    """
    if not parameters:
        return ProtocolParameters()
    if isinstance(parameters, bytes):
        parameters = parameters.decode("utf-8")
    if isinstance(parameters, str):
        parameters = parse_qsl(parameters, keep_blank_values=True)
    items = parameters.items() if isinstance(parameters, Mapping) else parameters

    pairs = []
    for key, value in items:
        if isinstance(key, bytes):
            key = key.decode("utf-8")
        key = str(key)
        if key.lower().startswith(OAUTH_PARAMETER_PREFIX):
            raise ReservedParameterError(f"request parameter {key!r} is reserved")
        values = value if isinstance(value, (list, tuple)) else [value]
        pairs.extend((key, _parameter_text(key, item)) for item in values if item is not None)
    return ProtocolParameters(pairs, unique=False)


def build_authorization_value(credential: Credential, request_kind: RequestKind,
                              request: RequestDescriptor,
                              parameters: Optional[RequestParameters] = None,
                              include_prefix: bool = False,
                              nonce: Optional[str] = None,
                              timestamp: Optional[str] = None) -> str:
    """
    Build the OAuth 1.0a Authorization header value for a request.

    Signing is all-or-nothing: any validation, URL or signature method
    error propagates and no header is produced.

    Args:
        credential: Consumer and token credentials
        request_kind: Stage of the OAuth flow
        request: Method, URL and optional callback/session handle
        parameters: Query or form parameters of the request; they take
            part in the base string but are not written to the header
        include_prefix: Prefix the value with 'OAuth '
        nonce: Fixed nonce, for reproducible signatures
        timestamp: Fixed timestamp, for reproducible signatures

    Returns:
        Header value such as 'OAuth oauth_consumer_key="...",...'
    """
    validate_inputs(credential, request_kind, request)
    extra = _request_parameters(parameters)

    header_params = collect_header_parameters(
        credential, request_kind, request, nonce=nonce, timestamp=timestamp
    )
    signing_params = ProtocolParameters(header_params.items() + extra.items(), unique=False)

    base_string = build_base_string(request.method, request.url, signing_params)
    signature = generate_signature(credential, base_string)

    return write_authorization_header(
        header_params.with_parameter(OAUTH_SIGNATURE, signature),
        include_prefix=include_prefix
    )
