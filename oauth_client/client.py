"""
HTTP client with OAuth 1.0a request signing.

This module provides a small requests-based client: fluent header and
authentication management, per-client request serialization through a
ConcurrencyGate and an OAuth 1.0a Authorization header on every request
once a credential is configured.
"""

import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, urljoin, urlsplit

import requests

from .constants import (
    DEFAULT_CONFIG,
    DEFAULT_HEADERS,
    HEADER_AUTHORIZATION,
    HEADER_USER_AGENT,
)
from .exceptions import ConfigurationError, HTTPError
from .gate import ConcurrencyGate
from .models import Credential, RequestDescriptor, RequestKind
from .oauth import build_authorization_value
from .responses import RestResponse

logger = logging.getLogger(__name__)


class OAuthClient:
    """
    HTTP client for OAuth 1.0a protected APIs.

    One client owns one requests.Session and one ConcurrencyGate. Callers
    that need exclusive use of the client wrap their requests in
    block_client()/unblock_client().
    """

    def __init__(self, base_url: str, credential: Optional[Credential] = None, **config):
        """
        Initialize OAuth client.

        Args:
            base_url: Base URL for HTTP requests (absolute http/https)
            credential: OAuth credential used to sign every request
            **config: Configuration options (timeout, block_seconds, user_agent)
        """
        self.id = str(uuid.uuid4())
        self.base_url = (base_url or '').rstrip('/')

        # Merge default config with user overrides
        self.config = {**DEFAULT_CONFIG, **config}

        # Validate configuration
        self._validate_config()

        self._request_headers: Dict[str, str] = {}
        self._request_token: Optional[str] = None
        self._credential: Optional[Credential] = None
        self._request_kind = RequestKind.PROTECTED_RESOURCE
        self._callback_url: Optional[str] = None
        self._session_handle: Optional[str] = None
        if credential is not None:
            self.set_oauth(credential)

        self.gate = ConcurrencyGate(name=self.id)

        # Create HTTP session
        self.session = requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)
        self.session.headers[HEADER_USER_AGENT] = self.config['user_agent']

    def _validate_config(self):
        """Validate client configuration."""
        parts = urlsplit(self.base_url)
        if parts.scheme not in ('http', 'https') or not parts.netloc:
            raise ConfigurationError(f"base_url must be an absolute http(s) URL: {self.base_url!r}")

        if self.config['timeout'] <= 0:
            raise ConfigurationError("timeout must be positive")

        if self.config['block_seconds'] < 0:
            raise ConfigurationError("block_seconds cannot be negative")

    # Headers and authentication

    def add_request_header(self, name: str, value: str) -> 'OAuthClient':
        """Add a header sent with every request; an existing header is kept."""
        self._request_headers.setdefault(name, value)
        return self

    def replace_request_header(self, name: str, value: str) -> 'OAuthClient':
        self._request_headers[name] = value
        return self

    def clear_request_headers(self) -> 'OAuthClient':
        self._request_headers = {}
        return self

    def get_request_headers(self) -> Dict[str, str]:
        return dict(self._request_headers)

    def add_request_authentication(self, token: str, token_prefix: str = "Bearer") -> 'OAuthClient':
        """
        Send a token Authorization header with every request.

        An OAuth credential, when set, takes precedence over the token.
        """
        self._request_token = f"{token_prefix or ''} {token}".strip()
        return self

    def clear_request_authentication(self) -> 'OAuthClient':
        self._request_token = None
        return self

    def set_client_authentication(self, token: str, token_prefix: str = "Bearer") -> 'OAuthClient':
        """
        Set a default Authorization header on the session.

        Per-request authentication (OAuth or add_request_authentication)
        overrides it.
        """
        self.session.headers[HEADER_AUTHORIZATION] = f"{token_prefix or ''} {token}".strip()
        return self

    def clear_client_authentication(self) -> 'OAuthClient':
        self.session.headers.pop(HEADER_AUTHORIZATION, None)
        return self

    def set_oauth(self, credential: Credential,
                  request_kind: RequestKind = RequestKind.PROTECTED_RESOURCE,
                  callback_url: Optional[str] = None,
                  session_handle: Optional[str] = None) -> 'OAuthClient':
        """
        Sign every following request with OAuth 1.0a.

        Args:
            credential: Consumer and token credentials
            request_kind: Stage of the OAuth flow the requests belong to
            callback_url: Sent as oauth_callback when set
            session_handle: Sent as oauth_session_handle when set
        """
        self._credential = credential
        self._request_kind = request_kind
        self._callback_url = callback_url
        self._session_handle = session_handle
        return self

    def clear_oauth(self) -> 'OAuthClient':
        self._credential = None
        self._request_kind = RequestKind.PROTECTED_RESOURCE
        self._callback_url = None
        self._session_handle = None
        return self

    # Exclusive use

    def block_client(self, block_seconds: Optional[float] = None, message: Optional[str] = None,
                     timeout: Optional[float] = None) -> 'OAuthClient':
        """
        Wait until no other caller holds this client, then hold it.

        Args:
            block_seconds: Auto-release after this many seconds
                (defaults to config block_seconds, 0 disables it)
            message: Describes the holder in debug logs
            timeout: Maximum time to wait for the client

        Raises:
            HTTPError: If the client could not be acquired within timeout
        """
        if block_seconds is None:
            block_seconds = self.config['block_seconds']
        if not self.gate.acquire(block_seconds, message, timeout=timeout):
            raise HTTPError(f"client {self.id} is busy: timed out after {timeout} seconds")
        return self

    def unblock_client(self, message: Optional[str] = None) -> 'OAuthClient':
        """Release this client; a no-op when it is not held."""
        self.gate.release(message)
        return self

    # Requests

    @staticmethod
    def _signing_parameters(params, data) -> Optional[List[Tuple[str, Any]]]:
        """Query parameters plus form fields; raw and JSON bodies are not signed."""
        pairs = []
        if isinstance(params, (str, bytes)):
            if isinstance(params, bytes):
                params = params.decode("utf-8")
            pairs.extend(parse_qsl(params, keep_blank_values=True))
        for source in (params, data):
            if isinstance(source, Mapping):
                pairs.extend(source.items())
            elif isinstance(source, (list, tuple)):
                pairs.extend(source)
        return pairs or None

    def _authorization(self, method: str, url: str, params=None, data=None) -> Optional[str]:
        if self._credential is not None:
            descriptor = RequestDescriptor(
                url=url,
                method=method,
                callback_url=self._callback_url,
                session_handle=self._session_handle
            )
            return build_authorization_value(
                self._credential,
                self._request_kind,
                descriptor,
                parameters=self._signing_parameters(params, data),
                include_prefix=True
            )
        return self._request_token

    def _make_request(self, method: str, path: str, params: Optional[Dict[str, str]] = None,
                      json_data=None, data: Union[Mapping[str, Any], str, bytes, None] = None, **kwargs) -> RestResponse:
        """
        Make HTTP request with the configured authentication.

        Args:
            method: HTTP method
            path: URL path (relative to base_url)
            params: Query parameters (part of the OAuth signature)
            json_data: JSON data to send
            data: Form fields (part of the OAuth signature) or raw body
            **kwargs: Additional requests arguments

        Returns:
            RestResponse wrapping the requests.Response

        Raises:
            HTTPError: If request fails
        """
        url = urljoin(self.base_url + '/', path.lstrip('/'))

        headers = dict(self._request_headers)
        headers.update(kwargs.pop('headers', None) or {})

        authorization = self._authorization(method, url, params, data)
        if authorization:
            headers[HEADER_AUTHORIZATION] = authorization

        kwargs['headers'] = headers
        kwargs.setdefault('timeout', self.config['timeout'])
        if params:
            kwargs['params'] = params
        if json_data is not None:
            kwargs['json'] = json_data
        if data is not None:
            kwargs['data'] = data

        logger.debug("Client %s: %s request to %s", self.id, method, url)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.warning("Client %s: %s %s failed: %s", self.id, method, url, e)
            raise HTTPError(f"HTTP request failed: {e}") from e
        return RestResponse(response)

    def get(self, path: str, params: Optional[Dict[str, str]] = None, **kwargs) -> RestResponse:
        """Make GET request."""
        return self._make_request('GET', path, params=params, **kwargs)

    def post(self, path: str, json=None, data=None, **kwargs) -> RestResponse:
        """Make POST request."""
        return self._make_request('POST', path, json_data=json, data=data, **kwargs)

    def put(self, path: str, json=None, data=None, **kwargs) -> RestResponse:
        """Make PUT request."""
        return self._make_request('PUT', path, json_data=json, data=data, **kwargs)

    def delete(self, path: str, **kwargs) -> RestResponse:
        """Make DELETE request."""
        return self._make_request('DELETE', path, **kwargs)

    def close(self):
        """Close HTTP session and release the gate."""
        self.gate.release("client closed")
        if self.session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
