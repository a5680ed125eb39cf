"""
Constants for OAuth client library.
OAuth 1.0a parameter names follow RFC 5849 section 3.1.
"""

# OAuth 1.0a protocol parameters
OAUTH_CONSUMER_KEY = "oauth_consumer_key"
OAUTH_NONCE = "oauth_nonce"
OAUTH_TIMESTAMP = "oauth_timestamp"
OAUTH_SIGNATURE_METHOD = "oauth_signature_method"
OAUTH_VERSION = "oauth_version"
OAUTH_SIGNATURE = "oauth_signature"
OAUTH_VERIFIER = "oauth_verifier"
OAUTH_CALLBACK = "oauth_callback"
OAUTH_SESSION_HANDLE = "oauth_session_handle"
OAUTH_TOKEN = "oauth_token"

OAUTH_PARAMETER_PREFIX = "oauth_"
OAUTH_HEADER_PREFIX = "OAuth"
DEFAULT_OAUTH_VERSION = "1.0"

# HTTP headers
HEADER_AUTHORIZATION = "Authorization"
HEADER_ACCEPT = "Accept"
HEADER_USER_AGENT = "User-Agent"

# Default configuration values
DEFAULT_CONFIG = {
    'timeout': 30,              # HTTP timeout in seconds
    'block_seconds': 15,        # auto-release for block_client()
    'user_agent': 'oauth-client',
}

DEFAULT_HEADERS = {
    HEADER_ACCEPT: 'application/json',
}

# Ports dropped from the base string URL
DEFAULT_PORTS = {
    'http': 80,
    'https': 443,
}
