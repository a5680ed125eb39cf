"""
Value types shared by the OAuth signer and the client.

All types here are immutable: they are built once per signing
operation and only read afterwards.
"""

import enum
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

from .constants import DEFAULT_OAUTH_VERSION


class SignatureMethod(enum.Enum):
    """OAuth 1.0a signature methods, valued by their protocol name."""

    HMAC_SHA1 = "HMAC-SHA1"
    HMAC_SHA256 = "HMAC-SHA256"
    HMAC_SHA512 = "HMAC-SHA512"
    RSA_SHA1 = "RSA-SHA1"
    RSA_SHA256 = "RSA-SHA256"
    RSA_SHA512 = "RSA-SHA512"
    PLAINTEXT = "PLAINTEXT"


class RequestKind(enum.Enum):
    """Stage of the OAuth 1.0a flow a request belongs to."""

    REQUEST_TOKEN = "request_token"
    ACCESS_TOKEN = "access_token"
    PROTECTED_RESOURCE = "protected_resource"


@dataclass(frozen=True)
class Credential:
    """Consumer and token credentials used to sign a request."""

    consumer_key: str
    consumer_secret: str
    token_key: Optional[str] = None
    token_secret: Optional[str] = None
    signature_method: SignatureMethod = SignatureMethod.HMAC_SHA1
    version: str = DEFAULT_OAUTH_VERSION
    verifier: Optional[str] = None

    def __repr__(self) -> str:
        # Secrets stay out of logs and tracebacks
        return (
            f"Credential(consumer_key={self.consumer_key!r}, "
            f"token_key={self.token_key!r}, "
            f"signature_method={self.signature_method.value})"
        )


@dataclass(frozen=True)
class RequestDescriptor:
    """The parts of an outgoing request that take part in signing."""

    url: str
    method: str = "GET"
    callback_url: Optional[str] = None
    session_handle: Optional[str] = None


class ProtocolParameters:
    """
    Immutable set of OAuth parameters, sorted by key.

    Keys are sorted lexically on the raw (case-sensitive) key when the
    instance is built, so iteration order is always the order used for
    the base string and the Authorization header. Repeated keys (request
    parameters such as id=1&id=2) are only allowed with unique=False and
    are then ordered by value.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[Tuple[str, str]] = (), unique: bool = True):
        pairs = []
        for key, value in items:
            if not isinstance(key, str) or not isinstance(value, str):
                raise TypeError(f"protocol parameter {key!r} must be a str pair, got {type(value).__name__}")
            pairs.append((key, value))
        if unique:
            keys = [key for key, _ in pairs]
            if len(keys) != len(set(keys)):
                raise ValueError("duplicate protocol parameter")
        self._items = tuple(sorted(pairs))

    def with_parameter(self, key: str, value: str) -> "ProtocolParameters":
        """Return a new set with one more parameter."""
        return ProtocolParameters(self._items + ((key, value),))

    def keys(self) -> Tuple[str, ...]:
        return tuple(key for key, _ in self._items)

    def items(self) -> Tuple[Tuple[str, str], ...]:
        return self._items

    def __getitem__(self, key: str) -> str:
        for item_key, value in self._items:
            if item_key == key:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return any(item_key == key for item_key, _ in self._items)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProtocolParameters):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"ProtocolParameters({list(self.keys())!r})"
