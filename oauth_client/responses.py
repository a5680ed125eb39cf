"""
Response wrapper returned by OAuthClient.
"""

from typing import Any, Optional

import requests

from .exceptions import HTTPError


class RestResponse:
    """Thin read-only view over a requests.Response."""

    def __init__(self, response: requests.Response):
        self.original_response = response

    @property
    def status_code(self) -> int:
        return self.original_response.status_code

    @property
    def headers(self):
        return self.original_response.headers

    @property
    def url(self) -> str:
        return self.original_response.url

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def content(self) -> bytes:
        return self.original_response.content

    @property
    def text(self) -> str:
        return self.original_response.text

    def as_json(self, default: Optional[Any] = None) -> Any:
        """
        Decode the body as JSON.

        Returns:
            Decoded body, or default if the body is not valid JSON
        """
        try:
            return self.original_response.json()
        except ValueError:
            return default

    def raise_for_status(self) -> "RestResponse":
        """Raise HTTPError for 4xx/5xx responses."""
        try:
            self.original_response.raise_for_status()
        except requests.HTTPError as e:
            raise HTTPError(f"HTTP {self.status_code}: {e}") from e
        return self

    def __repr__(self) -> str:
        return f"<RestResponse [{self.status_code}]>"
