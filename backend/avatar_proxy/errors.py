"""
Avatar Proxy Errors

- ClientInputError: request rejected before any upstream call
- UpstreamError: a directory API or CDN call failed
- ResourceAbsentError: the upstream record has no such resource (e.g. banner)
"""

from typing import Optional


class AvatarProxyError(Exception):
    """Base class for resolver failures."""


class ClientInputError(AvatarProxyError):
    """Malformed user id or unsupported option."""


class UpstreamError(AvatarProxyError):
    """Non-success HTTP status or transport failure from an upstream API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ResourceAbsentError(AvatarProxyError):
    """The user exists but the requested resource is not set."""
