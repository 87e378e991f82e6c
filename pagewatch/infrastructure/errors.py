"""
Error taxonomy for a watch run.

TransportError / DecodeError on the workspace or item listing abort the run.
NotFoundError on a single item is absorbed by the caller (walker, classifier).
ConfigError is raised before any network call is made.
"""

from __future__ import annotations


class WatchError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TransportError(WatchError):
    """Network failure, timeout, or non-2xx HTTP response."""


class DecodeError(WatchError):
    """Response body is not JSON or does not have the expected shape."""


class NotFoundError(WatchError):
    """Referenced item or user no longer exists (HTTP 404)."""

    def __init__(self, message: str, resource_id: str | None = None):
        super().__init__(message, status_code=404)
        self.resource_id = resource_id


class ConfigError(WatchError):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []
