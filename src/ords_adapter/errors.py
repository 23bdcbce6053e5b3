"""Exception types raised by the adapter."""

from __future__ import annotations

from typing import Optional


class AdapterError(Exception):
    pass


class ConfigurationError(AdapterError):
    pass


class DiscoveryFetchError(AdapterError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CatalogParseError(AdapterError):
    pass


class AuthError(AdapterError):
    def __init__(
        self, message: str, status_code: Optional[int] = None, body: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TransportError(AdapterError):
    pass
