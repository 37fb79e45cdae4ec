"""Error taxonomy shared by the external provider clients."""

from __future__ import annotations


class ProviderError(Exception):
    """Base class for expected failures talking to an external provider."""


class ConfigurationError(ProviderError):
    """The client cannot be built, typically because a credential is missing."""


class ApiError(ProviderError):
    """The provider answered with an error status or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RateLimitError(ApiError):
    """HTTP 429 from the provider."""


class InvalidResponseError(ApiError):
    """The provider answered, but not with something we can use."""


__all__ = [
    "ProviderError",
    "ConfigurationError",
    "ApiError",
    "RateLimitError",
    "InvalidResponseError",
]
