"""
LinkGuard Custom Exceptions

Centralized exception classes for error handling.
"""

from typing import Dict, Optional


class LinkGuardError(Exception):
    """Base exception for all LinkGuard errors."""
    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


# ============================================================================
# Validation Exceptions
# ============================================================================

class InvalidArgumentError(LinkGuardError):
    """Malformed call: no providers registered, unknown consensus, bad option."""
    pass


class ProviderNotFoundError(LinkGuardError):
    """Requested provider is not registered with the checker."""

    def __init__(self, provider_name: str):
        self.provider_name = provider_name
        super().__init__(f'Provider "{provider_name}" not found')


# ============================================================================
# Provider Exceptions
# ============================================================================

class ProviderError(LinkGuardError):
    """Error while checking a URL against a reputation provider."""
    pass


class ProviderResponseError(ProviderError):
    """Backend answered, but the payload was malformed or reported an error."""
    pass


class ProviderTransportError(ProviderError):
    """
    A backend call failed after all retries were exhausted.

    Wraps the last underlying failure; provider name and URL are kept for
    diagnosis.
    """

    def __init__(
        self,
        message: str,
        provider_name: str = "",
        url: str = "",
        cause: Optional[BaseException] = None,
    ):
        self.provider_name = provider_name
        self.url = url
        self.cause = cause
        super().__init__(message)


class ProviderTimeoutError(ProviderTransportError):
    """The last attempt against the backend timed out."""
    pass


class AllProvidersFailedError(ProviderError):
    """Every selected provider failed for a URL, so no verdict exists."""

    def __init__(self, url: str, errors: Dict[str, str]):
        self.url = url
        self.errors = dict(errors)
        failed = ", ".join(f"{name}: {msg}" for name, msg in self.errors.items())
        super().__init__(f"All providers failed for {url} ({failed})")


# ============================================================================
# Cache Exceptions
# ============================================================================

class CacheError(LinkGuardError):
    """Cache backend read or write failed."""
    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================

class ConfigurationError(LinkGuardError):
    """Application configuration error."""
    pass


class MissingAPIKeyError(ConfigurationError):
    """Required API key is not configured."""
    pass
