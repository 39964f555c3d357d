"""
LinkGuard Utilities Package

Shared constants, exceptions and helper functions.
"""

from .exceptions import (
    LinkGuardError,
    InvalidArgumentError,
    ProviderNotFoundError,
    ProviderError,
    ProviderResponseError,
    ProviderTransportError,
    ProviderTimeoutError,
    AllProvidersFailedError,
    CacheError,
    ConfigurationError,
    MissingAPIKeyError,
)
from .helpers import normalize_url, generate_cache_key, hash_url

__all__ = [
    'LinkGuardError',
    'InvalidArgumentError',
    'ProviderNotFoundError',
    'ProviderError',
    'ProviderResponseError',
    'ProviderTransportError',
    'ProviderTimeoutError',
    'AllProvidersFailedError',
    'CacheError',
    'ConfigurationError',
    'MissingAPIKeyError',
    'normalize_url',
    'generate_cache_key',
    'hash_url',
]
