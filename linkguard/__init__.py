"""
LinkGuard - Multi-provider URL reputation checker

Checks URLs against several threat-intelligence services concurrently,
caches provider verdicts and combines them with a consensus policy.
"""

import logging

from linkguard.config import CheckerConfig, Settings, get_settings, setup_logging
from linkguard.models.results import (
    AggregateResult,
    CheckResult,
    ConsensusPolicy,
    Threat,
    determine_overall_safety,
)
from linkguard.services.aggregation import AggregationEngine
from linkguard.services.cache import (
    CacheAdapter,
    MemoryCacheAdapter,
    NullCacheAdapter,
    RedisCacheAdapter,
)
from linkguard.services.checker import LinkChecker, configure_link_checker, get_link_checker
from linkguard.services.providers import (
    HttpProvider,
    Provider,
    ProviderFactory,
    execute_with_retry,
)
from linkguard.utils.constants import APP_VERSION
from linkguard.utils.exceptions import (
    AllProvidersFailedError,
    CacheError,
    ConfigurationError,
    InvalidArgumentError,
    LinkGuardError,
    MissingAPIKeyError,
    ProviderError,
    ProviderNotFoundError,
    ProviderResponseError,
    ProviderTimeoutError,
    ProviderTransportError,
)
from linkguard.utils.helpers import generate_cache_key, normalize_url

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = APP_VERSION

__all__ = [
    # Facade
    'LinkChecker',
    'get_link_checker',
    'configure_link_checker',
    'AggregationEngine',

    # Configuration
    'CheckerConfig',
    'Settings',
    'get_settings',
    'setup_logging',

    # Models
    'Threat',
    'CheckResult',
    'AggregateResult',
    'ConsensusPolicy',
    'determine_overall_safety',

    # Providers
    'Provider',
    'HttpProvider',
    'ProviderFactory',
    'execute_with_retry',
    'normalize_url',
    'generate_cache_key',

    # Cache
    'CacheAdapter',
    'NullCacheAdapter',
    'MemoryCacheAdapter',
    'RedisCacheAdapter',

    # Exceptions
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
]
