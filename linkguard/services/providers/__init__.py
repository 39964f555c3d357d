"""
LinkGuard Reputation Providers

Provider contract, retry helper and the bundled vendor adapters.
"""

from .base import (
    Provider,
    HttpProvider,
    execute_with_retry,
    as_provider_error,
)
from linkguard.utils.helpers import normalize_url

from .google_safebrowsing import GoogleSafeBrowsingProvider
from .yandex_safebrowsing import YandexSafeBrowsingProvider
from .virustotal import VirusTotalProvider
from .phishtank import PhishTankProvider
from .ipqualityscore import IPQualityScoreProvider
from .facebook import FacebookProvider
from .opswat import OPSWATProvider
from .cisco_talos import CiscoTalosProvider

from .factory import ProviderFactory, PROVIDER_CLASSES

__all__ = [
    # Contract
    'Provider',
    'HttpProvider',
    'execute_with_retry',
    'as_provider_error',
    'normalize_url',

    # Vendors
    'GoogleSafeBrowsingProvider',
    'YandexSafeBrowsingProvider',
    'VirusTotalProvider',
    'PhishTankProvider',
    'IPQualityScoreProvider',
    'FacebookProvider',
    'OPSWATProvider',
    'CiscoTalosProvider',

    # Factory
    'ProviderFactory',
    'PROVIDER_CLASSES',
]
