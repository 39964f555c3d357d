"""
LinkGuard Provider Factory

Builds vendor adapters by name.
"""

import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Type

import aiohttp

from linkguard.utils.constants import DEFAULT_RETRIES, DEFAULT_TIMEOUT
from linkguard.utils.exceptions import InvalidArgumentError, MissingAPIKeyError

from .base import HttpProvider
from .cisco_talos import CiscoTalosProvider
from .facebook import FacebookProvider
from .google_safebrowsing import GoogleSafeBrowsingProvider
from .ipqualityscore import IPQualityScoreProvider
from .opswat import OPSWATProvider
from .phishtank import PhishTankProvider
from .virustotal import VirusTotalProvider
from .yandex_safebrowsing import YandexSafeBrowsingProvider

if TYPE_CHECKING:
    from linkguard.config import Settings

logger = logging.getLogger(__name__)


PROVIDER_CLASSES: Dict[str, Type[HttpProvider]] = {
    cls.name: cls
    for cls in (
        GoogleSafeBrowsingProvider,
        YandexSafeBrowsingProvider,
        VirusTotalProvider,
        PhishTankProvider,
        IPQualityScoreProvider,
        FacebookProvider,
        OPSWATProvider,
        CiscoTalosProvider,
    )
}


class ProviderFactory:
    """Creates bundled providers from their registry name."""

    @staticmethod
    def create_provider(
        name: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> HttpProvider:
        """
        Create a provider by name.

        Raises:
            InvalidArgumentError: If no provider has that name
            MissingAPIKeyError: If the API key is empty
        """
        provider_cls = PROVIDER_CLASSES.get(name)
        if provider_cls is None:
            raise InvalidArgumentError(f'Unknown provider "{name}"')
        if not api_key:
            raise MissingAPIKeyError(f'No API key given for provider "{name}"')

        return provider_cls(api_key, timeout=timeout, retries=retries, session=session)

    @staticmethod
    def available_providers() -> List[str]:
        return list(PROVIDER_CLASSES)

    @classmethod
    def providers_from_settings(cls, settings: "Settings") -> List[HttpProvider]:
        """Create every provider whose API key is configured."""
        providers = []
        for name, api_key in settings.provider_api_keys().items():
            if not api_key:
                continue
            providers.append(cls.create_provider(
                name, api_key, timeout=settings.timeout, retries=settings.retries
            ))

        logger.info(f"Configured providers: {', '.join(p.name for p in providers) or 'none'}")
        return providers
