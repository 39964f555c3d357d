"""
LinkGuard Link Checker

Facade that owns the provider registry and configuration, validates check
requests and hands them to the aggregation engine.
"""

import asyncio
import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple, Union

from linkguard.config import CheckerConfig, Settings, get_settings
from linkguard.models.results import AggregateResult, ConsensusPolicy
from linkguard.services.aggregation import AggregationEngine
from linkguard.services.providers.base import Provider
from linkguard.services.providers.factory import ProviderFactory
from linkguard.utils.exceptions import InvalidArgumentError, ProviderNotFoundError

logger = logging.getLogger(__name__)

PolicyLike = Union[ConsensusPolicy, str]


class LinkChecker:
    """
    Check URLs against several reputation providers at once.

    Usage:
        checker = LinkChecker()
        checker.add_provider(GoogleSafeBrowsingProvider(api_key))
        result = await checker.check("example.com", consensus="majority")

    The registry may be modified from several threads; every check works on
    a snapshot taken when it starts.
    """

    def __init__(
        self,
        config: Optional[CheckerConfig] = None,
        providers: Optional[Iterable[Provider]] = None,
    ):
        self.config = config or CheckerConfig()
        self.engine = AggregationEngine(self.config)
        self._providers: Dict[str, Provider] = {}
        self._lock = threading.RLock()

        for provider in providers or []:
            self.add_provider(provider)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "LinkChecker":
        """Build a checker with cache and providers taken from settings."""
        settings = settings or get_settings()
        return cls(
            config=CheckerConfig.from_settings(settings),
            providers=ProviderFactory.providers_from_settings(settings),
        )

    def get_config(self) -> CheckerConfig:
        return self.config

    # =========================================================================
    # Provider registry
    # =========================================================================

    def add_provider(self, provider: Provider) -> "LinkChecker":
        """Register a provider, replacing any provider with the same name."""
        name = provider.get_name()
        with self._lock:
            if name in self._providers:
                self.config.logger.info(f"Replacing provider {name}")
            self._providers[name] = provider
        return self

    def remove_provider(self, name: str) -> "LinkChecker":
        """Unregister a provider; unknown names are ignored."""
        with self._lock:
            self._providers.pop(name, None)
        return self

    def get_providers(self) -> Dict[str, Provider]:
        with self._lock:
            return dict(self._providers)

    def get_provider(self, name: str) -> Provider:
        with self._lock:
            provider = self._providers.get(name)
        if provider is None:
            raise ProviderNotFoundError(name)
        return provider

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate(
        self,
        provider_names: Optional[Iterable[str]],
        consensus: PolicyLike,
    ) -> Tuple[List[Provider], ConsensusPolicy]:
        """
        Validate a request and snapshot the providers it will use.

        Returns:
            (providers, consensus policy)

        Raises:
            InvalidArgumentError: No providers registered, or unknown consensus
            ProviderNotFoundError: A requested provider is not registered
        """
        registry = self.get_providers()
        if not registry:
            raise InvalidArgumentError("No providers registered")

        policy = self._validate_consensus(consensus)
        return self._resolve(registry, provider_names), policy

    @staticmethod
    def _validate_consensus(consensus: PolicyLike) -> ConsensusPolicy:
        if isinstance(consensus, ConsensusPolicy):
            return consensus
        if isinstance(consensus, str):
            try:
                return ConsensusPolicy(consensus)
            except ValueError:
                pass
        allowed = ", ".join(policy.value for policy in ConsensusPolicy)
        raise InvalidArgumentError(f"Invalid consensus {consensus!r}, expected one of: {allowed}")

    @staticmethod
    def _resolve(
        registry: Dict[str, Provider],
        provider_names: Optional[Iterable[str]],
    ) -> List[Provider]:
        names = list(dict.fromkeys(provider_names or []))
        if not names:
            return list(registry.values())

        providers = []
        for name in names:
            if name not in registry:
                raise ProviderNotFoundError(name)
            providers.append(registry[name])
        return providers

    # =========================================================================
    # Checks
    # =========================================================================

    async def check(
        self,
        url: str,
        provider_names: Optional[Iterable[str]] = None,
        consensus: PolicyLike = ConsensusPolicy.ANY,
    ) -> AggregateResult:
        """
        Check one URL.

        Args:
            url: URL to check
            provider_names: Providers to use; empty or None means all
            consensus: "any", "all" or "majority"

        Returns:
            AggregateResult with the consensus decision

        Raises:
            InvalidArgumentError: No providers registered, or unknown consensus
            ProviderNotFoundError: A requested provider is not registered
            AllProvidersFailedError: Every selected provider failed
        """
        providers, policy = self._validate(provider_names, consensus)
        return await self.engine.run(url, providers, policy)

    async def check_batch(
        self,
        urls: Iterable[str],
        provider_names: Optional[Iterable[str]] = None,
        consensus: PolicyLike = ConsensusPolicy.ANY,
    ) -> Dict[str, Union[AggregateResult, Exception]]:
        """
        Check several URLs concurrently.

        The request is validated once. A URL whose check fails maps to its
        exception; other URLs are still checked.
        """
        providers, policy = self._validate(provider_names, consensus)
        return await self.engine.run_batch(urls, providers, policy)

    def submit(
        self,
        url: str,
        provider_names: Optional[Iterable[str]] = None,
        consensus: PolicyLike = ConsensusPolicy.ANY,
    ) -> "asyncio.Task[AggregateResult]":
        """
        Schedule a check on the running event loop and return its task.

        Validation errors are raised immediately rather than through the task.
        """
        providers, policy = self._validate(provider_names, consensus)
        return asyncio.get_running_loop().create_task(self.engine.run(url, providers, policy))

    def submit_batch(
        self,
        urls: Iterable[str],
        provider_names: Optional[Iterable[str]] = None,
        consensus: PolicyLike = ConsensusPolicy.ANY,
    ) -> "Dict[str, asyncio.Task[AggregateResult]]":
        """Schedule one task per URL; the tasks share a concurrency bound."""
        providers, policy = self._validate(provider_names, consensus)
        loop = asyncio.get_running_loop()
        semaphore = self.engine.create_semaphore()

        return {
            url: loop.create_task(self.engine.run(url, providers, policy, semaphore))
            for url in dict.fromkeys(urls)
        }

    def check_sync(
        self,
        url: str,
        provider_names: Optional[Iterable[str]] = None,
        consensus: PolicyLike = ConsensusPolicy.ANY,
    ) -> AggregateResult:
        """Blocking variant of ``check`` for code without an event loop."""
        return asyncio.run(self.check(url, provider_names, consensus))

    def check_batch_sync(
        self,
        urls: Iterable[str],
        provider_names: Optional[Iterable[str]] = None,
        consensus: PolicyLike = ConsensusPolicy.ANY,
    ) -> Dict[str, Union[AggregateResult, Exception]]:
        """Blocking variant of ``check_batch``."""
        return asyncio.run(self.check_batch(urls, provider_names, consensus))

    async def close(self) -> None:
        await self.config.cache_adapter.close()


# Singleton instance
_checker: Optional[LinkChecker] = None


def get_link_checker() -> LinkChecker:
    """Get the link checker singleton, built from settings on first use."""
    global _checker
    if _checker is None:
        _checker = LinkChecker.from_settings(get_settings())
        logger.info(f"Link checker initialized with {len(_checker.get_providers())} provider(s)")
    return _checker


def configure_link_checker(
    config: Optional[CheckerConfig] = None,
    providers: Optional[Iterable[Provider]] = None,
) -> LinkChecker:
    """Configure and get the link checker singleton."""
    global _checker
    _checker = LinkChecker(config=config, providers=providers)
    return _checker
