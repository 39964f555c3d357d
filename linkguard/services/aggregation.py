"""
LinkGuard Aggregation Engine

Fans a URL out to providers concurrently, serving verdicts from the cache
when possible, and reduces the provider verdicts to one decision.
"""

import asyncio
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Sequence, Union

from pydantic import ValidationError

from linkguard.models.results import (
    AggregateResult,
    CheckResult,
    ConsensusPolicy,
    determine_overall_safety,
)
from linkguard.services.providers.base import Provider, as_provider_error, execute_with_retry
from linkguard.utils.exceptions import AllProvidersFailedError
from linkguard.utils.helpers import generate_cache_key, normalize_url

if TYPE_CHECKING:
    from linkguard.config import CheckerConfig


class AggregationEngine:
    """
    Runs provider checks for one or many URLs.

    Each provider goes through the cache first and is only called live on a
    miss. Live calls across a ``run`` or ``run_batch`` share one semaphore,
    sized by ``config.max_concurrency``.
    """

    def __init__(self, config: "CheckerConfig"):
        self.config = config

    @property
    def logger(self):
        return self.config.logger

    def create_semaphore(self) -> asyncio.Semaphore:
        return asyncio.Semaphore(self.config.max_concurrency)

    # =========================================================================
    # Single URL
    # =========================================================================

    async def run(
        self,
        url: str,
        providers: Sequence[Provider],
        policy: Union[ConsensusPolicy, str] = ConsensusPolicy.ANY,
        semaphore: Optional[asyncio.Semaphore] = None,
    ) -> AggregateResult:
        """
        Check a URL against every provider and apply the consensus policy.

        Args:
            url: URL to check (normalized here)
            providers: Providers to query, in result order
            policy: Consensus policy for the final decision
            semaphore: Shared bound on live provider calls

        Returns:
            AggregateResult with per-provider verdicts and failures

        Raises:
            AllProvidersFailedError: If providers were given and all of them failed
        """
        normalized_url = normalize_url(url)
        if semaphore is None:
            semaphore = self.create_semaphore()
        result = AggregateResult(url=normalized_url)

        self.logger.info(f"Checking {normalized_url} with {len(providers)} provider(s)")

        outcomes = await asyncio.gather(
            *(self._check_with_provider(provider, normalized_url, semaphore) for provider in providers),
            return_exceptions=True,
        )

        for provider, outcome in zip(providers, outcomes):
            name = provider.get_name()
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                error = as_provider_error(name, normalized_url, outcome)
                self.logger.warning(f"Provider {name} failed for {normalized_url}: {error.message}")
                result.add_error(name, error.message)
                continue
            result.add_provider_result(name, outcome)

        if providers and not result.provider_results:
            raise AllProvidersFailedError(normalized_url, result.errors)

        result.determine_overall_safety(policy)
        self.logger.info(
            f"{normalized_url}: {'safe' if result.is_safe else 'unsafe'} "
            f"({len(result.provider_results)} verdict(s), {len(result.errors)} failure(s))"
        )
        return result

    # =========================================================================
    # Batch
    # =========================================================================

    async def run_batch(
        self,
        urls: Iterable[str],
        providers: Sequence[Provider],
        policy: Union[ConsensusPolicy, str] = ConsensusPolicy.ANY,
    ) -> Dict[str, Union[AggregateResult, Exception]]:
        """
        Check several URLs concurrently.

        Results are keyed by the URLs as given, in the given order. A URL whose
        check raised maps to the exception instead of a result; the other URLs
        are unaffected.
        """
        urls = list(dict.fromkeys(urls))
        semaphore = self.create_semaphore()

        outcomes = await asyncio.gather(
            *(self.run(url, providers, policy, semaphore) for url in urls),
            return_exceptions=True,
        )

        results: Dict[str, Union[AggregateResult, Exception]] = {}
        for url, outcome in zip(urls, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, Exception):
                self.logger.warning(f"Batch check failed for {url}: {outcome}")
            results[url] = outcome
        return results

    # =========================================================================
    # Per-provider flow
    # =========================================================================

    async def _check_with_provider(
        self,
        provider: Provider,
        url: str,
        semaphore: asyncio.Semaphore,
    ) -> CheckResult:
        cache_key = generate_cache_key(provider.get_name(), url)
        use_cache = self.config.is_cache_enabled

        if use_cache:
            cached = await self._read_cache(cache_key)
            if cached is not None:
                self.logger.debug(f"Cache hit: {provider.get_name()} {url}")
                return cached

        result = await self._call_provider(provider, url, semaphore)

        if use_cache:
            # finish the write even if the caller is cancelled meanwhile
            await asyncio.shield(self._write_cache(cache_key, result))

        return result

    async def _call_provider(
        self,
        provider: Provider,
        url: str,
        semaphore: asyncio.Semaphore,
    ) -> CheckResult:
        """
        Run one live provider check.

        Providers without their own retry policy get the configured retries,
        and each attempt is bounded by the configured timeout. The semaphore
        is held per attempt, never across a backoff sleep.
        """
        if provider.handles_retries:
            async with semaphore:
                return await provider.check(url)

        async def attempt() -> CheckResult:
            async with semaphore:
                return await asyncio.wait_for(provider.check(url), self.config.timeout)

        return await execute_with_retry(attempt, self.config.retries, label=provider.get_name())

    async def _read_cache(self, cache_key: str) -> Optional[CheckResult]:
        try:
            payload = await self.config.cache_adapter.get(cache_key)
        except Exception as e:
            self.logger.warning(f"Cache read failed for {cache_key}: {e}")
            return None

        if payload is None:
            return None

        try:
            return CheckResult.model_validate(payload)
        except ValidationError as e:
            self.logger.warning(f"Discarding undecodable cache entry {cache_key}: {e}")
            return None

    async def _write_cache(self, cache_key: str, result: CheckResult) -> None:
        try:
            await self.config.cache_adapter.set(
                cache_key, result.model_dump(mode="json"), self.config.cache_ttl
            )
        except Exception as e:
            self.logger.warning(f"Cache write failed for {cache_key}: {e}")


__all__ = [
    'AggregationEngine',
    'determine_overall_safety',
    'generate_cache_key',
]
