"""
LinkGuard Aggregation Tests

Tests for concurrent fan-out, caching and consensus in the aggregation engine.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from conftest import FailingProvider, HangingProvider, SlowWriteCache, StaticProvider
from linkguard.config import CheckerConfig
from linkguard.models.results import AggregateResult, CheckResult, ConsensusPolicy
from linkguard.services.aggregation import AggregationEngine
from linkguard.services.cache import CacheAdapter
from linkguard.services.providers import GoogleSafeBrowsingProvider
from linkguard.services.providers.base import Provider
from linkguard.utils.exceptions import AllProvidersFailedError, CacheError
from linkguard.utils.helpers import generate_cache_key


class ConcurrencyProbe(Provider):
    """Provider that records how many checks overlap."""

    def __init__(self, name: str, tracker: dict):
        self.name = name
        self.tracker = tracker

    async def check(self, url: str) -> CheckResult:
        self.tracker["active"] += 1
        self.tracker["peak"] = max(self.tracker["peak"], self.tracker["active"])
        await asyncio.sleep(0.01)
        self.tracker["active"] -= 1
        return CheckResult(url=url)


def create_failing_cache(get_error=None, set_error=None):
    """Create a cache adapter whose reads and/or writes raise the given errors."""
    cache = MagicMock(spec=CacheAdapter)
    cache.get = AsyncMock(return_value=None, side_effect=get_error)
    cache.set = AsyncMock(return_value=True, side_effect=set_error)
    return cache


class TestConsensus:
    """Tests for the consensus decision across providers."""

    def test_any_and_all(self, config):
        engine = AggregationEngine(config)
        providers = [StaticProvider("p1"), StaticProvider("p2"), StaticProvider("p3", unsafe=True)]

        any_result = asyncio.run(engine.run("example.com", providers, ConsensusPolicy.ANY))
        all_result = asyncio.run(engine.run("example.com", providers, ConsensusPolicy.ALL))

        assert any_result.is_safe is False
        assert all_result.is_safe is True

    def test_majority_tie_is_safe(self, config):
        engine = AggregationEngine(config)
        providers = [
            StaticProvider("p1", unsafe=True),
            StaticProvider("p2", unsafe=True),
            StaticProvider("p3"),
            StaticProvider("p4"),
        ]

        result = asyncio.run(engine.run("example.com", providers, "majority"))

        assert result.is_safe is True

    def test_no_providers_is_safe(self, config):
        result = asyncio.run(AggregationEngine(config).run(" example.com ", []))

        assert result.is_safe is True
        assert result.url == "http://example.com"
        assert result.provider_results == {}

    def test_results_follow_provider_order(self, config):
        providers = [StaticProvider("slow", delay=0.02), StaticProvider("fast")]

        result = asyncio.run(AggregationEngine(config).run("example.com", providers))

        assert list(result.provider_results) == ["slow", "fast"]

    def test_providers_receive_normalized_url(self, config):
        provider = StaticProvider("p1")

        asyncio.run(AggregationEngine(config).run("  example.com  ", [provider]))

        assert provider.calls == ["http://example.com"]


class TestProviderFailures:
    """Tests for failed provider checks."""

    def test_failure_is_recorded_and_excluded(self, config):
        """Test a failing provider is reported in errors, not counted as a vote."""
        providers = [StaticProvider("p1"), FailingProvider("p2")]

        result = asyncio.run(AggregationEngine(config).run("example.com", providers, ConsensusPolicy.ALL))

        assert list(result.provider_results) == ["p1"]
        assert "p2" in result.errors
        assert "backend exploded" in result.errors["p2"]
        assert result.is_safe is True

    def test_all_providers_failed(self, config):
        providers = [FailingProvider("p1"), StaticProvider("p2", fail_urls={"http://example.com"})]

        with pytest.raises(AllProvidersFailedError) as exc_info:
            asyncio.run(AggregationEngine(config).run("example.com", providers))

        assert exc_info.value.url == "http://example.com"
        assert set(exc_info.value.errors) == {"p1", "p2"}

    def test_batch_isolation(self, config):
        """Test a URL that fails does not affect the others in the batch."""
        provider = StaticProvider("p1", unsafe=True, fail_urls={"http://a.com"})

        results = asyncio.run(AggregationEngine(config).run_batch(["a.com", "b.com"], [provider]))

        assert list(results) == ["a.com", "b.com"]
        assert isinstance(results["a.com"], AllProvidersFailedError)
        assert isinstance(results["b.com"], AggregateResult)
        assert results["b.com"].is_safe is False


class TestCaching:
    """Tests for cache use in the engine."""

    def test_second_check_is_served_from_cache(self, cached_config, memory_cache):
        provider = StaticProvider("p1", unsafe=True)
        engine = AggregationEngine(cached_config)

        async def run():
            first = await engine.run("example.com", [provider])
            second = await engine.run("example.com", [provider])
            return first, second

        first, second = asyncio.run(run())

        assert len(provider.calls) == 1
        assert second.provider_results["p1"] == first.provider_results["p1"]
        assert second.is_safe is False
        assert asyncio.run(memory_cache.has(generate_cache_key("p1", "example.com")))

    def test_equivalent_urls_share_cache_entry(self, cached_config):
        provider = StaticProvider("p1")
        engine = AggregationEngine(cached_config)

        async def run():
            await engine.run("example.com", [provider])
            await engine.run("  http://example.com  ", [provider])

        asyncio.run(run())

        assert provider.calls == ["http://example.com"]

    def test_cache_ttl_is_applied(self, memory_cache, clock):
        config = CheckerConfig().set_cache_adapter(memory_cache).set_cache_ttl(60)
        provider = StaticProvider("p1")
        engine = AggregationEngine(config)

        asyncio.run(engine.run("example.com", [provider]))
        clock.advance(61)
        asyncio.run(engine.run("example.com", [provider]))

        assert len(provider.calls) == 2

    def test_disabled_cache_is_bypassed(self, cached_config):
        cached_config.enable_cache(False)
        provider = StaticProvider("p1")
        engine = AggregationEngine(cached_config)

        asyncio.run(engine.run("example.com", [provider]))
        asyncio.run(engine.run("example.com", [provider]))

        assert len(provider.calls) == 2

    def test_failures_are_not_cached(self, cached_config, memory_cache):
        provider = StaticProvider("p1", fail_urls={"http://example.com"})

        with pytest.raises(AllProvidersFailedError):
            asyncio.run(AggregationEngine(cached_config).run("example.com", [provider]))

        assert len(memory_cache) == 0

    @pytest.mark.parametrize("error", [CacheError("redis down"), ConnectionError("reset by peer")])
    def test_read_error_counts_as_miss(self, error):
        cache = create_failing_cache(get_error=error)
        provider = StaticProvider("p1")

        result = asyncio.run(
            AggregationEngine(CheckerConfig().set_cache_adapter(cache)).run("example.com", [provider])
        )

        assert len(provider.calls) == 1
        assert "p1" in result.provider_results

    @pytest.mark.parametrize("error", [CacheError("redis down"), RuntimeError("serializer bug")])
    def test_write_error_is_not_fatal(self, error):
        cache = create_failing_cache(set_error=error)
        provider = StaticProvider("p1", unsafe=True)

        result = asyncio.run(
            AggregationEngine(CheckerConfig().set_cache_adapter(cache)).run("example.com", [provider])
        )

        assert result.is_safe is False
        cache.set.assert_awaited_once()

    def test_undecodable_entry_counts_as_miss(self, cached_config, memory_cache):
        key = generate_cache_key("p1", "example.com")
        provider = StaticProvider("p1")

        async def run():
            await memory_cache.set(key, {"unexpected": "payload"})
            return await AggregationEngine(cached_config).run("example.com", [provider])

        result = asyncio.run(run())

        assert len(provider.calls) == 1
        assert result.provider_results["p1"].url == "http://example.com"


class TestConcurrency:
    """Tests for concurrent provider calls."""

    def test_live_calls_are_bounded(self):
        tracker = {"active": 0, "peak": 0}
        providers = [ConcurrencyProbe(f"p{i}", tracker) for i in range(6)]
        engine = AggregationEngine(CheckerConfig().set_max_concurrency(2))

        asyncio.run(engine.run_batch(["a.com", "b.com"], providers))

        assert tracker["peak"] == 2

    def test_providers_run_concurrently(self, config):
        tracker = {"active": 0, "peak": 0}
        providers = [ConcurrencyProbe(f"p{i}", tracker) for i in range(3)]

        asyncio.run(AggregationEngine(config).run("example.com", providers))

        assert tracker["peak"] == 3


class TestProviderCallPolicy:
    """Tests for the configured retries and timeout on live provider calls."""

    def test_configured_retries_are_applied(self):
        provider = FailingProvider("p1")
        engine = AggregationEngine(CheckerConfig().set_retries(2))

        with patch("linkguard.services.providers.base.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(AllProvidersFailedError):
                asyncio.run(engine.run("example.com", [provider]))

        assert len(provider.calls) == 3

    def test_recovers_on_retry(self):
        provider = StaticProvider("p1")
        provider.check = AsyncMock(side_effect=[RuntimeError("flaky"), CheckResult(url="http://example.com")])
        engine = AggregationEngine(CheckerConfig().set_retries(1))

        with patch("linkguard.services.providers.base.asyncio.sleep", new_callable=AsyncMock):
            result = asyncio.run(engine.run("example.com", [provider]))

        assert provider.check.await_count == 2
        assert result.errors == {}
        assert "p1" in result.provider_results

    def test_hanging_provider_times_out(self):
        provider = HangingProvider("hang")
        engine = AggregationEngine(CheckerConfig().set_timeout(0.05).set_retries(0))

        with pytest.raises(AllProvidersFailedError) as exc_info:
            asyncio.run(asyncio.wait_for(engine.run("example.com", [provider]), 1.0))

        assert provider.calls == ["http://example.com"]
        assert "timed out" in exc_info.value.errors["hang"]

    def test_timeout_applies_per_attempt(self):
        provider = HangingProvider("hang")
        engine = AggregationEngine(CheckerConfig().set_timeout(0.02).set_retries(1))

        with patch("linkguard.services.providers.base.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(AllProvidersFailedError):
                asyncio.run(asyncio.wait_for(engine.run("example.com", [provider]), 1.0))

        assert len(provider.calls) == 2

    def test_http_provider_keeps_its_own_retries(self):
        """Test a provider with its own retry policy is not retried again."""
        provider = GoogleSafeBrowsingProvider(api_key="key", retries=0)
        mock_request = AsyncMock(side_effect=aiohttp.ClientConnectionError("refused"))
        engine = AggregationEngine(CheckerConfig().set_retries(2))

        with patch.object(provider, "_request", mock_request), \
                patch("linkguard.services.providers.base.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(AllProvidersFailedError):
                asyncio.run(engine.run("example.com", [provider]))

        assert mock_request.await_count == 1


class TestCancellation:
    """Tests for cache writes when the calling task is cancelled."""

    def test_cancelled_check_keeps_cache_writes(self):
        provider = StaticProvider("p1")

        async def run():
            cache = SlowWriteCache(delay=0.05)
            engine = AggregationEngine(CheckerConfig().set_cache_adapter(cache))

            await engine.run("a.com", [provider])
            cache.write_started.clear()

            task = asyncio.ensure_future(engine.run("b.com", [provider]))
            await cache.write_started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

            await asyncio.sleep(0.1)
            return (
                await cache.has(generate_cache_key("p1", "a.com")),
                await cache.has(generate_cache_key("p1", "b.com")),
            )

        assert asyncio.run(run()) == (True, True)
