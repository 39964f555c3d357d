"""
LinkGuard Test Configuration

Pytest fixtures and fake providers shared by the test modules.
"""

import asyncio
from typing import Iterable, List, Optional

import pytest

from linkguard.config import CheckerConfig
from linkguard.models.results import CheckResult, Threat
from linkguard.services.cache import MemoryCacheAdapter
from linkguard.services.providers.base import Provider
from linkguard.utils.exceptions import ProviderTransportError


class StaticProvider(Provider):
    """Provider with a fixed verdict that records every URL it is asked about."""

    def __init__(
        self,
        name: str,
        unsafe: bool = False,
        threat_type: str = "MALWARE",
        fail_urls: Iterable[str] = (),
        delay: float = 0,
    ):
        self.name = name
        self.unsafe = unsafe
        self.threat_type = threat_type
        self.fail_urls = set(fail_urls)
        self.delay = delay
        self.calls: List[str] = []

    async def check(self, url: str) -> CheckResult:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if url in self.fail_urls:
            raise ProviderTransportError(f"{self.name} unavailable", self.name, url)

        result = CheckResult(url=url)
        if self.unsafe:
            result.add_threat(self.name, Threat(type=self.threat_type, url=url))
        return result


class FailingProvider(Provider):
    """Provider whose every check raises ``error``."""

    def __init__(self, name: str, error: Optional[Exception] = None):
        self.name = name
        self.error = error or RuntimeError("backend exploded")
        self.calls: List[str] = []

    async def check(self, url: str) -> CheckResult:
        self.calls.append(url)
        raise self.error


class HangingProvider(Provider):
    """Provider whose checks never complete."""

    def __init__(self, name: str):
        self.name = name
        self.calls: List[str] = []

    async def check(self, url: str) -> CheckResult:
        self.calls.append(url)
        await asyncio.Event().wait()


class SlowWriteCache(MemoryCacheAdapter):
    """Memory cache whose writes take ``delay`` seconds to land."""

    def __init__(self, delay: float = 0.05):
        super().__init__()
        self.delay = delay
        self.write_started = asyncio.Event()

    async def set(self, key, value, ttl=None):
        self.write_started.set()
        await asyncio.sleep(self.delay)
        return await super().set(key, value, ttl)


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_cache(clock):
    return MemoryCacheAdapter(clock=clock)


@pytest.fixture
def config():
    return CheckerConfig()


@pytest.fixture
def cached_config(memory_cache):
    return CheckerConfig().set_cache_adapter(memory_cache)
