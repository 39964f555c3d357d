"""
LinkGuard Base Provider

Provider contract for URL reputation backends, plus the retry helper and the
aiohttp plumbing shared by the bundled vendor adapters.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple, Type, TypeVar, Union

import aiohttp

from linkguard.models.results import CheckResult
from linkguard.utils.constants import (
    DEFAULT_RETRIES,
    DEFAULT_TIMEOUT,
    RETRY_BACKOFF_STEP,
    USER_AGENT,
)
from linkguard.utils.exceptions import (
    ProviderError,
    ProviderResponseError,
    ProviderTimeoutError,
    ProviderTransportError,
)
from linkguard.utils.helpers import normalize_url

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    retries: int = DEFAULT_RETRIES,
    *,
    timeout: Optional[float] = None,
    backoff: float = RETRY_BACKOFF_STEP,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    label: str = "operation",
) -> T:
    """
    Run an async operation, retrying on failure with linear backoff.

    The operation runs once, then up to ``retries`` more times. Retry ``n``
    (1-indexed) waits ``n * backoff`` seconds first: 100ms, 200ms, ...
    If every attempt fails, the last exception is re-raised unmodified.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per call
        retries: Additional attempts after the first one
        timeout: Per-attempt timeout in seconds; a timeout counts as a failure
        backoff: Base delay in seconds
        retry_on: Exception types that trigger a retry; others propagate at once
        label: Name used in log messages

    Returns:
        The operation's result
    """
    retries = max(retries, 0)
    last_error: Optional[BaseException] = None

    for attempt in range(1, retries + 2):
        try:
            if timeout is not None:
                return await asyncio.wait_for(operation(), timeout)
            return await operation()
        except retry_on as e:
            last_error = e
            if attempt <= retries:
                delay = attempt * backoff
                logger.warning(
                    f"{label}: attempt {attempt}/{retries + 1} failed ({e!r}), "
                    f"retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)

    logger.error(f"{label}: failed after {retries + 1} attempts ({last_error!r})")
    raise last_error


def as_provider_error(provider_name: str, url: str, error: BaseException) -> ProviderError:
    """Wrap an arbitrary provider failure, keeping provider errors as they are."""
    if isinstance(error, ProviderError):
        return error
    if isinstance(error, asyncio.TimeoutError):
        return ProviderTimeoutError(
            f"{provider_name} timed out checking {url}", provider_name, url, error
        )
    return ProviderTransportError(
        f"{provider_name} failed checking {url}: {error}", provider_name, url, error
    )


class Provider(ABC):
    """
    Capability every URL reputation backend implements.

    ``check`` must be idempotent and free of side effects on the provider's
    own state, so it is always safe to retry.
    """

    name: str = "base"

    # True when check() already applies its own retries and timeout
    handles_retries: bool = False

    def get_name(self) -> str:
        return self.name

    @abstractmethod
    async def check(self, url: str) -> CheckResult:
        """Check a single URL."""
        pass

    async def check_batch(self, urls: Iterable[str]) -> Dict[str, Union[CheckResult, ProviderError]]:
        """
        Check several URLs one after another, in the given order.

        A failing URL does not stop the batch; its entry holds the
        ``ProviderError`` instead of a result.
        """
        results: Dict[str, Union[CheckResult, ProviderError]] = {}
        for url in urls:
            try:
                results[url] = await self.check(url)
            except Exception as e:
                logger.warning(f"{self.get_name()}: batch check failed for {url}: {e}")
                results[url] = as_provider_error(self.get_name(), url, e)
        return results

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.get_name()!r}>"


class HttpProvider(Provider):
    """
    Base for the bundled HTTP reputation adapters.

    Subclasses implement ``_check_normalized``; ``check`` normalizes the URL,
    runs it through ``execute_with_retry`` with the configured timeout and
    wraps the final transport failure in ``ProviderTransportError``.
    """

    display_name: str = "base"
    handles_retries = True

    # Failures worth retrying: network errors, timeouts, bad payloads
    TRANSPORT_ERRORS: Tuple[Type[BaseException], ...] = (
        aiohttp.ClientError,
        asyncio.TimeoutError,
        ProviderResponseError,
        ValueError,
    )

    def __init__(
        self,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize provider.

        Args:
            api_key: API key or access token for the service
            timeout: Per-request timeout in seconds
            retries: Retries after the first failed attempt
            session: Optional shared aiohttp session (not closed by the provider)
        """
        self.api_key = api_key
        self.timeout = timeout
        self.retries = retries
        self.session = session

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def check(self, url: str) -> CheckResult:
        normalized_url = normalize_url(url)

        try:
            return await execute_with_retry(
                lambda: self._check_normalized(normalized_url),
                self.retries,
                timeout=self.timeout,
                retry_on=self.TRANSPORT_ERRORS,
                label=self.name,
            )
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(
                f"{self.display_name} timed out checking {normalized_url}",
                self.name, normalized_url, e,
            ) from e
        except self.TRANSPORT_ERRORS as e:
            raise ProviderTransportError(
                f"Error checking URL with {self.display_name}: {e}",
                self.name, normalized_url, e,
            ) from e

    @abstractmethod
    async def _check_normalized(self, url: str) -> CheckResult:
        """Query the backend once for an already normalized URL."""
        pass

    def create_result(self, url: str) -> CheckResult:
        return CheckResult(url=url)

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        """
        Send one HTTP request and decode the JSON body.

        Raises:
            aiohttp.ClientResponseError: On a non-2xx status
            ValueError: If the body is not valid JSON
        """
        if self.session is not None:
            return await self._send(self.session, method, url, **kwargs)

        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            headers={"User-Agent": USER_AGENT},
        ) as session:
            return await self._send(session, method, url, **kwargs)

    async def _send(self, session: aiohttp.ClientSession, method: str, url: str, **kwargs) -> Any:
        async with session.request(method, url, **kwargs) as response:
            response.raise_for_status()
            return await response.json(content_type=None)
