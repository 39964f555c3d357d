"""
LinkGuard Configuration

Runtime checker configuration, plus environment-driven settings via
pydantic-settings.
"""

import logging
from functools import lru_cache
from typing import Dict, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from linkguard.services.cache import (
    CacheAdapter,
    MemoryCacheAdapter,
    NullCacheAdapter,
    RedisCacheAdapter,
)
from linkguard.utils.constants import (
    DEFAULT_CACHE_TTL,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_RETRIES,
    DEFAULT_TIMEOUT,
)
from linkguard.utils.exceptions import InvalidArgumentError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Used whenever checker logging is disabled
_null_logger = logging.getLogger("linkguard.null")
_null_logger.addHandler(logging.NullHandler())
_null_logger.propagate = False


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Values can be set via:
    1. Environment variables prefixed with LINKGUARD_
    2. .env file (local development)
    3. Default values defined here
    """

    model_config = SettingsConfigDict(
        env_prefix="LINKGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Cache
    # =========================================================================
    cache_backend: Literal["none", "memory", "redis"] = "none"
    cache_ttl: int = Field(default=DEFAULT_CACHE_TTL, ge=1, description="Seconds a verdict stays cached")
    redis_url: str = "redis://localhost:6379/0"

    # =========================================================================
    # Provider calls
    # =========================================================================
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Per-request timeout in seconds")
    retries: int = Field(default=DEFAULT_RETRIES, ge=0, description="Retries after the first attempt")
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1, description="In-flight provider calls")

    # =========================================================================
    # Logging
    # =========================================================================
    log_enabled: bool = False
    log_level: str = "INFO"

    # =========================================================================
    # Provider API Keys
    # =========================================================================
    google_safebrowsing_api_key: Optional[str] = Field(default=None, description="Google Safe Browsing API key")
    yandex_safebrowsing_api_key: Optional[str] = Field(default=None, description="Yandex Safe Browsing API key")
    virustotal_api_key: Optional[str] = Field(default=None, description="VirusTotal API key")
    phishtank_api_key: Optional[str] = Field(default=None, description="PhishTank application key")
    ipqualityscore_api_key: Optional[str] = Field(default=None, description="IPQualityScore API key")
    facebook_access_token: Optional[str] = Field(default=None, description="Facebook Graph API access token")
    opswat_api_key: Optional[str] = Field(default=None, description="OPSWAT MetaDefender API key")
    cisco_talos_api_key: Optional[str] = Field(default=None, description="Cisco Talos API key")

    def provider_api_keys(self) -> Dict[str, Optional[str]]:
        """API key per provider name."""
        return {
            "google_safebrowsing": self.google_safebrowsing_api_key,
            "yandex_safebrowsing": self.yandex_safebrowsing_api_key,
            "virustotal": self.virustotal_api_key,
            "phishtank": self.phishtank_api_key,
            "ipqualityscore": self.ipqualityscore_api_key,
            "facebook": self.facebook_access_token,
            "opswat": self.opswat_api_key,
            "cisco_talos": self.cisco_talos_api_key,
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Use get_settings.cache_clear() to reload settings.
    """
    return Settings()


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for applications embedding LinkGuard."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


class CheckerConfig:
    """
    Configuration owned by a LinkChecker.

    Setters return ``self`` so a config can be built fluently before first
    use::

        config = CheckerConfig().set_cache_adapter(MemoryCacheAdapter()).set_retries(2)
    """

    def __init__(self):
        self.cache_adapter: CacheAdapter = NullCacheAdapter()
        self.cache_ttl: int = DEFAULT_CACHE_TTL
        self.cache_enabled: bool = False
        self.timeout: float = DEFAULT_TIMEOUT
        self.retries: int = DEFAULT_RETRIES
        self.max_concurrency: int = DEFAULT_MAX_CONCURRENCY
        self.log_enabled: bool = False
        self._logger: logging.Logger = logging.getLogger("linkguard.checker")

    @classmethod
    def from_settings(cls, settings: Settings) -> "CheckerConfig":
        config = (
            cls()
            .set_cache_ttl(settings.cache_ttl)
            .set_timeout(settings.timeout)
            .set_retries(settings.retries)
            .set_max_concurrency(settings.max_concurrency)
            .enable_logging(settings.log_enabled)
        )

        if settings.cache_backend == "memory":
            config.set_cache_adapter(MemoryCacheAdapter())
        elif settings.cache_backend == "redis":
            config.set_cache_adapter(RedisCacheAdapter.from_url(settings.redis_url))

        return config

    # =========================================================================
    # Cache
    # =========================================================================

    def set_cache_adapter(self, cache_adapter: Optional[CacheAdapter]) -> "CheckerConfig":
        """Use ``cache_adapter`` for verdicts; passing None disables caching."""
        self.cache_adapter = cache_adapter if cache_adapter is not None else NullCacheAdapter()
        self.cache_enabled = cache_adapter is not None
        return self

    def set_cache_ttl(self, cache_ttl: int) -> "CheckerConfig":
        if cache_ttl < 1:
            raise InvalidArgumentError(f"cache_ttl must be >= 1, got {cache_ttl}")
        self.cache_ttl = cache_ttl
        return self

    def enable_cache(self, enabled: bool = True) -> "CheckerConfig":
        self.cache_enabled = enabled
        return self

    @property
    def is_cache_enabled(self) -> bool:
        return self.cache_enabled and not isinstance(self.cache_adapter, NullCacheAdapter)

    # =========================================================================
    # Provider calls
    # =========================================================================

    def set_timeout(self, timeout: float) -> "CheckerConfig":
        if timeout <= 0:
            raise InvalidArgumentError(f"timeout must be > 0, got {timeout}")
        self.timeout = timeout
        return self

    def set_retries(self, retries: int) -> "CheckerConfig":
        if retries < 0:
            raise InvalidArgumentError(f"retries must be >= 0, got {retries}")
        self.retries = retries
        return self

    def set_max_concurrency(self, max_concurrency: int) -> "CheckerConfig":
        if max_concurrency < 1:
            raise InvalidArgumentError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self.max_concurrency = max_concurrency
        return self

    # =========================================================================
    # Logging
    # =========================================================================

    def set_logger(self, logger: logging.Logger) -> "CheckerConfig":
        """Send checker logs to ``logger`` (enables logging)."""
        self._logger = logger
        self.log_enabled = True
        return self

    def enable_logging(self, enabled: bool = True) -> "CheckerConfig":
        self.log_enabled = enabled
        return self

    @property
    def logger(self) -> logging.Logger:
        """Configured logger, or one that discards everything when disabled."""
        return self._logger if self.log_enabled else _null_logger
