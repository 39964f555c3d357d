"""
LinkGuard Helper Functions

Utility functions used throughout the application.
"""

import re
import hashlib

from .constants import CACHE_KEY_PREFIX, DEFAULT_URL_SCHEME, URL_SCHEME_PATTERN


# ============================================================================
# URL Handling
# ============================================================================

SCHEME_REGEX = re.compile(URL_SCHEME_PATTERN, re.IGNORECASE)


def normalize_url(url: str) -> str:
    """
    Normalize a URL before it is hashed or sent to a backend.

    Surrounding whitespace is stripped first, then ``http://`` is prepended
    when no http(s)/ftp(s) scheme is present. Normalizing an already
    normalized URL returns it unchanged.

    Args:
        url: Raw URL as supplied by the caller

    Returns:
        Normalized URL string
    """
    url = url.strip()
    if not SCHEME_REGEX.match(url):
        url = DEFAULT_URL_SCHEME + url
    return url


# ============================================================================
# Cache Keys
# ============================================================================

def hash_url(url: str) -> str:
    """Return the hex MD5 digest of a URL."""
    return hashlib.md5(url.encode("utf-8")).hexdigest()


def generate_cache_key(provider_name: str, url: str) -> str:
    """
    Generate the cache key for a provider verdict.

    Keys are namespaced by the application prefix and the provider name so
    verdicts from different providers never collide.

    Args:
        provider_name: Name of the provider that produced the verdict
        url: URL that was checked (normalized before hashing)

    Returns:
        Cache key such as ``linkguard:virustotal:<md5>``
    """
    return f"{CACHE_KEY_PREFIX}:{provider_name}:{hash_url(normalize_url(url))}"
