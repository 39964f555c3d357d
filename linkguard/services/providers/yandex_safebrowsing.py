"""
Yandex Safe Browsing API Integration

Safe Browsing v4 compatible lookups against Yandex's threat lists.
"""

from typing import Any, Dict

from linkguard.utils.constants import YANDEX_SAFEBROWSING_API_URL, YANDEX_THREAT_TYPES

from .google_safebrowsing import SafeBrowsingProvider


class YandexSafeBrowsingProvider(SafeBrowsingProvider):
    """Yandex Safe Browsing; the API key travels in the Authorization header."""

    name = "yandex_safebrowsing"
    display_name = "Yandex Safe Browsing"

    BASE_URL = YANDEX_SAFEBROWSING_API_URL
    THREAT_TYPES = YANDEX_THREAT_TYPES
    THREAT_DESCRIPTIONS = {
        "MALWARE": "This URL contains malware according to Yandex",
        "SOCIAL_ENGINEERING": "This URL contains phishing or social engineering content according to Yandex",
        "UNWANTED_SOFTWARE": "This URL contains unwanted software according to Yandex",
        "HARMFUL_DOWNLOAD": "This URL leads to harmful downloads according to Yandex",
    }
    DEFAULT_DESCRIPTION = "This URL has been identified as unsafe by Yandex"

    def _request_kwargs(self) -> Dict[str, Any]:
        return {"headers": {"Authorization": f"ApiKey {self.api_key}"}}
