"""
Google Safe Browsing API Integration

Checks URLs against Google's constantly updated lists of unsafe web resources:
- Malware
- Social Engineering (Phishing)
- Unwanted Software
- Potentially Harmful Applications

API Docs: https://developers.google.com/safe-browsing/v4/lookup-api
"""

import logging
from typing import Any, Dict, List

from linkguard.models.results import CheckResult, Threat
from linkguard.utils.constants import (
    APP_VERSION,
    CLIENT_ID,
    GOOGLE_SAFEBROWSING_API_URL,
    GOOGLE_THREAT_TYPES,
    PLATFORM_ANY,
    THREAT_UNKNOWN,
)

from .base import HttpProvider

logger = logging.getLogger(__name__)


class SafeBrowsingProvider(HttpProvider):
    """
    Shared logic for Safe Browsing v4 compatible lookup APIs.

    Every entry in ``matches`` becomes one Threat.
    """

    BASE_URL: str = ""
    THREAT_TYPES: List[str] = []
    THREAT_DESCRIPTIONS: Dict[str, str] = {}
    DEFAULT_DESCRIPTION: str = "This URL has been identified as unsafe"

    def build_payload(self, urls: List[str]) -> Dict[str, Any]:
        return {
            "client": {
                "clientId": CLIENT_ID,
                "clientVersion": APP_VERSION,
            },
            "threatInfo": {
                "threatTypes": self.THREAT_TYPES,
                "platformTypes": [PLATFORM_ANY],
                "threatEntryTypes": ["URL"],
                "threatEntries": [{"url": url} for url in urls],
            },
        }

    def get_threat_description(self, threat_type: str) -> str:
        return self.THREAT_DESCRIPTIONS.get(threat_type, self.DEFAULT_DESCRIPTION)

    def _request_kwargs(self) -> Dict[str, Any]:
        return {"params": {"key": self.api_key}}

    async def _check_normalized(self, url: str) -> CheckResult:
        result = self.create_result(url)

        data = await self._request(
            "POST",
            self.BASE_URL,
            json=self.build_payload([url]),
            **self._request_kwargs(),
        )

        matches = data.get("matches") if isinstance(data, dict) else None
        if not isinstance(matches, list):
            return result

        for match in matches:
            threat_type = match.get("threatType", THREAT_UNKNOWN)
            result.add_threat(self.name, Threat(
                type=threat_type,
                platform=match.get("platformType", PLATFORM_ANY),
                description=self.get_threat_description(threat_type),
                url=(match.get("threat") or {}).get("url", url),
                metadata=match,
            ))

        if matches:
            logger.info(f"{self.display_name}: {url} -> {len(matches)} match(es)")
        return result


class GoogleSafeBrowsingProvider(SafeBrowsingProvider):
    """Google Safe Browsing Lookup API v4."""

    name = "google_safebrowsing"
    display_name = "Google Safe Browsing"

    BASE_URL = GOOGLE_SAFEBROWSING_API_URL
    THREAT_TYPES = GOOGLE_THREAT_TYPES
    THREAT_DESCRIPTIONS = {
        "MALWARE": "This URL contains malware",
        "SOCIAL_ENGINEERING": "This URL contains phishing or social engineering content",
        "UNWANTED_SOFTWARE": "This URL contains unwanted software",
        "POTENTIALLY_HARMFUL_APPLICATION": "This URL contains a potentially harmful application",
    }
