"""
IPQualityScore API Integration

Provides URL reputation data including:
- Phishing detection
- Malware detection
- Suspicious URL patterns
- Parked and spamming domains

API Docs: https://www.ipqualityscore.com/documentation/malicious-url-scanner-api/overview
"""

from typing import Any, Dict
from urllib.parse import quote_plus

from linkguard.models.results import CheckResult, Threat
from linkguard.utils.constants import IPQUALITYSCORE_API_URL, PLATFORM_ANY
from linkguard.utils.exceptions import ProviderResponseError

from .base import HttpProvider


class IPQualityScoreProvider(HttpProvider):
    """Client for the IPQualityScore Malicious URL Scanner API."""

    name = "ipqualityscore"
    display_name = "IPQualityScore"

    RISK_FLAGS = ("suspicious", "phishing", "malware", "spamming", "unsafe")

    THREAT_DESCRIPTIONS = {
        "MALWARE": "This URL contains or distributes malware",
        "PHISHING": "This URL is a phishing site designed to steal sensitive information",
        "PARKING_DOMAIN": "This domain is parked and may contain misleading ads",
        "SPAM": "This URL is associated with spam or unwanted communications",
        "SUSPICIOUS": "This URL exhibits suspicious characteristics",
        "UNSAFE": "This URL was identified as unsafe",
    }

    async def _check_normalized(self, url: str) -> CheckResult:
        result = self.create_result(url)

        request_url = f"{IPQUALITYSCORE_API_URL}/{self.api_key}/{quote_plus(url)}"
        data = await self._request("GET", request_url)

        if not isinstance(data, dict) or data.get("success") is not True:
            message = data.get("message", "Unknown error") if isinstance(data, dict) else "Unknown error"
            raise ProviderResponseError(f"IPQualityScore API error: {message}")

        if any(data.get(flag) for flag in self.RISK_FLAGS):
            threat_type = self._determine_threat_type(data)
            result.add_threat(self.name, Threat(
                type=threat_type,
                platform=PLATFORM_ANY,
                description=self.THREAT_DESCRIPTIONS.get(
                    threat_type, "This URL was flagged as potentially harmful"
                ),
                url=url,
                metadata=data,
            ))

        return result

    def _determine_threat_type(self, data: Dict[str, Any]) -> str:
        """Most severe flag wins."""
        if data.get("malware"):
            return "MALWARE"
        if data.get("phishing"):
            return "PHISHING"
        if data.get("parking"):
            return "PARKING_DOMAIN"
        if data.get("spamming"):
            return "SPAM"
        if data.get("suspicious"):
            return "SUSPICIOUS"
        return "UNSAFE"
