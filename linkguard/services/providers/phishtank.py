"""
LinkGuard PhishTank Integration

Provides phishing URL lookups via PhishTank API.
"""

from linkguard.models.results import CheckResult, Threat
from linkguard.utils.constants import PHISHTANK_API_URL, PLATFORM_ANY

from .base import HttpProvider


class PhishTankProvider(HttpProvider):
    """
    PhishTank API integration.

    Only entries that are in the database and marked as phish are reported.
    """

    name = "phishtank"
    display_name = "PhishTank"

    async def _check_normalized(self, url: str) -> CheckResult:
        result = self.create_result(url)

        data = await self._request(
            "POST",
            PHISHTANK_API_URL,
            data={
                "url": url,
                "app_key": self.api_key,
                "format": "json",
            },
        )

        results = (data or {}).get("results") or {}
        if results.get("in_database") is True and results.get("phish_detail_page") and results.get("phish"):
            result.add_threat(self.name, Threat(
                type="PHISHING",
                platform=PLATFORM_ANY,
                description="This URL was identified as a phishing site by PhishTank",
                url=url,
                metadata={
                    "phish_id": results.get("phish_id"),
                    "verified": results.get("verified", False),
                    "verified_at": results.get("verified_at"),
                    "phish_detail_url": results.get("phish_detail_page"),
                },
            ))

        return result
