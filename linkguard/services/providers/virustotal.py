"""
LinkGuard VirusTotal Integration

Submits the URL for analysis and reads back the vendor verdicts.
"""

import logging
from typing import Any, Dict, List

from linkguard.models.results import CheckResult, Threat
from linkguard.utils.constants import PLATFORM_ANY, VIRUSTOTAL_API_URL
from linkguard.utils.exceptions import ProviderResponseError

from .base import HttpProvider

logger = logging.getLogger(__name__)


class VirusTotalProvider(HttpProvider):
    """
    VirusTotal API v3 integration.

    A URL is flagged when at least one engine reports it malicious or
    suspicious.
    """

    name = "virustotal"
    display_name = "VirusTotal"

    def _get_headers(self) -> Dict[str, str]:
        return {
            "x-apikey": self.api_key,
            "Accept": "application/json",
        }

    async def _check_normalized(self, url: str) -> CheckResult:
        result = self.create_result(url)

        url_id = await self._submit_url(url)
        analysis = await self._request(
            "GET", f"{VIRUSTOTAL_API_URL}/{url_id}", headers=self._get_headers()
        )

        attributes = ((analysis or {}).get("data") or {}).get("attributes") or {}
        stats = attributes.get("stats") or attributes.get("last_analysis_stats") or {}

        if stats.get("malicious", 0) > 0 or stats.get("suspicious", 0) > 0:
            vendors = self._extract_malicious_vendors(attributes)
            result.add_threat(self.name, Threat(
                type="MALICIOUS_URL",
                platform=PLATFORM_ANY,
                description=self._build_threat_description(stats, vendors),
                url=url,
                metadata={
                    "stats": stats,
                    "analysis_date": attributes.get("last_analysis_date"),
                    "vendors": vendors,
                },
            ))

        return result

    async def _submit_url(self, url: str) -> str:
        data = await self._request(
            "POST", VIRUSTOTAL_API_URL, data={"url": url}, headers=self._get_headers()
        )

        url_id = ((data or {}).get("data") or {}).get("id")
        if not url_id:
            raise ProviderResponseError("Failed to submit URL to VirusTotal")
        return url_id

    def _build_threat_description(self, stats: Dict[str, Any], vendors: List[str]) -> str:
        flagged = stats.get("malicious", 0) + stats.get("suspicious", 0)
        total = sum(v for v in stats.values() if isinstance(v, int))

        vendor_string = ", ".join(vendors[:3])
        if len(vendors) > 3:
            vendor_string += " and others"

        return (
            f"This URL was flagged by {flagged} out of {total} security vendors "
            f"as malicious or suspicious. Detected by: {vendor_string}"
        )

    def _extract_malicious_vendors(self, attributes: Dict[str, Any]) -> List[str]:
        vendors = []
        for vendor_name, verdict in (attributes.get("last_analysis_results") or {}).items():
            if verdict.get("category") in ("malicious", "suspicious") and verdict.get("result") != "clean":
                vendors.append(vendor_name)
        return vendors
