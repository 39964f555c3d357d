"""
LinkGuard OPSWAT MetaDefender Integration

URL reputation lookups aggregated from the MetaDefender source feeds.
"""

from typing import Any, Dict, List

from linkguard.models.results import CheckResult, Threat
from linkguard.utils.constants import OPSWAT_API_URL, PLATFORM_ANY

from .base import HttpProvider


class OPSWATProvider(HttpProvider):
    """OPSWAT MetaDefender Cloud URL lookup."""

    name = "opswat"
    display_name = "OPSWAT MetaDefender"

    MALICIOUS_ASSESSMENTS = ("malware", "phishing", "suspicious", "spam", "potentially_malicious")

    async def _check_normalized(self, url: str) -> CheckResult:
        result = self.create_result(url)

        data = await self._request(
            "POST",
            OPSWAT_API_URL,
            json={"url": url},
            headers={"apikey": self.api_key},
        )

        lookup = (data or {}).get("lookup_results") or {}
        detected_by = lookup.get("detected_by") or 0
        if detected_by <= 0:
            return result

        sources = [
            {
                "provider": source.get("provider", "unknown"),
                "assessment": source.get("assessment", ""),
            }
            for source in lookup.get("sources") or []
            if source.get("assessment") in self.MALICIOUS_ASSESSMENTS
        ]
        if not sources:
            return result

        names = [source["provider"] for source in sources]
        result.add_threat(self.name, Threat(
            type=self._determine_threat_type(sources),
            platform=PLATFORM_ANY,
            description=(
                f"This URL was flagged by {len(sources)} source(s) in OPSWAT "
                f"MetaDefender: {', '.join(names[:5])}"
            ),
            url=url,
            metadata={
                "detected_by": detected_by,
                "sources": sources,
                "start_time": lookup.get("start_time"),
            },
        ))
        return result

    def _determine_threat_type(self, sources: List[Dict[str, Any]]) -> str:
        assessments = {source["assessment"] for source in sources}
        if "malware" in assessments:
            return "MALWARE"
        if "phishing" in assessments:
            return "PHISHING"
        if "spam" in assessments:
            return "SPAM"
        return "SUSPICIOUS"
