"""
LinkGuard Cisco Talos Integration

Host reputation lookups; Talos scores below zero indicate a bad reputation.
"""

from typing import Any, List, Tuple
from urllib.parse import urlparse

from linkguard.models.results import CheckResult, Threat
from linkguard.utils.constants import CISCO_TALOS_API_URL, PLATFORM_ANY

from .base import HttpProvider


class CiscoTalosProvider(HttpProvider):
    """Cisco Talos web reputation for the URL's host."""

    name = "cisco_talos"
    display_name = "Cisco Talos"

    SCORE_THRESHOLD = -5
    DANGEROUS_CATEGORIES = (
        "malware", "phishing", "botnet", "spam",
        "suspicious", "untrusted", "compromised",
    )

    async def _check_normalized(self, url: str) -> CheckResult:
        result = self.create_result(url)
        domain = urlparse(url).hostname or url

        data = await self._request(
            "POST",
            CISCO_TALOS_API_URL,
            json={"url": domain},
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        data = data or {}

        reputation = data.get("reputation", data.get("web_reputation"))
        is_malicious, categories = self._evaluate(reputation, data)

        if is_malicious:
            result.add_threat(self.name, Threat(
                type=categories[0].upper() if categories else "MALICIOUS_REPUTATION",
                platform=PLATFORM_ANY,
                description=(
                    "This URL/domain has a poor reputation score on Cisco Talos"
                    + (f": {', '.join(categories)}" if categories else "")
                ),
                url=url,
                metadata={
                    "domain": domain,
                    "reputation": reputation,
                    "categories": categories,
                },
            ))

        return result

    def _evaluate(self, reputation: Any, data: dict) -> Tuple[bool, List[str]]:
        """Return (is_malicious, dangerous category names)."""
        if isinstance(reputation, dict):
            score = reputation.get("score", reputation.get("threat_score"))
            is_malicious = score is not None and score < self.SCORE_THRESHOLD

            categories = []
            for category in reputation.get("categories", data.get("categories")) or []:
                name = category.get("name", "") if isinstance(category, dict) else str(category)
                if name.lower() in self.DANGEROUS_CATEGORIES:
                    categories.append(name)

            return is_malicious or bool(categories), categories

        if isinstance(reputation, (int, float)) and not isinstance(reputation, bool):
            return reputation < self.SCORE_THRESHOLD, []

        if isinstance(reputation, str):
            try:
                return float(reputation) < self.SCORE_THRESHOLD, []
            except ValueError:
                return False, []

        return False, []
