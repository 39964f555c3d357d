"""
LinkGuard Facebook Integration

Uses the Graph API URL scraper to detect links Facebook blocks or restricts.
"""

from typing import Any, Dict

import aiohttp

from linkguard.models.results import CheckResult, Threat
from linkguard.utils.constants import FACEBOOK_GRAPH_API_URL

from .base import HttpProvider


class FacebookProvider(HttpProvider):
    """
    Facebook Graph API integration.

    Facebook reports unsafe links through error payloads rather than a
    verdict field, so errors are inspected for policy-related wording and
    codes.
    """

    name = "facebook"
    display_name = "Facebook"

    PLATFORM = "FACEBOOK"
    SECURITY_KEYWORDS = ("spam", "abuse", "malicious", "unsafe", "blocked", "restricted")
    # 368: temporarily blocked for policy violations, 1609005: link blocked
    BLOCKED_CODES = (368, 1609005)

    async def _check_normalized(self, url: str) -> CheckResult:
        result = self.create_result(url)

        data = await self._request(
            "POST",
            FACEBOOK_GRAPH_API_URL,
            params={
                "access_token": self.api_key,
                "scrape": "true",
                "id": url,
            },
        )
        data = data or {}

        error = data.get("error")
        if isinstance(error, dict) and self._is_security_error(error):
            result.add_threat(self.name, Threat(
                type="BLOCKED_URL",
                platform=self.PLATFORM,
                description=f"This URL is blocked by Facebook: {error.get('message', 'Unknown error')}",
                url=url,
                metadata=error,
            ))

        share = data.get("share")
        if isinstance(share, dict) and "error" in share:
            result.add_threat(self.name, Threat(
                type="RESTRICTED_URL",
                platform=self.PLATFORM,
                description="This URL has sharing restrictions on Facebook",
                url=url,
                metadata=share,
            ))

        return result

    async def _send(self, session: aiohttp.ClientSession, method: str, url: str, **kwargs) -> Any:
        # blocked links come back as 4xx responses with an error body
        async with session.request(method, url, **kwargs) as response:
            return await response.json(content_type=None)

    def _is_security_error(self, error: Dict[str, Any]) -> bool:
        message = str(error.get("message", "")).lower()
        if any(keyword in message for keyword in self.SECURITY_KEYWORDS):
            return True
        return error.get("code") in self.BLOCKED_CODES
