"""
LinkGuard Constants - Central location for ALL constant values.
"""

from typing import List

# APPLICATION INFO
APP_NAME: str = "LinkGuard"
APP_VERSION: str = "1.0.0"
USER_AGENT: str = f"{APP_NAME}/{APP_VERSION}"
CLIENT_ID: str = "linkguard"

# CACHE
CACHE_KEY_PREFIX: str = "linkguard"
DEFAULT_CACHE_TTL: int = 3600

# TIMEOUTS / RETRIES
DEFAULT_TIMEOUT: float = 5.0
DEFAULT_RETRIES: int = 1
RETRY_BACKOFF_STEP: float = 0.1  # seconds, multiplied by the retry number

# CONCURRENCY
DEFAULT_MAX_CONCURRENCY: int = 10

# CONSENSUS
CONSENSUS_ANY: str = "any"
CONSENSUS_ALL: str = "all"
CONSENSUS_MAJORITY: str = "majority"

# URL NORMALIZATION
DEFAULT_URL_SCHEME: str = "http://"
URL_SCHEME_PATTERN: str = r"^(?:f|ht)tps?://"

# THREAT TAGS
PLATFORM_ANY: str = "ANY_PLATFORM"
THREAT_UNKNOWN: str = "UNKNOWN"

# EXTERNAL API URLS
GOOGLE_SAFEBROWSING_API_URL: str = "https://safebrowsing.googleapis.com/v4/threatMatches:find"
YANDEX_SAFEBROWSING_API_URL: str = "https://sba.yandex.net/v4/threatMatches:find"
VIRUSTOTAL_API_URL: str = "https://www.virustotal.com/api/v3/urls"
PHISHTANK_API_URL: str = "https://checkurl.phishtank.com/checkurl/"
IPQUALITYSCORE_API_URL: str = "https://ipqualityscore.com/api/json/url"
FACEBOOK_GRAPH_API_URL: str = "https://graph.facebook.com/v18.0/"
OPSWAT_API_URL: str = "https://api.metadefender.com/v4/url"
CISCO_TALOS_API_URL: str = "https://cloud-intel.api.cisco.com/v1/url/reputation"

# SAFE BROWSING THREAT TYPES
GOOGLE_THREAT_TYPES: List[str] = [
    "MALWARE",
    "SOCIAL_ENGINEERING",
    "UNWANTED_SOFTWARE",
    "POTENTIALLY_HARMFUL_APPLICATION",
]

YANDEX_THREAT_TYPES: List[str] = [
    "MALWARE",
    "SOCIAL_ENGINEERING",
    "UNWANTED_SOFTWARE",
    "HARMFUL_DOWNLOAD",
]
