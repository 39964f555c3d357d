"""
LinkGuard Result Models

Pydantic models for provider verdicts and the aggregated decision.
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from linkguard.utils.constants import (
    CONSENSUS_ALL,
    CONSENSUS_ANY,
    CONSENSUS_MAJORITY,
    PLATFORM_ANY,
)

logger = logging.getLogger(__name__)


class ConsensusPolicy(str, Enum):
    """Rule used to reduce several provider verdicts to one decision."""
    ANY = CONSENSUS_ANY            # unsafe if any provider flags it
    ALL = CONSENSUS_ALL            # unsafe only if every provider flags it
    MAJORITY = CONSENSUS_MAJORITY  # unsafe if more than half flag it


class Threat(BaseModel):
    """A single normalized finding reported by a provider."""
    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="Category tag, e.g. MALWARE or PHISHING")
    platform: str = Field(PLATFORM_ANY, description="Platform scope of the threat")
    description: str = Field("", description="Human-readable description")
    url: Optional[str] = Field(None, description="Threat target, may differ from the queried URL")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Raw backend details")
    provider_name: Optional[str] = Field(None, description="Set when attached to a CheckResult")


class CheckResult(BaseModel):
    """One provider's verdict for one URL."""
    url: str = Field(..., description="URL that was checked")
    threats: List[Threat] = Field(default_factory=list)

    def add_threat(self, provider_name: str, threat: Threat) -> "CheckResult":
        """
        Attach a threat, stamping it with the reporting provider's name.

        The threat itself is immutable, so a stamped copy is stored.

        Args:
            provider_name: Name of the provider reporting the threat
            threat: Threat found by the provider

        Returns:
            self, for chaining

        Raises:
            ValueError: If the provider name is empty or the threat was
                already attached by another provider
        """
        if not provider_name:
            raise ValueError("provider_name must be a non-empty string")
        if threat.provider_name and threat.provider_name != provider_name:
            raise ValueError(
                f"Threat already attached by provider '{threat.provider_name}'"
            )

        self.threats.append(threat.model_copy(update={"provider_name": provider_name}))
        return self

    @property
    def is_safe(self) -> bool:
        return not self.threats

    @property
    def threat_types(self) -> List[str]:
        """Unique threat types, in the order first reported."""
        return list(dict.fromkeys(threat.type for threat in self.threats))

    @property
    def threat_type(self) -> Optional[str]:
        """Type of the first reported threat, or None when safe."""
        if not self.threats:
            return None
        return self.threats[0].type

    def has_threat_type(self, threat_type: str) -> bool:
        return any(threat.type == threat_type for threat in self.threats)


def determine_overall_safety(
    results: Iterable[CheckResult],
    policy: Union[ConsensusPolicy, str] = ConsensusPolicy.ANY,
) -> bool:
    """
    Reduce provider verdicts to one safety decision.

    Only the number of unsafe verdicts matters, so the outcome does not depend
    on iteration order. With no verdicts at all the URL is reported safe.

    Args:
        results: Per-provider check results
        policy: ANY, ALL or MAJORITY; unknown values behave like ANY

    Returns:
        True if the URL is considered safe
    """
    results = list(results)
    total = len(results)
    if total == 0:
        return True

    unsafe_count = sum(1 for result in results if not result.is_safe)

    try:
        policy = ConsensusPolicy(policy)
    except ValueError:
        logger.warning(f"Unknown consensus policy {policy!r}, falling back to 'any'")
        policy = ConsensusPolicy.ANY

    if policy == ConsensusPolicy.ALL:
        return unsafe_count < total
    if policy == ConsensusPolicy.MAJORITY:
        # ties favour safe
        return unsafe_count * 2 <= total
    return unsafe_count == 0


class AggregateResult(BaseModel):
    """Combined verdict for one URL across all queried providers."""
    url: str = Field(..., description="URL that was checked")
    provider_results: Dict[str, CheckResult] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(
        default_factory=dict,
        description="Providers whose check failed, mapped to the failure message",
    )
    is_safe: bool = Field(True, description="Final decision of the consensus policy")

    def add_provider_result(self, provider_name: str, result: CheckResult) -> "AggregateResult":
        self.provider_results[provider_name] = result
        return self

    def add_error(self, provider_name: str, message: str) -> "AggregateResult":
        self.errors[provider_name] = message
        return self

    def get_provider_result(self, provider_name: str) -> Optional[CheckResult]:
        return self.provider_results.get(provider_name)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def determine_overall_safety(self, policy: Union[ConsensusPolicy, str]) -> bool:
        """Apply the consensus policy to the collected results and store it."""
        self.is_safe = determine_overall_safety(self.provider_results.values(), policy)
        return self.is_safe

    def get_threats(self) -> Dict[str, List[Threat]]:
        """Threats grouped by provider, for providers that flagged the URL."""
        return {
            name: list(result.threats)
            for name, result in self.provider_results.items()
            if not result.is_safe
        }

    def get_threat_summary(self) -> Dict[str, str]:
        """Comma-separated unique threat types per flagging provider."""
        return {
            name: ", ".join(result.threat_types)
            for name, result in self.provider_results.items()
            if not result.is_safe
        }


__all__ = [
    'ConsensusPolicy',
    'Threat',
    'CheckResult',
    'AggregateResult',
    'determine_overall_safety',
]
