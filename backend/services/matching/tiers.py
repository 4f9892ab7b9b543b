"""Subscription tier policies: how many results a caller sees and the score floor."""

import logging
from dataclasses import dataclass
from enum import Enum

from config import settings
from models.schemas.match_result import MatchContext

logger = logging.getLogger(__name__)


class Tier(str, Enum):
    FREE = "FREE"
    PROFESSIONAL = "PROFESSIONAL"
    ENTERPRISE = "ENTERPRISE"


@dataclass(frozen=True)
class TierPolicy:
    max_results: int
    min_score: float  # 0.0-1.0, results below are dropped


TIER_POLICIES: dict[tuple[MatchContext, Tier], TierPolicy] = {
    (MatchContext.COMPANY_SEARCH, Tier.FREE): TierPolicy(max_results=3, min_score=0.6),
    (MatchContext.COMPANY_SEARCH, Tier.PROFESSIONAL): TierPolicy(max_results=10, min_score=0.4),
    (MatchContext.COMPANY_SEARCH, Tier.ENTERPRISE): TierPolicy(max_results=50, min_score=0.2),
    (MatchContext.PROJECT_MATCHING, Tier.FREE): TierPolicy(max_results=10, min_score=0.3),
    (MatchContext.PROJECT_MATCHING, Tier.PROFESSIONAL): TierPolicy(max_results=20, min_score=0.3),
    (MatchContext.PROJECT_MATCHING, Tier.ENTERPRISE): TierPolicy(max_results=50, min_score=0.3),
}

_TIER_ALIASES = {
    "FREE": Tier.FREE,
    "PRO": Tier.PROFESSIONAL,
    "PROFESSIONAL": Tier.PROFESSIONAL,
    "ENTERPRISE": Tier.ENTERPRISE,
    "AGENT": Tier.ENTERPRISE,
}


def parse_tier(value: Tier | str | None) -> Tier:
    """Map a subscription tier name to a Tier. Unknown or missing names get FREE."""
    if isinstance(value, Tier):
        return value
    tier = _TIER_ALIASES.get((value or "").strip().upper())
    if tier is None:
        logger.warning("Unknown subscription tier %r, using FREE", value)
        return Tier.FREE
    return tier


def get_policy(
    context: MatchContext | str,
    tier: Tier | str | None,
    max_results: int | None = None,
) -> TierPolicy:
    """Policy for (context, tier). A ``max_results`` override can only lower the cap."""
    policy = TIER_POLICIES[(MatchContext(context), parse_tier(tier))]
    if max_results is not None and max_results > 0 and max_results < policy.max_results:
        return TierPolicy(max_results=max_results, min_score=policy.min_score)
    return policy


def pool_ceiling(policy: TierPolicy) -> int:
    """Upper bound on the candidate pool fetched for one query."""
    return min(settings.pool_ceiling_multiplier * policy.max_results, settings.pool_hard_cap)
