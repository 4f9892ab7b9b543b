"""Ranker/aggregator: tier cutoff, stable ordering and category breakdown."""

import logging
from collections import defaultdict

import numpy as np

from models.schemas.match_result import MatchResult
from models.schemas.ranking import CategorySummary, RankedMatch, RankedResults
from services.matching.tiers import TierPolicy

logger = logging.getLogger(__name__)

OTHER_CATEGORY = "Other"

# Reported whenever nothing survives, whether the pool was empty or every score fell short
REASON_NO_MATCHES = "no matches met the minimum score"


def category_breakdown(matches: list[MatchResult]) -> list[CategorySummary]:
    """Count and average score per category over the surviving matches.

    A subject in several categories counts towards each. Sorted by average
    score descending; ties keep first-appearance order.
    """
    scores: dict[str, list[float]] = defaultdict(list)
    for match in matches:
        for category in match.categories or [OTHER_CATEGORY]:
            scores[category].append(match.overall_score)

    summaries = [
        CategorySummary(category=name, count=len(values), avg_score=round(float(np.mean(values)), 4))
        for name, values in scores.items()
    ]
    return sorted(summaries, key=lambda s: s.avg_score, reverse=True)


def rank_results(results: list[MatchResult], policy: TierPolicy) -> RankedResults:
    """Order by overall score (stable on ties), apply the tier floor and cap."""
    if not results:
        logger.info("Ranked 0 results: pool was empty")
        return RankedResults(reason=REASON_NO_MATCHES)

    # sorted() is stable, so equal scores keep pool order
    ordered = sorted(results, key=lambda r: r.overall_score, reverse=True)
    eligible = [r for r in ordered if r.overall_score >= policy.min_score]
    survivors = eligible[: policy.max_results]

    logger.info(
        "Ranked %d results: %d above %.2f, returning %d",
        len(results), len(eligible), policy.min_score, len(survivors),
    )
    if not survivors:
        return RankedResults(reason=REASON_NO_MATCHES)

    ranked = [
        RankedMatch(
            subject_id=r.subject_id,
            rank=i,
            overall_score=r.overall_score,
            breakdown=r.breakdown,
            group_scores=r.group_scores,
            insights=r.insights,
            recommendation_level=r.recommendation_level,
        )
        for i, r in enumerate(survivors, start=1)
    ]
    return RankedResults(results=ranked, category_breakdown=category_breakdown(survivors))
