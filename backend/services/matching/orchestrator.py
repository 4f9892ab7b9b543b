"""Matching orchestrator: wires the engine stages together.

Flow (both contexts):
    raw intent/profile
      ├─ intent_resolver      → Intent
      ├─ PoolBuilder          → list[Subject]   (store read, normalized)
      ├─ scorer.score_many    → list[MatchResult]
      ├─ rank_results         → RankedResults   (tier cutoff + cap)
      ├─ enrich_results       → RankedResults   (optional, best-effort)
      └─ store.record_search  (company search only, failure logged)
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Mapping

from models.schemas.intent import Intent
from models.schemas.match_result import MatchContext
from models.schemas.ranking import MatchingResponse, RankedResults
from models.schemas.subject import Subject
from services.exceptions import MatchingError
from services.matching.enrichment import GenerateFn, enrich_results
from services.matching.intent_resolver import resolve_search_intent, resolve_student_profile
from services.matching.pool_builder import PoolBuilder
from services.matching.ranker import rank_results
from services.matching.registry import get_scorer
from services.matching.tiers import TierPolicy, get_policy, parse_tier
from storage.repository import SubjectStore

logger = logging.getLogger(__name__)


async def _score_and_rank(
    context: MatchContext,
    pool: list[Subject],
    intent: Intent,
    policy: TierPolicy,
    enrich: bool,
    abort: asyncio.Event | None,
    generate: GenerateFn | None,
) -> RankedResults:
    scorer = get_scorer(context)
    results = scorer.score_many(pool, intent)
    ranked = rank_results(results, policy)
    if enrich and ranked.results:
        subjects = {s.id: s for s in pool}
        ranked = await enrich_results(ranked, subjects, intent, context, generate=generate, abort=abort)
    return ranked


async def search_talent(
    raw_intent: Mapping[str, Any],
    tier: str | None,
    store: SubjectStore,
    company_id: str | None = None,
    prompt: str = "",
    max_results: int | None = None,
    enrich: bool = True,
    abort: asyncio.Event | None = None,
    generate: GenerateFn | None = None,
    now: datetime | None = None,
) -> MatchingResponse:
    """Rank student candidates for a company's structured search intent."""
    context = MatchContext.COMPANY_SEARCH
    scorer = get_scorer(context)
    intent = resolve_search_intent(raw_intent, scorer.taxonomy)
    resolved_tier = parse_tier(tier)
    policy = get_policy(context, resolved_tier, max_results)

    pool = PoolBuilder(store, scorer.taxonomy, now=now).candidate_pool(intent, policy)
    logger.info("Company search: %d candidates in pool (tier %s)", len(pool), resolved_tier.value)

    ranked = await _score_and_rank(context, pool, intent, policy, enrich, abort, generate)

    search_id = None
    try:
        search_id = store.record_search(
            company_id, prompt, dict(raw_intent), resolved_tier.value, policy.max_results, ranked.results
        )
    except MatchingError as e:
        logger.warning("Failed to record search audit: %s", e.to_dict())

    return MatchingResponse(
        context=context,
        tier=resolved_tier.value,
        results=ranked.results,
        category_breakdown=ranked.category_breakdown,
        total_evaluated=len(pool),
        reason=ranked.reason,
        search_id=search_id,
    )


async def recommend_projects(
    student_id: str | None,
    raw_profile: Mapping[str, Any],
    tier: str | None,
    store: SubjectStore,
    category: str | None = None,
    include_applied: bool = False,
    max_results: int | None = None,
    enrich: bool = True,
    abort: asyncio.Event | None = None,
    generate: GenerateFn | None = None,
) -> MatchingResponse:
    """Rank live projects for a student's discovery-quiz profile."""
    context = MatchContext.PROJECT_MATCHING
    scorer = get_scorer(context)
    intent = resolve_student_profile(raw_profile, scorer.taxonomy)
    resolved_tier = parse_tier(tier)
    policy = get_policy(context, resolved_tier, max_results)

    pool = PoolBuilder(store, scorer.taxonomy).project_pool(
        intent, student_id, policy, category=category, include_applied=include_applied
    )
    logger.info("Project matching: %d projects in pool (tier %s)", len(pool), resolved_tier.value)

    ranked = await _score_and_rank(context, pool, intent, policy, enrich, abort, generate)

    return MatchingResponse(
        context=context,
        tier=resolved_tier.value,
        results=ranked.results,
        category_breakdown=ranked.category_breakdown,
        total_evaluated=len(pool),
        reason=ranked.reason,
    )
