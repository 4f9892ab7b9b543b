"""Best-effort LLM decoration of ranked matches.

Runs only on ranked survivors, after scoring and ranking are final. Only the
explanation and recommended approach may change; scores, ranks, strengths
and concerns never do. Any failure keeps the template insights.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from config import settings
from models.schemas.intent import Intent
from models.schemas.match_result import MatchContext
from models.schemas.ranking import RankedMatch, RankedResults
from models.schemas.subject import Subject
from services import gemini_client
from services.exceptions import EnrichmentTimeoutError
from services.prompt_builder import build_insight_prompt

logger = logging.getLogger(__name__)

GenerateFn = Callable[[str], Awaitable[dict[str, Any] | None]]


async def _generate_with_timeout(generate: GenerateFn, prompt: str, timeout: float) -> dict[str, Any] | None:
    try:
        return await asyncio.wait_for(generate(prompt), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise EnrichmentTimeoutError(f"Enrichment exceeded {timeout:.1f}s", timeout=timeout) from e


def _apply(match: RankedMatch, data: dict[str, Any] | None) -> RankedMatch:
    if not isinstance(data, dict) or not data:
        return match
    explanation = data.get("explanation")
    if not isinstance(explanation, str) or not explanation.strip():
        logger.warning("Enrichment for %s had no explanation, keeping template", match.subject_id)
        return match
    approach = data.get("recommended_approach")
    if not isinstance(approach, str) or not approach.strip():
        approach = match.insights.recommended_approach

    insights = match.insights.model_copy(update={
        "explanation": explanation.strip(),
        "recommended_approach": approach.strip(),
        "source": "llm",
    })
    return match.model_copy(update={"insights": insights})


async def _enrich_one(
    match: RankedMatch,
    subject: Subject | None,
    intent: Intent,
    context: MatchContext,
    generate: GenerateFn,
    timeout: float,
    semaphore: asyncio.Semaphore,
) -> RankedMatch:
    if subject is None:
        return match
    async with semaphore:
        prompt = build_insight_prompt(match, subject, intent, context)
        try:
            data = await _generate_with_timeout(generate, prompt, timeout)
        except EnrichmentTimeoutError as e:
            logger.warning("Enrichment timed out for %s: %s", match.subject_id, e.message)
            return match
        except Exception as e:
            logger.error("Enrichment failed for %s: %s", match.subject_id, e)
            return match
    return _apply(match, data)


async def enrich_results(
    ranked: RankedResults,
    subjects: dict[str, Subject],
    intent: Intent,
    context: MatchContext,
    generate: GenerateFn | None = None,
    timeout: float | None = None,
    abort: asyncio.Event | None = None,
    concurrency: int | None = None,
) -> RankedResults:
    """Replace template explanations with LLM ones where the call succeeds in time.

    ``generate`` defaults to the Gemini client and is skipped entirely when
    enrichment is disabled. Setting ``abort`` cancels outstanding calls;
    matches whose call had not finished keep their template insights.
    """
    if not ranked.results:
        return ranked
    if generate is None:
        if not gemini_client.is_enabled():
            return ranked
        generate = gemini_client.generate_json
    if abort is not None and abort.is_set():
        return ranked

    timeout = timeout if timeout is not None else settings.enrichment_timeout_seconds
    semaphore = asyncio.Semaphore(max(1, concurrency or settings.enrichment_concurrency))

    tasks = [
        asyncio.create_task(
            _enrich_one(m, subjects.get(m.subject_id), intent, context, generate, timeout, semaphore)
        )
        for m in ranked.results
    ]
    try:
        if abort is None:
            await asyncio.gather(*tasks)
        else:
            await _wait_or_abort(tasks, abort)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    enriched = [
        task.result() if not task.cancelled() else match
        for task, match in zip(tasks, ranked.results)
    ]
    llm_count = sum(1 for m in enriched if m.insights.source == "llm")
    logger.info("Enriched %d of %d matches", llm_count, len(enriched))
    return ranked.model_copy(update={"results": enriched})


async def _wait_or_abort(tasks: list[asyncio.Task], abort: asyncio.Event) -> None:
    all_done = asyncio.ensure_future(asyncio.wait(tasks))
    aborted = asyncio.ensure_future(abort.wait())
    try:
        await asyncio.wait({all_done, aborted}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for waiter in (all_done, aborted):
            if not waiter.done():
                waiter.cancel()
        await asyncio.gather(all_done, aborted, return_exceptions=True)
    if abort.is_set():
        logger.warning("Enrichment aborted, keeping template insights for unfinished matches")
