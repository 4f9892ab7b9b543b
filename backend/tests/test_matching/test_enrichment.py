"""Tests for best-effort LLM enrichment of ranked matches."""

import asyncio

import pytest

from config import settings
from models.schemas.intent import Intent
from models.schemas.match_result import MatchContext
from models.schemas.subject import Subject, SubjectKind
from services.matching.enrichment import enrich_results
from services.matching.project_match_scorer import ProjectMatchScorer
from services.matching.ranker import rank_results
from services.matching.tiers import TierPolicy

INTENT = Intent(skills=frozenset({"python", "sql"}), industries=frozenset({"technology"}))


def _ranked(count: int = 3):
    subjects = [
        Subject(
            id=f"p{i}",
            kind=SubjectKind.PROJECT,
            name=f"Project {i}",
            skills=frozenset({"python", "sql"}) if i % 2 == 0 else frozenset({"figma"}),
            categories=frozenset({"technology"}),
        )
        for i in range(count)
    ]
    results = ProjectMatchScorer().score_many(subjects, INTENT)
    ranked = rank_results(results, TierPolicy(max_results=10, min_score=0.0))
    return ranked, {s.id: s for s in subjects}


async def _good_llm(prompt: str):
    return {"explanation": "A tailored explanation.", "recommended_approach": "Apply this week."}


class TestEnrichResults:
    @pytest.mark.asyncio
    async def test_replaces_only_explanation_and_approach(self):
        ranked, subjects = _ranked()
        enriched = await enrich_results(ranked, subjects, INTENT, MatchContext.PROJECT_MATCHING,
                                        generate=_good_llm)
        for before, after in zip(ranked.results, enriched.results):
            assert after.insights.explanation == "A tailored explanation."
            assert after.insights.recommended_approach == "Apply this week."
            assert after.insights.source == "llm"
            assert after.insights.strengths == before.insights.strengths
            assert after.insights.concerns == before.insights.concerns
            assert after.overall_score == before.overall_score
            assert after.rank == before.rank
            assert after.breakdown == before.breakdown
        assert enriched.category_breakdown == ranked.category_breakdown

    @pytest.mark.asyncio
    async def test_timeout_keeps_template(self):
        ranked, subjects = _ranked()

        async def slow_llm(prompt):
            await asyncio.sleep(5)
            return {"explanation": "too late"}

        enriched = await enrich_results(ranked, subjects, INTENT, MatchContext.PROJECT_MATCHING,
                                        generate=slow_llm, timeout=0.05)
        assert enriched.results == ranked.results

    @pytest.mark.asyncio
    async def test_failure_keeps_template(self):
        ranked, subjects = _ranked()

        async def broken_llm(prompt):
            raise RuntimeError("upstream exploded")

        enriched = await enrich_results(ranked, subjects, INTENT, MatchContext.PROJECT_MATCHING,
                                        generate=broken_llm)
        assert enriched.results == ranked.results

    @pytest.mark.asyncio
    async def test_unusable_response_keeps_template(self):
        ranked, subjects = _ranked()

        async def empty_llm(prompt):
            return {"explanation": "   "}

        enriched = await enrich_results(ranked, subjects, INTENT, MatchContext.PROJECT_MATCHING,
                                        generate=empty_llm)
        assert enriched.results == ranked.results

    @pytest.mark.asyncio
    async def test_missing_approach_keeps_template_approach(self):
        ranked, subjects = _ranked(1)

        async def partial_llm(prompt):
            return {"explanation": "Only an explanation."}

        enriched = await enrich_results(ranked, subjects, INTENT, MatchContext.PROJECT_MATCHING,
                                        generate=partial_llm)
        match = enriched.results[0]
        assert match.insights.explanation == "Only an explanation."
        assert match.insights.recommended_approach == ranked.results[0].insights.recommended_approach

    @pytest.mark.asyncio
    async def test_abort_cancels_pending_calls(self):
        ranked, subjects = _ranked()
        abort = asyncio.Event()
        cancelled = []

        async def hanging_llm(prompt):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(prompt)
                raise
            return {"explanation": "never"}

        asyncio.get_running_loop().call_later(0.05, abort.set)
        enriched = await enrich_results(ranked, subjects, INTENT, MatchContext.PROJECT_MATCHING,
                                        generate=hanging_llm, timeout=30, abort=abort)
        assert enriched.results == ranked.results
        assert len(cancelled) == len(ranked.results)

    @pytest.mark.asyncio
    async def test_already_aborted_skips_calls(self):
        ranked, subjects = _ranked()
        abort = asyncio.Event()
        abort.set()
        calls = []

        async def counting_llm(prompt):
            calls.append(prompt)
            return {"explanation": "x"}

        enriched = await enrich_results(ranked, subjects, INTENT, MatchContext.PROJECT_MATCHING,
                                        generate=counting_llm, abort=abort)
        assert enriched is ranked
        assert calls == []

    @pytest.mark.asyncio
    async def test_concurrency_bound(self):
        ranked, subjects = _ranked(6)
        active = 0
        peak = 0

        async def tracking_llm(prompt):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return {"explanation": "ok"}

        await enrich_results(ranked, subjects, INTENT, MatchContext.PROJECT_MATCHING,
                             generate=tracking_llm, concurrency=2)
        assert peak == 2

    @pytest.mark.asyncio
    async def test_disabled_without_api_key(self, monkeypatch):
        monkeypatch.setattr(settings, "gemini_api_key", "")
        ranked, subjects = _ranked()
        enriched = await enrich_results(ranked, subjects, INTENT, MatchContext.PROJECT_MATCHING)
        assert enriched is ranked
