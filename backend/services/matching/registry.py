"""Lazy-loading scorer registry: one scorer per match context, loaded on first use."""

import logging

from models.schemas.match_result import MatchContext
from services.matching.base import BaseMatcherService

logger = logging.getLogger(__name__)

_registry: dict[MatchContext, BaseMatcherService] = {}


def _create_scorer(context: MatchContext) -> BaseMatcherService:
    """Factory: create a scorer by context with deferred imports."""
    if context == MatchContext.COMPANY_SEARCH:
        from services.matching.company_search_scorer import CompanySearchScorer
        return CompanySearchScorer()
    elif context == MatchContext.PROJECT_MATCHING:
        from services.matching.project_match_scorer import ProjectMatchScorer
        return ProjectMatchScorer()
    else:
        raise ValueError(f"Unknown match context: {context}")


def get_scorer(context: MatchContext | str) -> BaseMatcherService:
    """Get the scorer for ``context``, creating and loading it on first access."""
    context = MatchContext(context)
    if context not in _registry:
        _registry[context] = _create_scorer(context)
    scorer = _registry[context]
    scorer.ensure_loaded()
    return scorer


def preload() -> None:
    """Load every scorer (e.g. at startup)."""
    for context in MatchContext:
        get_scorer(context)


def clear() -> None:
    """Drop all scorers. Useful for testing."""
    _registry.clear()
