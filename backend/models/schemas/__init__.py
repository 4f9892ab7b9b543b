"""Pydantic contracts for the matching engine."""

from models.schemas.subject import BehavioralSignals, ExperienceLevel, Subject, SubjectKind
from models.schemas.intent import Intent, WorkPreferences
from models.schemas.match_result import MatchContext, MatchInsights, MatchResult, ScoreBreakdown
from models.schemas.ranking import CategorySummary, MatchingResponse, RankedMatch, RankedResults

__all__ = [
    "BehavioralSignals",
    "ExperienceLevel",
    "Subject",
    "SubjectKind",
    "Intent",
    "WorkPreferences",
    "MatchContext",
    "MatchInsights",
    "MatchResult",
    "ScoreBreakdown",
    "CategorySummary",
    "MatchingResponse",
    "RankedMatch",
    "RankedResults",
]
