"""Scorer output: one immutable result per (subject, intent) pair."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class MatchContext(str, Enum):
    COMPANY_SEARCH = "company_search"
    PROJECT_MATCHING = "project_matching"


class ScoreBreakdown(BaseModel):
    """Named sub-scores, each 0.0-1.0. ``None`` when a context does not use the dimension."""
    model_config = ConfigDict(frozen=True)

    skills: float | None = None
    industry: float | None = None  # industry/category or education alignment
    experience: float | None = None
    location: float | None = None
    preferences: float | None = None
    goals: float | None = None
    engagement: float | None = None
    response_likelihood: float | None = None
    behavioral: float | None = None

    def scored(self) -> dict[str, float]:
        """Only the dimensions this context computed."""
        return {k: v for k, v in self.model_dump().items() if v is not None}


class MatchInsights(BaseModel):
    model_config = ConfigDict(frozen=True)

    explanation: str = ""
    strengths: list[str] = []
    concerns: list[str] = []
    recommended_approach: str = ""
    source: str = "template"  # template | llm


class MatchResult(BaseModel):
    """Unranked score for one subject. Rank is assigned by the ranker."""
    model_config = ConfigDict(frozen=True)

    subject_id: str
    context: MatchContext
    overall_score: float = 0.0  # 0.0-1.0
    breakdown: ScoreBreakdown = ScoreBreakdown()
    group_scores: dict[str, float] = {}  # company search: profile/engagement/behavioral
    insights: MatchInsights = MatchInsights()
    recommendation_level: str = "POOR"  # EXCELLENT, GOOD, MODERATE, POOR
    categories: list[str] = []  # sorted subject categories for aggregation
