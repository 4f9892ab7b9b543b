"""Ranker output: the contract consumed by the API/UI layer."""

from pydantic import BaseModel

from models.schemas.match_result import MatchContext, MatchInsights, ScoreBreakdown


class RankedMatch(BaseModel):
    subject_id: str
    rank: int  # 1-based
    overall_score: float
    breakdown: ScoreBreakdown = ScoreBreakdown()
    group_scores: dict[str, float] = {}
    insights: MatchInsights = MatchInsights()
    recommendation_level: str = "POOR"


class CategorySummary(BaseModel):
    category: str
    count: int = 0
    avg_score: float = 0.0


class RankedResults(BaseModel):
    results: list[RankedMatch] = []
    category_breakdown: list[CategorySummary] = []
    reason: str | None = None  # set when results is empty


class MatchingResponse(BaseModel):
    context: MatchContext
    tier: str
    results: list[RankedMatch] = []
    category_breakdown: list[CategorySummary] = []
    total_evaluated: int = 0
    reason: str | None = None
    search_id: str | None = None
