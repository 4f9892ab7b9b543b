"""Deterministic match insights built purely from the numeric breakdown.

This is the mandatory offline path: LLM enrichment may later replace the
explanation and recommended approach, but strengths and concerns always
come from here.
"""

from models.schemas.match_result import MatchContext, MatchInsights, ScoreBreakdown

STRENGTH_THRESHOLD = 0.7
CONCERN_THRESHOLD = 0.5
MODERATE_THRESHOLD = 0.5

# Recommendation level cut-offs on the 0-1 overall score
LEVEL_THRESHOLDS = (
    (0.80, "EXCELLENT"),
    (0.65, "GOOD"),
    (0.45, "MODERATE"),
)

DIMENSION_LABELS = {
    "skills": "Skills alignment",
    "industry": "Industry alignment",
    "experience": "Experience level",
    "location": "Location",
    "preferences": "Work preferences",
    "goals": "Goal alignment",
    "engagement": "Platform engagement",
    "response_likelihood": "Response likelihood",
    "behavioral": "Behavioral profile",
}

_COMPANY_LABELS = {
    "industry": "Education and industry fit",
    "goals": "Interest alignment",
}

_STRENGTHS = {
    MatchContext.PROJECT_MATCHING: {
        "skills": "Strong technical fit",
        "industry": "Project category matches your interests",
        "experience": "Project complexity matches your experience level",
        "preferences": "Work preferences align with project structure and timeline",
        "goals": "Supports your career goals",
    },
    MatchContext.COMPANY_SEARCH: {
        "skills": "Covers most of the required skills",
        "industry": "Education and industry background fit the role",
        "experience": "Experience level fits the role",
        "location": "Location matches your preferences",
        "goals": "Interests align with the role",
        "engagement": "Highly active on the platform",
        "response_likelihood": "Likely to respond to outreach",
        "behavioral": "Strong learning and career drive",
    },
}

_CONCERNS = {
    MatchContext.PROJECT_MATCHING: {
        "skills": "Significant learning curve for required skills",
        "industry": "Outside your preferred industries",
        "experience": "May be challenging given experience level",
        "preferences": "Schedule or work style may not align perfectly",
        "goals": "Limited overlap with your stated goals",
    },
    MatchContext.COMPANY_SEARCH: {
        "skills": "Limited skill overlap",
        "industry": "Education or industry background differs from the brief",
        "experience": "Experience level differs from the target",
        "location": "Location outside your preferences",
        "goals": "Few shared interests with the role",
        "engagement": "Low recent platform activity",
        "response_likelihood": "May be slow to respond",
        "behavioral": "Limited behavioral signal",
    },
}


def recommendation_level(overall: float) -> str:
    for threshold, level in LEVEL_THRESHOLDS:
        if overall >= threshold:
            return level
    return "POOR"


def rating(score: float) -> str:
    if score >= STRENGTH_THRESHOLD:
        return "strong"
    if score >= MODERATE_THRESHOLD:
        return "moderate"
    return "weak"


def label_for(dimension: str, context: MatchContext) -> str:
    if context == MatchContext.COMPANY_SEARCH and dimension in _COMPANY_LABELS:
        return _COMPANY_LABELS[dimension]
    return DIMENSION_LABELS[dimension]


def _build_strengths(scores: dict[str, float], context: MatchContext) -> list[str]:
    phrases = _STRENGTHS[context]
    return [phrases[dim] for dim, score in scores.items() if score >= STRENGTH_THRESHOLD and dim in phrases]


def _build_concerns(scores: dict[str, float], context: MatchContext) -> list[str]:
    phrases = _CONCERNS[context]
    return [phrases[dim] for dim, score in scores.items() if score < CONCERN_THRESHOLD and dim in phrases]


def _build_explanation(scores: dict[str, float], overall: float, context: MatchContext) -> str:
    level = recommendation_level(overall).lower()
    parts = [f"Overall match {overall:.0%} ({level})."]
    parts.extend(f"{label_for(dim, context)}: {rating(score)}." for dim, score in scores.items())
    return " ".join(parts)


def _build_approach(scores: dict[str, float], overall: float, context: MatchContext) -> str:
    skills = scores.get("skills", 0.0)
    if context == MatchContext.COMPANY_SEARCH:
        if overall >= 0.8:
            return "Reach out promptly with a role-specific message; this candidate fits the brief closely."
        if skills < CONCERN_THRESHOLD:
            return "Lead with the learning opportunities in the role, since the skill overlap is partial."
        if scores.get("engagement", 1.0) < CONCERN_THRESHOLD:
            return "Send a concise, personalised note; recent platform activity is low."
        return "Reach out with a personalized message highlighting specific projects that match their interests."

    if overall >= 0.8:
        return "Apply soon: this project matches your profile closely."
    if skills < CONCERN_THRESHOLD:
        return "Apply if you are keen to learn the required skills, and mention related experience in your application."
    if scores.get("preferences", 1.0) < CONCERN_THRESHOLD:
        return "Check the schedule and team setup before applying."
    return "Tailor your application to the project's goals and deliverables."


def build_insights(breakdown: ScoreBreakdown, overall: float, context: MatchContext) -> MatchInsights:
    """Template insights: strengths >= 0.7, concerns < 0.5, fixed dimension order."""
    scores = breakdown.scored()
    return MatchInsights(
        explanation=_build_explanation(scores, overall, context),
        strengths=_build_strengths(scores, context),
        concerns=_build_concerns(scores, context),
        recommended_approach=_build_approach(scores, overall, context),
        source="template",
    )
