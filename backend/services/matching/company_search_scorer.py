"""Company search scorer: student candidates against a structured search intent.

Three weighted groups, each a weighted mean of its dimensions:
    profile (40%):    skills, education/industry, experience, location
    engagement (35%): platform engagement, response likelihood
    behavioral (25%): behavioral insight metrics, interest alignment

The flattened per-dimension weights (group weight x inner weight) sum to
1.0 and are what the overall score is combined from.
"""

import logging

import numpy as np

from models.schemas.intent import Intent
from models.schemas.match_result import MatchContext, ScoreBreakdown
from models.schemas.subject import Subject
from services.matching import dimensions
from services.matching.base import BaseMatcherService, check_weights

logger = logging.getLogger(__name__)

COMPANY_SEARCH_GROUPS = {
    "profile": (0.40, {"skills": 0.40, "industry": 0.20, "experience": 0.20, "location": 0.20}),
    "engagement": (0.35, {"engagement": 0.70, "response_likelihood": 0.30}),
    "behavioral": (0.25, {"behavioral": 0.60, "goals": 0.40}),
}

COMPANY_SEARCH_WEIGHTS = {
    dim: group_weight * weight
    for group_weight, inner in COMPANY_SEARCH_GROUPS.values()
    for dim, weight in inner.items()
}


def _intent_terms(intent: Intent) -> list[str]:
    terms = [intent.role_type, *sorted(intent.required_skills), *sorted(intent.preferred_skills)]
    terms.extend(sorted(intent.industries))
    return [t for t in terms if t]


class CompanySearchScorer(BaseMatcherService):
    context = MatchContext.COMPANY_SEARCH
    weights = COMPANY_SEARCH_WEIGHTS

    def load(self) -> None:
        for name, (_, inner) in COMPANY_SEARCH_GROUPS.items():
            check_weights(inner, f"{name} group")
        check_weights({name: w for name, (w, _) in COMPANY_SEARCH_GROUPS.items()}, "group")
        super().load()

    def compute_breakdown(self, subject: Subject, intent: Intent) -> tuple[ScoreBreakdown, dict[str, float]]:
        taxonomy = self.taxonomy
        signals = subject.signals

        # Preferred skills only add to the required set when some skills are required
        required = intent.required_skills
        skills = dimensions.skills_alignment(subject.skills, required, taxonomy)
        if required and intent.preferred_skills:
            preferred = dimensions.skills_alignment(subject.skills, intent.preferred_skills, taxonomy)
            skills = 0.8 * skills + 0.2 * preferred

        industry = float(np.mean([
            dimensions.education_match(intent.education_requirements, subject.education),
            dimensions.category_alignment(intent.industries, subject.categories, taxonomy),
        ]))

        breakdown = ScoreBreakdown(
            skills=skills,
            industry=industry,
            experience=dimensions.experience_match(intent.experience_level, subject.experience_level),
            location=dimensions.location_match(
                intent.location_preferences, subject.location, subject.remote, subject.has_location
            ),
            engagement=dimensions.engagement_score(signals),
            response_likelihood=dimensions.response_likelihood(signals),
            behavioral=dimensions.behavioral_score(signals),
            goals=dimensions.interest_alignment(_intent_terms(intent), subject.text),
        )
        return breakdown, self.group_scores(breakdown)

    @staticmethod
    def group_scores(breakdown: ScoreBreakdown) -> dict[str, float]:
        scores = breakdown.scored()
        return {
            name: float(np.dot([scores[d] for d in inner], list(inner.values())))
            for name, (_, inner) in COMPANY_SEARCH_GROUPS.items()
        }
