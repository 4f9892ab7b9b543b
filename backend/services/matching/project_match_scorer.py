"""Project matching scorer: a student's quiz profile against live projects.

Five dimensions, fixed weights:
    skills, industry (project category), experience, work preferences,
    goals (career and learning goals, blended with stated interests)

Location is folded into work preferences (work style / location prefs),
so ``breakdown.location`` stays unset in this context.
"""

import logging

from models.schemas.intent import Intent
from models.schemas.match_result import MatchContext, ScoreBreakdown
from models.schemas.subject import Subject
from services.matching import dimensions
from services.matching.base import BaseMatcherService

logger = logging.getLogger(__name__)

# Scoring weights (sum to 1.0)
W_SKILLS = 0.30
W_INDUSTRY = 0.20
W_EXPERIENCE = 0.20
W_PREFERENCES = 0.15
W_GOALS = 0.15

PROJECT_MATCHING_WEIGHTS = {
    "skills": W_SKILLS,
    "industry": W_INDUSTRY,
    "experience": W_EXPERIENCE,
    "preferences": W_PREFERENCES,
    "goals": W_GOALS,
}


class ProjectMatchScorer(BaseMatcherService):
    context = MatchContext.PROJECT_MATCHING
    weights = PROJECT_MATCHING_WEIGHTS

    def compute_breakdown(self, subject: Subject, intent: Intent) -> tuple[ScoreBreakdown, dict[str, float]]:
        taxonomy = self.taxonomy
        breakdown = ScoreBreakdown(
            skills=dimensions.skills_alignment(intent.skills, subject.skills, taxonomy),
            industry=dimensions.category_alignment(intent.industries, subject.categories, taxonomy),
            experience=dimensions.experience_match(intent.experience_level, subject.experience_level),
            preferences=dimensions.preferences_match(
                intent.work_preferences, intent.location_preferences, subject
            ),
            goals=self._goals(subject, intent),
        )
        return breakdown, {}

    def _goals(self, subject: Subject, intent: Intent) -> float:
        goals = dimensions.goal_alignment(intent.goals, subject.text, self.taxonomy)
        if not intent.interests:
            return goals
        # Stated interests share the goals slot equally with career and learning goals
        interests = dimensions.interest_alignment(sorted(intent.interests), subject.text)
        return (goals + interests) / 2
