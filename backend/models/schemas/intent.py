"""Canonical intent: what the searching party wants, in comparison vocabulary."""

from pydantic import BaseModel, ConfigDict

from models.schemas.subject import ExperienceLevel


class WorkPreferences(BaseModel):
    """Discovery-quiz work preferences. ``None`` means not answered."""
    model_config = ConfigDict(frozen=True)

    project_duration: str | None = None  # e.g. "3-4 months", "flexible"
    team_size: str | None = None  # solo, small, medium, large, no preference
    work_style: str | None = None  # remote, hybrid, in-person
    time_commitment: str | None = None  # e.g. "10-15 hours/week"

    @property
    def is_empty(self) -> bool:
        return not any((self.project_duration, self.team_size, self.work_style, self.time_commitment))


class Intent(BaseModel):
    """Structured company search intent or student preference profile.

    All string sets are lower-cased and trimmed. ``experience_level`` of
    ``None`` means any level is acceptable.
    """
    model_config = ConfigDict(frozen=True)

    required_skills: frozenset[str] = frozenset()
    preferred_skills: frozenset[str] = frozenset()
    skills: frozenset[str] = frozenset()  # the student's own skills (project matching)
    experience_level: ExperienceLevel | None = None
    education_requirements: frozenset[str] = frozenset()
    industries: frozenset[str] = frozenset()
    location_preferences: frozenset[str] = frozenset()
    work_preferences: WorkPreferences = WorkPreferences()
    career_goals: frozenset[str] = frozenset()
    learning_goals: frozenset[str] = frozenset()
    interests: frozenset[str] = frozenset()
    role_type: str = ""

    @property
    def goals(self) -> frozenset[str]:
        return self.career_goals | self.learning_goals
