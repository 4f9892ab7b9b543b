"""Normalized subject: a candidate or a project, immutable for one scoring run."""

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict

UNSPECIFIED = "unspecified"


class SubjectKind(str, Enum):
    CANDIDATE = "candidate"
    PROJECT = "project"


class ExperienceLevel(IntEnum):
    """Shared ordinal scale for students and project requirements."""
    UNSPECIFIED = 0
    HIGH_SCHOOL = 1
    UNIVERSITY = 2
    ENTRY = 3
    INTERMEDIATE = 4
    ADVANCED = 5


class BehavioralSignals(BaseModel):
    """Activity counts and completeness for candidates.

    Counts are taken relative to the normalization time, so scoring
    itself never reads the clock.
    """
    model_config = ConfigDict(frozen=True)

    recent_queries_30d: int = 0
    recent_queries_7d: int = 0
    recent_applications_30d: int = 0
    profile_completeness: float = 0.0  # 0.0-1.0

    # Behavioral insight metrics, 0-100, absent when never computed
    learning_velocity: float | None = None
    interest_depth: float | None = None
    market_awareness: float | None = None
    career_ambition: float | None = None
    overall_engagement: float | None = None


class Subject(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: SubjectKind
    name: str = ""
    skills: frozenset[str] = frozenset()
    categories: frozenset[str] = frozenset()  # project category or candidate industries
    experience_level: ExperienceLevel = ExperienceLevel.UNSPECIFIED
    location: str = UNSPECIFIED
    remote: bool | None = None
    text: str = ""  # lower-cased bio/description for keyword alignment
    education: str = ""  # lower-cased major/university/education
    tags: frozenset[str] = frozenset()  # candidate goals and interests

    # Project-only structure
    team_size: int | None = None
    duration_months: int | None = None
    time_commitment: str = UNSPECIFIED

    signals: BehavioralSignals | None = None

    @property
    def has_location(self) -> bool:
        return self.location != UNSPECIFIED
