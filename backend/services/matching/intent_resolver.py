"""Intent resolver: structured search intents and quiz profiles -> Intent.

Input comes already structured from upstream (the natural-language parser
for company searches, the discovery quiz for students). This module only
validates and canonicalises it; it never calls the parser.
"""

import logging
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from models.schemas.intent import Intent, WorkPreferences
from models.schemas.subject import ExperienceLevel
from services.exceptions import InvalidIntentError
from services.matching.normalizer import normalize_term
from services.matching.taxonomy import Taxonomy

logger = logging.getLogger(__name__)


class SearchIntentPayload(BaseModel):
    """Company search intent as emitted by the upstream parser."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    required_skills: list[str] = Field(alias="requiredSkills")
    experience_level: str = Field(alias="experienceLevel")
    preferred_skills: list[str] | None = Field(None, alias="preferredSkills")
    education_requirements: list[str] | None = Field(None, alias="educationRequirements")
    location_preferences: list[str] | None = Field(None, alias="locationPreferences")
    industry_alignment: list[str] | None = Field(None, alias="industryAlignment")
    role_type: str | None = Field(None, alias="roleType")


class WorkPreferencesPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    project_duration: str | None = Field(None, alias="projectDuration")
    team_size: str | None = Field(None, alias="teamSize")
    work_style: str | None = Field(None, alias="workStyle")
    time_commitment: str | None = Field(None, alias="timeCommitment")


class StudentProfilePayload(BaseModel):
    """Discovery-quiz answers for project matching."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    skills: list[str]
    experience_level: str | None = Field(None, alias="experienceLevel")
    interests: list[str] | None = None
    career_goals: list[str] | None = Field(None, alias="careerGoals")
    learning_goals: list[str] | None = Field(None, alias="learningGoals")
    industries: list[str] | None = None
    location_preferences: list[str] | None = Field(None, alias="locationPreferences")
    work_preferences: WorkPreferencesPayload | None = Field(None, alias="workPreferences")


def _terms(values: Iterable[str] | None, taxonomy: Taxonomy | None = None) -> frozenset[str]:
    if not values:
        return frozenset()
    terms = (normalize_term(v) for v in values)
    return frozenset(
        taxonomy.canonical_skill(t) if taxonomy else t
        for t in terms
        if t
    )


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = normalize_term(value)
    return cleaned or None


def _validate(payload_cls: type[BaseModel], raw: Any, label: str) -> Any:
    if not isinstance(raw, Mapping):
        raise InvalidIntentError(f"{label} must be a mapping, got {type(raw).__name__}")
    try:
        return payload_cls.model_validate(dict(raw))
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        logger.info("Rejected %s: %s", label, "; ".join(errors))
        raise InvalidIntentError(f"Invalid {label}", errors=errors, cause=e) from e


def resolve_search_intent(raw: Mapping[str, Any], taxonomy: Taxonomy) -> Intent:
    """Validate a company search intent and map it to the canonical Intent."""
    payload: SearchIntentPayload = _validate(SearchIntentPayload, raw, "search intent")

    try:
        level = taxonomy.search_level(payload.experience_level)
    except KeyError as e:
        allowed = ", ".join(sorted(taxonomy.search_levels))
        raise InvalidIntentError(
            f"Unknown experience level '{payload.experience_level}'",
            errors=[f"experienceLevel: expected one of {allowed}"],
            cause=e,
        ) from e

    return Intent(
        required_skills=_terms(payload.required_skills, taxonomy),
        preferred_skills=_terms(payload.preferred_skills, taxonomy),
        experience_level=level,
        education_requirements=_terms(payload.education_requirements),
        industries=_terms(payload.industry_alignment),
        location_preferences=_terms(payload.location_preferences),
        role_type=normalize_term(payload.role_type or ""),
    )


def resolve_student_profile(raw: Mapping[str, Any], taxonomy: Taxonomy) -> Intent:
    """Validate discovery-quiz answers and map them to the canonical Intent.

    An experience answer that names no known level falls back to
    UNIVERSITY; an absent answer means any level.
    """
    payload: StudentProfilePayload = _validate(StudentProfilePayload, raw, "student profile")

    level: ExperienceLevel | None = None
    level_text = _optional_text(payload.experience_level)
    if level_text:
        level = taxonomy.experience_for_phrase(level_text)
        if level == ExperienceLevel.UNSPECIFIED:
            level = ExperienceLevel.UNIVERSITY

    prefs = payload.work_preferences or WorkPreferencesPayload()
    return Intent(
        skills=_terms(payload.skills, taxonomy),
        experience_level=level,
        industries=_terms(payload.industries),
        location_preferences=_terms(payload.location_preferences),
        work_preferences=WorkPreferences(
            project_duration=_optional_text(prefs.project_duration),
            team_size=_optional_text(prefs.team_size),
            work_style=_optional_text(prefs.work_style),
            time_commitment=_optional_text(prefs.time_commitment),
        ),
        career_goals=_terms(payload.career_goals),
        learning_goals=_terms(payload.learning_goals),
        interests=_terms(payload.interests),
    )
