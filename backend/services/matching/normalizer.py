"""Profile normalizer: raw candidate/project records -> comparable Subjects.

Raw records are plain mappings as returned by the external store (camelCase
keys, snake_case accepted). Missing optional fields map to explicit
"unspecified" values; only a missing identity or a wrong-typed field is
rejected.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Mapping

from models.schemas.subject import (
    UNSPECIFIED,
    BehavioralSignals,
    ExperienceLevel,
    Subject,
    SubjectKind,
)
from services.exceptions import MalformedSubjectError
from services.matching.taxonomy import Taxonomy

logger = logging.getLogger(__name__)

# Fields counted towards candidate profile completeness
COMPLETENESS_FIELDS = ("name", "bio", "skills", "major", "university", "location", "goal", "interests")

_INSIGHT_METRICS = {
    "learning_velocity": "learningVelocity",
    "interest_depth": "interestDepth",
    "market_awareness": "marketAwareness",
    "career_ambition": "careerAmbition",
    "overall_engagement": "overallEngagement",
}

# Chat queries folded into the candidate's descriptive text
_RECENT_QUERY_TEXTS = 5


def normalize_term(value: str) -> str:
    """Lower-case, trim and collapse whitespace."""
    return re.sub(r"\s+", " ", value.lower().strip().rstrip(".,:;"))


def _get(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


def _terms(
    values: Any,
    field: str,
    subject_id: str,
    taxonomy: Taxonomy | None = None,
) -> frozenset[str]:
    if values is None:
        return frozenset()
    if isinstance(values, str) or not isinstance(values, Iterable):
        raise MalformedSubjectError(
            f"Field '{field}' must be a list of strings", field=field, subject_id=subject_id
        )
    terms: set[str] = set()
    for v in values:
        if not isinstance(v, str):
            raise MalformedSubjectError(
                f"Field '{field}' contains a non-string value", field=field, subject_id=subject_id
            )
        term = normalize_term(v)
        if not term:
            continue
        terms.add(taxonomy.canonical_skill(term) if taxonomy else term)
    return frozenset(terms)


def _text(value: Any, field: str, subject_id: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedSubjectError(f"Field '{field}' must be a string", field=field, subject_id=subject_id)
    return re.sub(r"\s+", " ", value.strip())


def _optional_int(value: Any, field: str, subject_id: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise MalformedSubjectError(f"Field '{field}' must be an integer", field=field, subject_id=subject_id)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise MalformedSubjectError(
            f"Field '{field}' must be an integer", field=field, subject_id=subject_id, cause=e
        ) from e


def _identity(raw: Any, kind: SubjectKind) -> str:
    if not isinstance(raw, Mapping):
        raise MalformedSubjectError(f"{kind.value} record must be a mapping")
    subject_id = raw.get("id")
    if subject_id is None or (isinstance(subject_id, str) and not subject_id.strip()):
        raise MalformedSubjectError(f"{kind.value} record is missing 'id'", field="id")
    if not isinstance(subject_id, (str, int)) or isinstance(subject_id, bool):
        raise MalformedSubjectError(f"{kind.value} 'id' must be a string", field="id")
    return str(subject_id).strip()


def _location(value: Any, subject_id: str) -> str:
    text = _text(value, "location", subject_id)
    return text.lower() if text else UNSPECIFIED


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str):
        try:
            ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def _count_since(entries: Any, key: str, cutoff: datetime) -> int:
    if not isinstance(entries, list):
        return 0
    count = 0
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        ts = _parse_timestamp(_get(entry, key))
        if ts is not None and ts >= cutoff:
            count += 1
    return count


def _recent_query_texts(queries: Any) -> list[str]:
    """Newest query texts first; entries without a readable timestamp sort last."""
    if not isinstance(queries, list):
        return []
    entries = [q for q in queries if isinstance(q, Mapping) and isinstance(q.get("query"), str)]
    oldest = datetime.min.replace(tzinfo=timezone.utc)
    entries.sort(key=lambda q: _parse_timestamp(q.get("timestamp")) or oldest, reverse=True)
    return [q["query"] for q in entries[:_RECENT_QUERY_TEXTS]]


def profile_completeness(raw: Mapping[str, Any]) -> float:
    """Fraction of COMPLETENESS_FIELDS that are present and non-empty."""
    completed = 0
    for name in COMPLETENESS_FIELDS:
        value = raw.get(name)
        if isinstance(value, (str, list, tuple, set, frozenset)) and len(value) > 0:
            completed += 1
    return completed / len(COMPLETENESS_FIELDS)


def _insight_metrics(raw: Mapping[str, Any]) -> dict[str, float]:
    insights = _get(raw, "behavioralInsights", "behavioral_insights")
    if isinstance(insights, list):
        insights = insights[0] if insights else None
    if not isinstance(insights, Mapping):
        return {}
    metrics: dict[str, float] = {}
    for attr, camel in _INSIGHT_METRICS.items():
        value = _get(insights, camel, attr)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            metrics[attr] = max(0.0, min(100.0, float(value)))
    return metrics


def _candidate_experience(
    raw: Mapping[str, Any], subject_id: str, taxonomy: Taxonomy, now: datetime
) -> ExperienceLevel:
    explicit = _text(_get(raw, "experienceLevel", "experience_level"), "experienceLevel", subject_id)
    level = taxonomy.experience_for_phrase(explicit)
    if level != ExperienceLevel.UNSPECIFIED:
        return level

    grad_year = _optional_int(_get(raw, "graduationYear", "graduation_year"), "graduationYear", subject_id)
    if grad_year is None:
        return ExperienceLevel.UNSPECIFIED
    years_since = now.year - grad_year
    if years_since >= 5:
        return ExperienceLevel.ADVANCED
    if years_since >= 2:
        return ExperienceLevel.INTERMEDIATE
    if years_since >= -1:
        return ExperienceLevel.ENTRY
    return ExperienceLevel.UNIVERSITY


def normalize_candidate(
    raw: Mapping[str, Any],
    taxonomy: Taxonomy,
    now: datetime | None = None,
) -> Subject:
    """Normalize a student/candidate record.

    Activity counts are taken relative to ``now`` (defaults to the current
    UTC time) so the resulting Subject carries no clock dependency.
    """
    subject_id = _identity(raw, SubjectKind.CANDIDATE)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    skills = _terms(raw.get("skills"), "skills", subject_id, taxonomy)
    industries = _terms(raw.get("industries"), "industries", subject_id)
    interests = _terms(raw.get("interests"), "interests", subject_id)
    goals = _terms(raw.get("goal"), "goal", subject_id)
    major = normalize_term(_text(raw.get("major"), "major", subject_id))
    university = _text(raw.get("university"), "university", subject_id)
    education = _text(raw.get("education"), "education", subject_id)
    bio = _text(raw.get("bio"), "bio", subject_id)

    queries = _get(raw, "chatQueries", "chat_queries", default=[])
    query_texts = _recent_query_texts(queries)
    sessions = _get(raw, "applicationSessions", "application_sessions", default=[])

    signals = BehavioralSignals(
        recent_queries_30d=_count_since(queries, "timestamp", now - timedelta(days=30)),
        recent_queries_7d=_count_since(queries, "timestamp", now - timedelta(days=7)),
        recent_applications_30d=_count_since(sessions, "startedAt", now - timedelta(days=30)),
        profile_completeness=profile_completeness(raw),
        **_insight_metrics(raw),
    )

    categories = set(industries)
    if major:
        categories.add(major)

    text_parts = [bio, major, " ".join(sorted(interests)), " ".join(sorted(goals)), *query_texts]
    return Subject(
        id=subject_id,
        kind=SubjectKind.CANDIDATE,
        name=_text(raw.get("name"), "name", subject_id),
        skills=skills,
        categories=frozenset(categories),
        experience_level=_candidate_experience(raw, subject_id, taxonomy, now),
        location=_location(raw.get("location"), subject_id),
        text=" ".join(p for p in text_parts if p).lower(),
        education=" ".join(p for p in (major, university, education) if p).lower(),
        tags=interests | goals,
        signals=signals,
    )


def normalize_project(raw: Mapping[str, Any], taxonomy: Taxonomy) -> Subject:
    """Normalize a live project record."""
    subject_id = _identity(raw, SubjectKind.PROJECT)

    title = _text(raw.get("title"), "title", subject_id)
    description = _text(raw.get("description"), "description", subject_id)
    requirements = _terms(raw.get("requirements"), "requirements", subject_id)
    deliverables = _terms(raw.get("deliverables"), "deliverables", subject_id)

    categories = {
        normalize_term(c)
        for c in (
            _text(raw.get("category"), "category", subject_id),
            _text(raw.get("subcategory"), "subcategory", subject_id),
        )
        if c
    }

    level_text = _text(_get(raw, "experienceLevel", "experience_level"), "experienceLevel", subject_id)
    remote = raw.get("remote")
    if remote is not None and not isinstance(remote, bool):
        raise MalformedSubjectError("Field 'remote' must be a boolean", field="remote", subject_id=subject_id)
    commitment = _text(_get(raw, "timeCommitment", "time_commitment"), "timeCommitment", subject_id)

    text_parts = [title, description, " ".join(sorted(requirements)), " ".join(sorted(deliverables))]
    return Subject(
        id=subject_id,
        kind=SubjectKind.PROJECT,
        name=title,
        skills=_terms(_get(raw, "skillsRequired", "skills_required"), "skillsRequired", subject_id, taxonomy),
        categories=frozenset(categories),
        experience_level=taxonomy.experience_for_phrase(level_text),
        location=_location(raw.get("location"), subject_id),
        remote=remote,
        text=" ".join(p for p in text_parts if p).lower(),
        team_size=_optional_int(_get(raw, "teamSize", "team_size"), "teamSize", subject_id),
        duration_months=_optional_int(_get(raw, "durationMonths", "duration_months"), "durationMonths", subject_id),
        time_commitment=commitment.lower() if commitment else UNSPECIFIED,
    )
