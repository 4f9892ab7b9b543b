"""Sub-score functions for the match scorer.

Each function is pure and returns a value in [0.0, 1.0]. When the intent
expresses no requirement for a dimension the function returns that
dimension's documented neutral default, so an unconstrained dimension
neither lifts nor sinks a subject relative to the others.
"""

import re

from models.schemas.intent import WorkPreferences
from models.schemas.subject import UNSPECIFIED, BehavioralSignals, ExperienceLevel, Subject
from services.matching.taxonomy import Taxonomy

# Neutral defaults
SKILLS_NEUTRAL = 0.8
INDUSTRY_NEUTRAL = 0.5
EDUCATION_NEUTRAL = 0.5
EXPERIENCE_UNKNOWN = 0.5
LOCATION_NEUTRAL = 0.7
LOCATION_UNKNOWN = 0.5
PREFERENCES_NEUTRAL = 0.7
GOALS_BASE = 0.5
ENGAGEMENT_NEUTRAL = 0.5
BEHAVIORAL_NEUTRAL = 0.5

# Skills
RELATED_SKILL_CREDIT = 0.5
SKILL_SURPLUS_STEP = 0.02
SKILL_SURPLUS_CAP = 0.10

# Category / industry
INDUSTRY_EXACT = 0.95
INDUSTRY_ADJACENT = 0.70
INDUSTRY_FLOOR = 0.30

# Experience: ordinal distance -> score; anything further scores EXPERIENCE_FAR
EXPERIENCE_SCHEDULE = {0: 1.0, 1: 0.85, 2: 0.6, 3: 0.4}
EXPERIENCE_FAR = 0.2

LOCATION_MATCH = 1.0
LOCATION_MISMATCH = 0.3

GOAL_HIT_BONUS = 0.1
INTEREST_MIN_WORD_LENGTH = 4

# Behavioral insight metric weights (values are 0-100)
BEHAVIORAL_WEIGHTS = {
    "learning_velocity": 0.25,
    "interest_depth": 0.25,
    "market_awareness": 0.20,
    "career_ambition": 0.20,
    "overall_engagement": 0.10,
}

_HOURS_RE = re.compile(r"(\d+)(?:\s*-\s*(\d+))?")
_WORD_RE = re.compile(r"[a-z0-9+#.]+")


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------

def skills_alignment(
    have: frozenset[str],
    required: frozenset[str],
    taxonomy: Taxonomy,
    neutral: float = SKILLS_NEUTRAL,
) -> float:
    """Exact fraction of required skills, plus half credit for related ones.

    A required skill that is missing but shares a taxonomy group with one of
    ``have`` counts as related. Extra skills beyond the required count add
    a small capped bonus.
    """
    if not required:
        return neutral

    exact = required & have
    related = 0
    for skill in required - exact:
        if have & taxonomy.related_skills(skill):
            related += 1

    base = (len(exact) + RELATED_SKILL_CREDIT * related) / len(required)
    surplus = min(SKILL_SURPLUS_CAP, max(0, len(have) - len(required)) * SKILL_SURPLUS_STEP)
    return _clamp(base + surplus)


# ---------------------------------------------------------------------------
# Category / industry / education
# ---------------------------------------------------------------------------

def _is_direct_category_match(preference: str, category: str) -> bool:
    if preference == category or preference in category or category in preference:
        return True
    first_word = preference.split(" ")[0]
    return len(first_word) > 2 and first_word in category


def category_alignment(
    preferred: frozenset[str],
    categories: frozenset[str],
    taxonomy: Taxonomy,
) -> float:
    """Exact category match > taxonomy-adjacent match > exploratory floor.

    A subject with no category data carries no signal and scores neutral.
    """
    if not preferred or not categories:
        return INDUSTRY_NEUTRAL

    for pref in preferred:
        for cat in categories:
            if _is_direct_category_match(pref, cat):
                return INDUSTRY_EXACT

    pref_groups = frozenset().union(*(taxonomy.industry_groups_for(p) for p in preferred))
    cat_groups = frozenset().union(*(taxonomy.industry_groups_for(c) for c in categories))
    if pref_groups & cat_groups:
        return INDUSTRY_ADJACENT
    return INDUSTRY_FLOOR


def education_match(requirements: frozenset[str], education: str) -> float:
    """Fraction of education requirements mentioned in the subject's education text."""
    if not requirements or not education:
        return EDUCATION_NEUTRAL
    matched = sum(1 for req in requirements if req in education)
    return matched / len(requirements)


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------

def experience_match(target: ExperienceLevel | None, level: ExperienceLevel) -> float:
    """Score ordinal distance on a fixed schedule. ``None`` target means any level."""
    if target is None:
        return 1.0
    if level == ExperienceLevel.UNSPECIFIED or target == ExperienceLevel.UNSPECIFIED:
        return EXPERIENCE_UNKNOWN
    return EXPERIENCE_SCHEDULE.get(abs(int(target) - int(level)), EXPERIENCE_FAR)


# ---------------------------------------------------------------------------
# Location and work preferences
# ---------------------------------------------------------------------------

def location_match(
    preferences: frozenset[str],
    location: str,
    remote: bool | None = None,
    has_location: bool = True,
) -> float:
    if not preferences:
        return LOCATION_NEUTRAL
    if remote is True and "remote" in preferences:
        return LOCATION_MATCH
    if not has_location:
        return LOCATION_UNKNOWN
    if any(pref in location or location in pref for pref in preferences):
        return LOCATION_MATCH
    return LOCATION_MISMATCH


def extract_hours(text: str) -> float | None:
    """First number or range in ``text``; a range yields its midpoint."""
    match = _HOURS_RE.search(text)
    if not match:
        return None
    low = int(match.group(1))
    return (low + int(match.group(2))) / 2 if match.group(2) else float(low)


def duration_fit(preference: str, months: int | None) -> float:
    if months is None:
        return PREFERENCES_NEUTRAL
    if "1-2" in preference and months <= 2:
        return 1.0
    if "3-4" in preference and 3 <= months <= 4:
        return 1.0
    if "5-6" in preference and 5 <= months <= 6:
        return 1.0
    if "flexible" in preference:
        return 0.85
    # Three months is the typical internship baseline
    return max(0.4, 1.0 - abs(months - 3) * 0.2)


def team_size_fit(preference: str, team_size: int | None) -> float:
    if team_size is None:
        return PREFERENCES_NEUTRAL
    if "solo" in preference and team_size == 1:
        return 1.0
    if "small" in preference and 2 <= team_size <= 3:
        return 1.0
    if "medium" in preference and 4 <= team_size <= 6:
        return 1.0
    if "large" in preference and team_size >= 7:
        return 1.0
    if "no preference" in preference:
        return 0.8
    return 0.6


def time_commitment_fit(preference: str, commitment: str, has_commitment: bool = True) -> float:
    if not has_commitment:
        return PREFERENCES_NEUTRAL
    pref_hours = extract_hours(preference)
    proj_hours = extract_hours(commitment)
    if pref_hours is not None and proj_hours is not None:
        return max(0.4, 1.0 - abs(pref_hours - proj_hours) * 0.03)
    return 0.6


def work_style_fit(work_style: str | None, location_preferences: frozenset[str], subject: Subject) -> float:
    style = work_style or ""
    if "remote" in style:
        if subject.remote is None:
            return LOCATION_UNKNOWN
        return LOCATION_MATCH if subject.remote else LOCATION_MISMATCH
    if "flexible" in style or "no preference" in style:
        return 0.85
    return location_match(location_preferences, subject.location, subject.remote, subject.has_location)


def preferences_match(
    prefs: WorkPreferences,
    location_preferences: frozenset[str],
    subject: Subject,
) -> float:
    """Mean fit over the preferences the student actually stated."""
    factors: list[float] = []
    if prefs.project_duration:
        factors.append(duration_fit(prefs.project_duration, subject.duration_months))
    if prefs.team_size:
        factors.append(team_size_fit(prefs.team_size, subject.team_size))
    if prefs.time_commitment:
        factors.append(
            time_commitment_fit(
                prefs.time_commitment,
                subject.time_commitment,
                has_commitment=subject.time_commitment != UNSPECIFIED,
            )
        )
    if prefs.work_style or location_preferences:
        factors.append(work_style_fit(prefs.work_style, location_preferences, subject))
    if not factors:
        return PREFERENCES_NEUTRAL
    return _clamp(sum(factors) / len(factors))


# ---------------------------------------------------------------------------
# Goals and interests
# ---------------------------------------------------------------------------

def goal_alignment(goals: frozenset[str], text: str, taxonomy: Taxonomy) -> float:
    """Neutral base plus a bonus for each goal whose keyword family appears in ``text``."""
    score = GOALS_BASE
    for goal in sorted(goals):
        for keyword, variants in taxonomy.goal_keywords.items():
            if keyword in goal and any(v in text for v in variants):
                score += GOAL_HIT_BONUS
    return min(1.0, score)


def interest_alignment(intent_terms: list[str], subject_text: str) -> float:
    """Neutral base plus a bonus per distinct intent word found in the subject's text."""
    words = {
        w for term in intent_terms for w in _WORD_RE.findall(term.lower())
        if len(w) >= INTEREST_MIN_WORD_LENGTH
    }
    hits = sum(1 for w in words if w in subject_text)
    return min(1.0, GOALS_BASE + hits * GOAL_HIT_BONUS)


# ---------------------------------------------------------------------------
# Engagement and behavior (candidates only)
# ---------------------------------------------------------------------------

def engagement_score(signals: BehavioralSignals | None) -> float:
    """Recent chat activity, recent applications and profile completeness."""
    if signals is None:
        return ENGAGEMENT_NEUTRAL
    score = 0.5
    score += min(signals.recent_queries_30d / 10, 1.0) * 0.4
    score += min(signals.recent_applications_30d / 5, 1.0) * 0.3
    score += signals.profile_completeness * 0.3
    return _clamp(score)


def response_likelihood(signals: BehavioralSignals | None) -> float:
    if signals is None:
        return ENGAGEMENT_NEUTRAL
    likelihood = 0.5
    likelihood += min(signals.recent_queries_7d / 10, 0.3)
    likelihood += signals.profile_completeness * 0.2
    return _clamp(likelihood)


def behavioral_score(signals: BehavioralSignals | None) -> float:
    """Weighted behavioral insight metrics. Missing metrics count as mid-scale."""
    if signals is None:
        return BEHAVIORAL_NEUTRAL
    values = {name: getattr(signals, name) for name in BEHAVIORAL_WEIGHTS}
    if all(v is None for v in values.values()):
        return BEHAVIORAL_NEUTRAL
    score = sum(
        ((50.0 if v is None else v) / 100) * BEHAVIORAL_WEIGHTS[name]
        for name, v in values.items()
    )
    return _clamp(score)
