"""Prompt templates for Gemini insight enrichment."""

from models.schemas.intent import Intent
from models.schemas.match_result import MatchContext
from models.schemas.ranking import RankedMatch
from models.schemas.subject import Subject
from services.matching.insights import label_for


def _listing(values) -> str:
    return ", ".join(sorted(values)) or "none stated"


def _intent_section(intent: Intent, context: MatchContext) -> str:
    if context == MatchContext.COMPANY_SEARCH:
        return f"""COMPANY SEARCH:
- Role: {intent.role_type or "not stated"}
- Required skills: {_listing(intent.required_skills)}
- Preferred skills: {_listing(intent.preferred_skills)}
- Education: {_listing(intent.education_requirements)}
- Locations: {_listing(intent.location_preferences)}
- Industries: {_listing(intent.industries)}"""

    return f"""STUDENT PROFILE:
- Skills: {_listing(intent.skills)}
- Industries of interest: {_listing(intent.industries)}
- Career goals: {_listing(intent.career_goals)}
- Learning goals: {_listing(intent.learning_goals)}
- Interests: {_listing(intent.interests)}"""


def _subject_section(subject: Subject, context: MatchContext) -> str:
    heading = "CANDIDATE" if context == MatchContext.COMPANY_SEARCH else "PROJECT"
    section = f"""{heading}: {subject.name or subject.id}
- Skills: {_listing(subject.skills)}
- Categories: {_listing(subject.categories)}
- Location: {subject.location}"""
    if subject.tags:
        section += f"\n- Goals and interests: {_listing(subject.tags)}"
    return section + f"\n- About: {subject.text[:600]}"


def build_insight_prompt(
    match: RankedMatch,
    subject: Subject,
    intent: Intent,
    context: MatchContext,
) -> str:
    """Ask for a short explanation and approach. Scores are fixed context, not up for review."""
    scores = "\n".join(
        f"- {label_for(dim, context)}: {value:.0%}" for dim, value in match.breakdown.scored().items()
    )
    audience = "a hiring company" if context == MatchContext.COMPANY_SEARCH else "a student"

    return f"""You are an internship marketplace advisor writing for {audience}.

The match below has already been scored. Do not re-score it; explain it.

{_intent_section(intent, context)}

{_subject_section(subject, context)}

SCORES (overall {match.overall_score:.0%}, rank {match.rank}):
{scores}

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "explanation": "<2-3 sentences on why this is a {match.recommendation_level.lower()} match>",
  "recommended_approach": "<one concrete next step for {audience}>"
}}"""
