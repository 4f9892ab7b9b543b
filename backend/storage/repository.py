"""Subject store: read access to candidates/projects plus the search audit trail."""

import logging
import uuid
from typing import Any, Iterable, Mapping, Protocol

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from models.schemas.ranking import RankedMatch
from services.exceptions import MatchingError, PoolRetrievalError
from storage.database import (
    ApplicationRecord,
    CandidateRecord,
    MatchAuditRecord,
    ProjectRecord,
    SearchRecord,
    get_session,
    init_database,
)

logger = logging.getLogger(__name__)


class SubjectStore(Protocol):
    """What the matching engine needs from the external store."""

    def fetch_candidates(
        self, skill_hint: frozenset[str], location_hint: frozenset[str], limit: int | None = None
    ) -> list[Mapping[str, Any]]: ...

    def fetch_projects(
        self,
        skill_hint: frozenset[str],
        category: str | None,
        exclude_ids: frozenset[str],
        limit: int | None = None,
    ) -> list[Mapping[str, Any]]: ...

    def applied_project_ids(self, user_id: str) -> frozenset[str]: ...

    def record_search(
        self,
        company_id: str | None,
        prompt: str,
        intent: Mapping[str, Any],
        tier: str,
        max_results: int,
        matches: list[RankedMatch],
    ) -> str: ...


def _lowered(values: Any) -> set[str]:
    if not isinstance(values, list):
        return set()
    return {v.lower().strip() for v in values if isinstance(v, str)}


def _hint_overlap(raw: Mapping[str, Any], skill_key: str, skill_hint: frozenset[str],
                  location_hint: frozenset[str] = frozenset()) -> int:
    overlap = len(_lowered(raw.get(skill_key)) & skill_hint)
    location = raw.get("location")
    if location_hint and isinstance(location, str):
        loc = location.lower()
        if any(hint in loc for hint in location_hint):
            overlap += 1
    return overlap


def order_by_hints(rows: list[Mapping[str, Any]], key) -> list[Mapping[str, Any]]:
    """Rows with more hint overlap first. Stable, never drops a row."""
    return sorted(rows, key=lambda r: -key(r))


class SqlSubjectStore:
    """SubjectStore backed by the SQLAlchemy models in ``storage.database``."""

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_url(cls, database_url: str) -> "SqlSubjectStore":
        return cls(init_database(database_url))

    def fetch_candidates(
        self, skill_hint: frozenset[str], location_hint: frozenset[str], limit: int | None = None
    ) -> list[Mapping[str, Any]]:
        """Completed student profiles, hint-ordered. ``limit=None`` returns every row."""
        stmt = (
            select(CandidateRecord)
            .where(CandidateRecord.role == "STUDENT", CandidateRecord.profile_completed.is_(True))
            .order_by(CandidateRecord.created_at, CandidateRecord.id)
        )
        try:
            with get_session(self.engine) as session:
                rows = [r.to_raw() for r in session.scalars(stmt)]
        except SQLAlchemyError as e:
            raise PoolRetrievalError("Failed to fetch candidates", operation="fetch_candidates", cause=e) from e

        ordered = order_by_hints(rows, lambda r: _hint_overlap(r, "skills", skill_hint, location_hint))
        logger.info("Fetched %d candidates (limit %s)", len(rows), limit)
        return ordered if limit is None else ordered[:limit]

    def fetch_projects(
        self,
        skill_hint: frozenset[str],
        category: str | None,
        exclude_ids: frozenset[str],
        limit: int | None = None,
    ) -> list[Mapping[str, Any]]:
        stmt = select(ProjectRecord).where(ProjectRecord.status == "LIVE")
        if category:
            stmt = stmt.where(ProjectRecord.category == category)
        if exclude_ids:
            stmt = stmt.where(ProjectRecord.id.not_in(list(exclude_ids)))
        stmt = stmt.order_by(ProjectRecord.created_at.desc(), ProjectRecord.id)
        try:
            with get_session(self.engine) as session:
                rows = [r.to_raw() for r in session.scalars(stmt)]
        except SQLAlchemyError as e:
            raise PoolRetrievalError("Failed to fetch projects", operation="fetch_projects", cause=e) from e

        ordered = order_by_hints(rows, lambda r: _hint_overlap(r, "skillsRequired", skill_hint))
        logger.info("Fetched %d live projects (limit %s)", len(rows), limit)
        return ordered if limit is None else ordered[:limit]

    def applied_project_ids(self, user_id: str) -> frozenset[str]:
        stmt = select(ApplicationRecord.project_id).where(ApplicationRecord.user_id == user_id)
        try:
            with get_session(self.engine) as session:
                return frozenset(session.scalars(stmt))
        except SQLAlchemyError as e:
            raise PoolRetrievalError(
                "Failed to fetch applications", operation="applied_project_ids", cause=e
            ) from e

    def record_search(
        self,
        company_id: str | None,
        prompt: str,
        intent: Mapping[str, Any],
        tier: str,
        max_results: int,
        matches: list[RankedMatch],
    ) -> str:
        """Persist the search and its ranked matches. Returns the search id."""
        search_id = uuid.uuid4().hex
        search = SearchRecord(
            id=search_id,
            company_id=company_id,
            search_prompt=prompt,
            parsed_intent=dict(intent),
            required_skills=list(intent.get("requiredSkills") or intent.get("required_skills") or []),
            experience_level=intent.get("experienceLevel") or intent.get("experience_level"),
            tier=tier,
            max_results=max_results,
            results_count=len(matches),
        )
        audits = [_audit_record(search_id, m) for m in matches]
        try:
            with get_session(self.engine) as session:
                session.add(search)
                session.flush()
                session.add_all(audits)
                session.commit()
        except SQLAlchemyError as e:
            raise MatchingError("Failed to record search", error_code="AUDIT_WRITE_FAILED", cause=e) from e
        return search_id

    # -- seeding helpers ------------------------------------------------------

    def add_candidates(self, records: Iterable[CandidateRecord]) -> None:
        self._add_all(records)

    def add_projects(self, records: Iterable[ProjectRecord]) -> None:
        self._add_all(records)

    def add_applications(self, records: Iterable[ApplicationRecord]) -> None:
        self._add_all(records)

    def _add_all(self, records: Iterable[Any]) -> None:
        with get_session(self.engine) as session:
            session.add_all(list(records))
            session.commit()


def _audit_record(search_id: str, match: RankedMatch) -> MatchAuditRecord:
    return MatchAuditRecord(
        search_id=search_id,
        student_id=match.subject_id,
        rank=match.rank,
        overall_score=match.overall_score,
        profile_match_score=match.group_scores.get("profile"),
        engagement_score=match.group_scores.get("engagement"),
        behavioral_score=match.group_scores.get("behavioral"),
        breakdown=match.breakdown.scored(),
        explanation=match.insights.explanation,
        strengths=list(match.insights.strengths),
        concerns=list(match.insights.concerns),
        recommended_approach=match.insights.recommended_approach,
    )
