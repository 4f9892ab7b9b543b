"""Pool builder: fetch and normalize the subjects worth scoring for one query.

Only hard filters live in the store query (matchable role/status, explicit
category, already-applied projects). Skill and location hints change the
order rows come back in, never membership. The store returns every
matching row and the pool ceiling counts only rows that normalize, so
malformed rows never take the place of valid subjects.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Mapping

from models.schemas.intent import Intent
from models.schemas.subject import Subject
from services.exceptions import MalformedSubjectError, PoolRetrievalError
from services.matching.normalizer import normalize_candidate, normalize_project
from services.matching.taxonomy import Taxonomy
from services.matching.tiers import TierPolicy, pool_ceiling
from storage.repository import SubjectStore

logger = logging.getLogger(__name__)


class PoolBuilder:
    def __init__(self, store: SubjectStore, taxonomy: Taxonomy, now: datetime | None = None):
        self.store = store
        self.taxonomy = taxonomy
        self.now = now

    def candidate_pool(self, intent: Intent, policy: TierPolicy) -> list[Subject]:
        """Completed student profiles, hint-ordered, capped at the pool ceiling."""
        limit = pool_ceiling(policy)
        skill_hint = intent.required_skills | intent.preferred_skills
        rows = self._fetch(
            "fetch_candidates",
            lambda: self.store.fetch_candidates(skill_hint, intent.location_preferences, limit=None),
        )
        return self._normalize(
            rows, lambda raw: normalize_candidate(raw, self.taxonomy, now=self.now), limit
        )

    def project_pool(
        self,
        intent: Intent,
        student_id: str | None,
        policy: TierPolicy,
        category: str | None = None,
        include_applied: bool = False,
    ) -> list[Subject]:
        """Live projects, minus ones the student already applied to unless asked otherwise."""
        limit = pool_ceiling(policy)
        exclude: frozenset[str] = frozenset()
        if student_id and not include_applied:
            exclude = self._fetch("applied_project_ids", lambda: self.store.applied_project_ids(student_id))
        rows = self._fetch(
            "fetch_projects",
            lambda: self.store.fetch_projects(intent.skills, category, frozenset(exclude), limit=None),
        )
        return self._normalize(rows, lambda raw: normalize_project(raw, self.taxonomy), limit)

    @staticmethod
    def _fetch(operation: str, call: Callable[[], Any]) -> Any:
        try:
            return call()
        except PoolRetrievalError:
            raise
        except OSError as e:
            raise PoolRetrievalError(f"Store call {operation} failed: {e}", operation=operation, cause=e) from e

    @staticmethod
    def _normalize(
        rows: list[Mapping[str, Any]],
        normalize: Callable[[Mapping[str, Any]], Subject],
        limit: int,
    ) -> list[Subject]:
        subjects: list[Subject] = []
        seen: set[str] = set()
        skipped = 0
        for raw in rows:
            try:
                subject = normalize(raw)
            except MalformedSubjectError as e:
                skipped += 1
                logger.warning("Skipping malformed store row: %s", e.to_dict())
                continue
            if subject.id in seen:
                continue
            seen.add(subject.id)
            subjects.append(subject)
            if len(subjects) >= limit:
                break
        if skipped:
            logger.warning("Skipped %d malformed rows", skipped)
        logger.info("Pool built: %d subjects (ceiling %d)", len(subjects), limit)
        return subjects
