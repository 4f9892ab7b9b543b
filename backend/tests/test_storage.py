"""Tests for the SQLAlchemy-backed subject store."""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from models.schemas.match_result import ScoreBreakdown
from models.schemas.ranking import RankedMatch
from services.exceptions import MatchingError, PoolRetrievalError
from storage.database import ApplicationRecord, MatchAuditRecord, SearchRecord, get_session
from storage.repository import SqlSubjectStore


class TestFetchCandidates:
    def test_only_completed_student_profiles(self, store, make_candidate):
        store.add_candidates([
            make_candidate("u1"),
            make_candidate("u2", profile_completed=False),
            make_candidate("u3", role="COMPANY"),
        ])
        rows = store.fetch_candidates(frozenset(), frozenset(), limit=10)
        assert [r["id"] for r in rows] == ["u1"]
        assert rows[0]["skills"] == ["Python", "SQL"]
        assert rows[0]["graduationYear"] == 2025

    def test_hints_order_but_never_exclude(self, store, make_candidate):
        store.add_candidates([
            make_candidate("u1", skills=["Figma"], location="Lisbon"),
            make_candidate("u2", skills=["React"], location="Lisbon"),
            make_candidate("u3", skills=["React"], location="Berlin"),
        ])
        rows = store.fetch_candidates(frozenset({"react"}), frozenset({"berlin"}), limit=10)
        assert [r["id"] for r in rows] == ["u3", "u2", "u1"]

    def test_limit(self, store, make_candidate):
        store.add_candidates([make_candidate(f"u{i}") for i in range(5)])
        assert len(store.fetch_candidates(frozenset(), frozenset(), limit=2)) == 2

    def test_no_limit_returns_every_row(self, store, make_candidate):
        store.add_candidates([make_candidate(f"u{i}") for i in range(5)])
        assert len(store.fetch_candidates(frozenset(), frozenset())) == 5


class TestFetchProjects:
    def test_live_only_with_category_and_exclusions(self, store, make_project):
        store.add_projects([
            make_project("p1"),
            make_project("p2", status="DRAFT"),
            make_project("p3", category="Design"),
            make_project("p4"),
        ])
        rows = store.fetch_projects(frozenset(), "Technology", frozenset({"p4"}), limit=10)
        assert [r["id"] for r in rows] == ["p1"]
        assert rows[0]["skillsRequired"] == ["Python", "SQL"]

    def test_applied_project_ids(self, store, make_candidate, make_project):
        store.add_candidates([make_candidate("u1")])
        store.add_projects([make_project("p1"), make_project("p2")])
        store.add_applications([ApplicationRecord(user_id="u1", project_id="p2")])
        assert store.applied_project_ids("u1") == frozenset({"p2"})
        assert store.applied_project_ids("nobody") == frozenset()


class TestRecordSearch:
    def test_persists_search_and_audit(self, store):
        match = RankedMatch(
            subject_id="u1",
            rank=1,
            overall_score=0.81,
            breakdown=ScoreBreakdown(skills=1.0, industry=0.5),
            group_scores={"profile": 0.9, "engagement": 0.7, "behavioral": 0.6},
        )
        search_id = store.record_search(
            "company-1", "python intern", {"requiredSkills": ["python"], "experienceLevel": "JUNIOR"},
            "FREE", 3, [match],
        )
        with get_session(store.engine) as session:
            search = session.get(SearchRecord, search_id)
            audits = session.scalars(select(MatchAuditRecord)).all()
        assert search.results_count == 1
        assert search.required_skills == ["python"]
        assert search.experience_level == "JUNIOR"
        assert len(audits) == 1
        assert audits[0].student_id == "u1"
        assert audits[0].profile_match_score == 0.9
        assert audits[0].breakdown == {"skills": 1.0, "industry": 0.5}


class TestStoreFailures:
    def test_read_failure_becomes_pool_retrieval_error(self, monkeypatch, store):
        def fail(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("connection refused"))

        monkeypatch.setattr("storage.repository.get_session", fail)
        with pytest.raises(PoolRetrievalError) as exc:
            store.fetch_candidates(frozenset(), frozenset(), limit=5)
        assert exc.value.details["operation"] == "fetch_candidates"

    def test_write_failure_becomes_matching_error(self, monkeypatch, store):
        def fail(*args, **kwargs):
            raise OperationalError("INSERT", {}, Exception("disk full"))

        monkeypatch.setattr("storage.repository.get_session", fail)
        with pytest.raises(MatchingError) as exc:
            store.record_search(None, "", {}, "FREE", 3, [])
        assert exc.value.error_code == "AUDIT_WRITE_FAILED"


class TestInMemoryStore:
    def test_in_memory_database_shared_across_sessions(self, make_candidate):
        store = SqlSubjectStore.from_url("sqlite://")
        store.add_candidates([make_candidate("u1")])
        assert [r["id"] for r in store.fetch_candidates(frozenset(), frozenset(), limit=5)] == ["u1"]
