"""Shared test configuration, pytest markers and fixtures."""

from datetime import datetime, timezone

import pytest

from services.matching import registry
from services.matching.taxonomy import load_taxonomy
from storage.database import CandidateRecord, ProjectRecord
from storage.repository import SqlSubjectStore

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: runs the full engine against a SQLite store"
    )


@pytest.fixture(autouse=True)
def _reset_registry():
    """Clear the scorer registry before each test."""
    registry.clear()
    yield
    registry.clear()


@pytest.fixture
def taxonomy():
    return load_taxonomy()


@pytest.fixture
def store(tmp_path):
    return SqlSubjectStore.from_url(f"sqlite:///{tmp_path / 'matching.db'}")


def make_candidate(id: str, **overrides) -> CandidateRecord:
    fields = dict(
        id=id,
        role="STUDENT",
        name=f"Student {id}",
        bio="Computer science student who likes building web apps",
        skills=["Python", "SQL"],
        major="Computer Science",
        university="State University",
        location="Berlin",
        graduation_year=2025,
        goal=["technical skills"],
        interests=["web development"],
        industries=["Technology"],
        profile_completed=True,
        chat_queries=[],
        application_sessions=[],
    )
    fields.update(overrides)
    return CandidateRecord(**fields)


def make_project(id: str, **overrides) -> ProjectRecord:
    fields = dict(
        id=id,
        company_id="company-1",
        title=f"Project {id}",
        description="Build a hands-on data dashboard with the analytics team",
        category="Technology",
        skills_required=["Python", "SQL"],
        experience_level="entry level",
        location="Remote",
        remote=True,
        team_size=3,
        duration_months=3,
        time_commitment="10-15 hours/week",
        status="LIVE",
    )
    fields.update(overrides)
    return ProjectRecord(**fields)


@pytest.fixture(name="make_candidate")
def _make_candidate_fixture():
    return make_candidate


@pytest.fixture(name="make_project")
def _make_project_fixture():
    return make_project
