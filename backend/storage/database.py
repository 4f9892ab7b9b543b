"""
Database schema and connection management for the external store.

SQLAlchemy ORM over any SQLAlchemy URL (SQLite by default). List-valued
profile attributes are stored as JSON columns.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CandidateRecord(Base):
    """Platform user. Only completed STUDENT profiles are matchable."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    role = Column(String, nullable=False, default="STUDENT")  # STUDENT, COMPANY, ADMIN
    name = Column(String)
    bio = Column(Text)
    skills = Column(JSON, default=list)
    major = Column(String)
    university = Column(String)
    education = Column(String)
    location = Column(String)
    graduation_year = Column(Integer)
    experience_level = Column(String)
    goal = Column(JSON, default=list)
    interests = Column(JSON, default=list)
    industries = Column(JSON, default=list)
    profile_completed = Column(Boolean, nullable=False, default=False)
    chat_queries = Column(JSON, default=list)  # [{"query": ..., "timestamp": iso}]
    application_sessions = Column(JSON, default=list)  # [{"startedAt": iso}]
    behavioral_insights = Column(JSON)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_raw(self) -> dict[str, Any]:
        """Raw mapping in the shape the profile normalizer reads."""
        return {
            "id": self.id,
            "name": self.name,
            "bio": self.bio,
            "skills": self.skills,
            "major": self.major,
            "university": self.university,
            "education": self.education,
            "location": self.location,
            "graduationYear": self.graduation_year,
            "experienceLevel": self.experience_level,
            "goal": self.goal,
            "interests": self.interests,
            "industries": self.industries,
            "chatQueries": self.chat_queries,
            "applicationSessions": self.application_sessions,
            "behavioralInsights": self.behavioral_insights,
        }


class ProjectRecord(Base):
    """Company project. Only LIVE projects are matchable."""

    __tablename__ = "projects"

    id = Column(String, primary_key=True)
    company_id = Column(String)
    title = Column(String, nullable=False)
    description = Column(Text)
    category = Column(String)
    subcategory = Column(String)
    skills_required = Column(JSON, default=list)
    requirements = Column(JSON, default=list)
    deliverables = Column(JSON, default=list)
    experience_level = Column(String)
    location = Column(String)
    remote = Column(Boolean)
    team_size = Column(Integer)
    duration_months = Column(Integer)
    time_commitment = Column(String)
    status = Column(String, nullable=False, default="DRAFT")  # DRAFT, LIVE, CLOSED
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_raw(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "subcategory": self.subcategory,
            "skillsRequired": self.skills_required,
            "requirements": self.requirements,
            "deliverables": self.deliverables,
            "experienceLevel": self.experience_level,
            "location": self.location,
            "remote": self.remote,
            "teamSize": self.team_size,
            "durationMonths": self.duration_months,
            "timeCommitment": self.time_commitment,
        }


class ApplicationRecord(Base):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    project_id = Column(String, ForeignKey("projects.id"), nullable=False)
    status = Column(String, nullable=False, default="PENDING")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class SearchRecord(Base):
    """One company talent search and its resolved intent."""

    __tablename__ = "company_searches"

    id = Column(String, primary_key=True)  # uuid4 hex
    company_id = Column(String)
    search_prompt = Column(Text)
    parsed_intent = Column(JSON)
    required_skills = Column(JSON, default=list)
    experience_level = Column(String)
    tier = Column(String, nullable=False)
    max_results = Column(Integer, nullable=False)
    results_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class MatchAuditRecord(Base):
    """A ranked match returned for a company search."""

    __tablename__ = "ai_matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    search_id = Column(String, ForeignKey("company_searches.id"), nullable=False, index=True)
    student_id = Column(String, nullable=False)
    rank = Column(Integer, nullable=False)
    overall_score = Column(Float, nullable=False)
    profile_match_score = Column(Float)
    engagement_score = Column(Float)
    behavioral_score = Column(Float)
    breakdown = Column(JSON)
    explanation = Column(Text)
    strengths = Column(JSON, default=list)
    concerns = Column(JSON, default=list)
    recommended_approach = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


def create_db_engine(database_url: str) -> Engine:
    """
    Create an engine for ``database_url``.

    File-backed SQLite databases get their parent directory created; an
    in-memory SQLite database is shared across sessions through one
    connection.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            return create_engine(database_url)
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, pool_pre_ping=True)


def init_database(database_url: str) -> Engine:
    """
    Initialize database and create tables.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        The engine the tables were created on
    """
    engine = create_db_engine(database_url)
    Base.metadata.create_all(engine)
    return engine


def get_session(engine: Engine) -> Session:
    """
    Get database session.

    Args:
        engine: Engine returned by init_database

    Returns:
        SQLAlchemy session
    """
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    return factory()
