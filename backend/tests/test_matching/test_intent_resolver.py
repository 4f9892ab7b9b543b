"""Tests for the intent resolver."""

import pytest

from models.schemas.subject import ExperienceLevel
from services.exceptions import InvalidIntentError
from services.matching.intent_resolver import resolve_search_intent, resolve_student_profile


class TestResolveSearchIntent:
    def test_valid_intent(self, taxonomy):
        intent = resolve_search_intent(
            {
                "requiredSkills": ["Python", "JS"],
                "preferredSkills": ["Docker"],
                "experienceLevel": "senior",
                "locationPreferences": ["Berlin"],
                "industryAlignment": ["Fintech"],
                "roleType": "Backend Intern",
                "urgency": "HIGH",
            },
            taxonomy,
        )
        assert intent.required_skills == frozenset({"python", "javascript"})
        assert intent.preferred_skills == frozenset({"docker"})
        assert intent.experience_level == ExperienceLevel.ADVANCED
        assert intent.location_preferences == frozenset({"berlin"})
        assert intent.industries == frozenset({"fintech"})
        assert intent.role_type == "backend intern"

    def test_any_level_means_no_target(self, taxonomy):
        intent = resolve_search_intent({"requiredSkills": [], "experienceLevel": "ANY"}, taxonomy)
        assert intent.experience_level is None
        assert intent.required_skills == frozenset()

    def test_snake_case_keys_accepted(self, taxonomy):
        intent = resolve_search_intent(
            {"required_skills": ["sql"], "experience_level": "MID"}, taxonomy
        )
        assert intent.experience_level == ExperienceLevel.INTERMEDIATE

    def test_missing_required_key(self, taxonomy):
        with pytest.raises(InvalidIntentError) as exc:
            resolve_search_intent({"requiredSkills": ["python"]}, taxonomy)
        assert exc.value.user_message == "Please refine your search"
        assert exc.value.details["errors"]

    def test_unknown_level(self, taxonomy):
        with pytest.raises(InvalidIntentError):
            resolve_search_intent({"requiredSkills": [], "experienceLevel": "GURU"}, taxonomy)

    def test_wrong_type(self, taxonomy):
        with pytest.raises(InvalidIntentError):
            resolve_search_intent({"requiredSkills": "python", "experienceLevel": "MID"}, taxonomy)

    def test_not_a_mapping(self, taxonomy):
        with pytest.raises(InvalidIntentError):
            resolve_search_intent("find me a python dev", taxonomy)


class TestResolveStudentProfile:
    def test_minimal_profile(self, taxonomy):
        intent = resolve_student_profile({"skills": ["Python"]}, taxonomy)
        assert intent.skills == frozenset({"python"})
        assert intent.experience_level is None
        assert intent.work_preferences.is_empty

    @pytest.mark.parametrize("phrase,expected", [
        ("University Freshman", ExperienceLevel.UNIVERSITY),
        ("Recent graduate", ExperienceLevel.INTERMEDIATE),
        ("High school student", ExperienceLevel.HIGH_SCHOOL),
        ("something else", ExperienceLevel.UNIVERSITY),
    ])
    def test_experience_phrases(self, taxonomy, phrase, expected):
        intent = resolve_student_profile({"skills": [], "experienceLevel": phrase}, taxonomy)
        assert intent.experience_level == expected

    def test_work_preferences_and_goals(self, taxonomy):
        intent = resolve_student_profile(
            {
                "skills": ["figma"],
                "careerGoals": ["Portfolio projects"],
                "learningGoals": ["Technical skills"],
                "interests": ["Data Visualization"],
                "workPreferences": {"projectDuration": "3-4 Months", "workStyle": "Remote"},
            },
            taxonomy,
        )
        assert intent.goals == frozenset({"portfolio projects", "technical skills"})
        assert intent.interests == frozenset({"data visualization"})
        assert intent.work_preferences.project_duration == "3-4 months"
        assert intent.work_preferences.work_style == "remote"
        assert intent.work_preferences.team_size is None

    def test_missing_skills(self, taxonomy):
        with pytest.raises(InvalidIntentError):
            resolve_student_profile({"interests": ["design"]}, taxonomy)
