"""Read-only comparison taxonomy: skill groups, industry groups, goal keywords.

The tables live in ``taxonomy.yaml`` next to this module and are loaded once
per process. Scorers receive the loaded :class:`Taxonomy` explicitly, so
every sub-score is a pure function of (subject, intent, taxonomy).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from config import settings
from models.schemas.subject import ExperienceLevel

logger = logging.getLogger(__name__)

DEFAULT_TAXONOMY_PATH = Path(__file__).with_name("taxonomy.yaml")

_REQUIRED_SECTIONS = (
    "skill_groups",
    "skill_aliases",
    "industry_groups",
    "goal_keywords",
    "experience_phrases",
    "search_levels",
)


def _phrase_pattern(phrase: str) -> re.Pattern:
    # Word-boundary match so "mid" does not fire inside "midterm"
    return re.compile(rf"(?<![a-z0-9]){re.escape(phrase)}(?![a-z0-9])")


@dataclass(frozen=True)
class Taxonomy:
    """Immutable lookup tables. Safe to share across concurrent scoring calls."""

    skill_groups: Mapping[str, frozenset[str]] = field(default_factory=lambda: MappingProxyType({}))
    skill_aliases: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    industry_groups: Mapping[str, frozenset[str]] = field(default_factory=lambda: MappingProxyType({}))
    goal_keywords: Mapping[str, frozenset[str]] = field(default_factory=lambda: MappingProxyType({}))
    experience_phrases: tuple[tuple[str, ExperienceLevel], ...] = ()
    search_levels: Mapping[str, ExperienceLevel | None] = field(default_factory=lambda: MappingProxyType({}))

    # -- skills ------------------------------------------------------------

    def canonical_skill(self, skill: str) -> str:
        return self.skill_aliases.get(skill, skill)

    def related_skills(self, skill: str) -> frozenset[str]:
        """Skills sharing at least one group with ``skill``, excluding itself."""
        related: set[str] = set()
        for members in self.skill_groups.values():
            if skill in members:
                related.update(members)
        related.discard(skill)
        return frozenset(related)

    # -- industries ----------------------------------------------------------

    def industry_groups_for(self, term: str) -> frozenset[str]:
        """Names of industry groups whose vocabulary appears in ``term``."""
        return frozenset(
            name for name, members in self.industry_groups.items()
            if any(member in term for member in members)
        )

    # -- experience ----------------------------------------------------------

    def experience_for_phrase(self, text: str) -> ExperienceLevel:
        """Resolve a free-form level description; UNSPECIFIED if nothing matches."""
        lowered = text.lower().strip()
        if not lowered:
            return ExperienceLevel.UNSPECIFIED
        for phrase, level in self.experience_phrases:
            if _phrase_pattern(phrase).search(lowered):
                return level
        return ExperienceLevel.UNSPECIFIED

    def search_level(self, name: str) -> ExperienceLevel | None:
        """Map a company-search level (JUNIOR/MID/SENIOR/ANY). Raises KeyError if unknown."""
        return self.search_levels[name.strip().upper()]


def _as_frozen_groups(raw: Any, section: str) -> Mapping[str, frozenset[str]]:
    if not isinstance(raw, dict):
        raise ValueError(f"taxonomy section '{section}' must be a mapping")
    groups: dict[str, frozenset[str]] = {}
    for name, members in raw.items():
        if not isinstance(members, list):
            raise ValueError(f"taxonomy group '{section}.{name}' must be a list")
        groups[str(name).lower()] = frozenset(str(m).lower().strip() for m in members)
    return MappingProxyType(groups)


def parse_taxonomy(data: Any) -> Taxonomy:
    """Build a :class:`Taxonomy` from the decoded YAML document."""
    if not isinstance(data, dict):
        raise ValueError("taxonomy document must be a mapping")
    missing = [s for s in _REQUIRED_SECTIONS if s not in data]
    if missing:
        raise ValueError(f"taxonomy is missing sections: {', '.join(missing)}")

    aliases = data["skill_aliases"]
    if not isinstance(aliases, dict):
        raise ValueError("taxonomy section 'skill_aliases' must be a mapping")

    if not isinstance(data["experience_phrases"], list):
        raise ValueError("taxonomy section 'experience_phrases' must be a list")
    if not isinstance(data["search_levels"], dict):
        raise ValueError("taxonomy section 'search_levels' must be a mapping")

    phrases: list[tuple[str, ExperienceLevel]] = []
    for entry in data["experience_phrases"]:
        try:
            phrases.append((str(entry["phrase"]).lower(), ExperienceLevel(int(entry["level"]))))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"invalid experience phrase entry {entry!r}") from e

    levels: dict[str, ExperienceLevel | None] = {}
    for name, level in data["search_levels"].items():
        levels[str(name).upper()] = None if level is None else ExperienceLevel(int(level))

    return Taxonomy(
        skill_groups=_as_frozen_groups(data["skill_groups"], "skill_groups"),
        skill_aliases=MappingProxyType(
            {str(k).lower().strip(): str(v).lower().strip() for k, v in aliases.items()}
        ),
        industry_groups=_as_frozen_groups(data["industry_groups"], "industry_groups"),
        goal_keywords=_as_frozen_groups(data["goal_keywords"], "goal_keywords"),
        experience_phrases=tuple(phrases),
        search_levels=MappingProxyType(levels),
    )


@lru_cache(maxsize=4)
def _load_from(path: str) -> Taxonomy:
    logger.info("Loading matching taxonomy from %s", path)
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return parse_taxonomy(data)


def load_taxonomy(path: str | Path | None = None) -> Taxonomy:
    """Load (once) and return the taxonomy at ``path``, the configured path, or the default."""
    resolved = Path(path or settings.taxonomy_path or DEFAULT_TAXONOMY_PATH)
    return _load_from(str(resolved.resolve()))
