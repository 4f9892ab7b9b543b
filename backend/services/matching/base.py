"""Abstract base class for the context scorers."""

from abc import ABC, abstractmethod
from typing import Mapping
import logging

import numpy as np

from models.schemas.intent import Intent
from models.schemas.match_result import MatchContext, MatchResult, ScoreBreakdown
from models.schemas.subject import Subject
from services.exceptions import InvalidIntentError, MalformedSubjectError
from services.matching.insights import build_insights, recommendation_level
from services.matching.taxonomy import Taxonomy, load_taxonomy

logger = logging.getLogger(__name__)

SCORE_PRECISION = 4
WEIGHT_TOLERANCE = 1e-9


def check_weights(weights: Mapping[str, float], name: str = "") -> None:
    """Raise ValueError unless ``weights`` are non-negative and sum to 1.0."""
    if any(w < 0 for w in weights.values()):
        raise ValueError(f"{name} weights must be non-negative")
    total = float(np.sum(list(weights.values())))
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise ValueError(f"{name} weights sum to {total}, expected 1.0")


def combine(breakdown: ScoreBreakdown, weights: Mapping[str, float]) -> float:
    """Weighted sum of sub-scores, clamped to [0, 1] and rounded.

    Every weighted dimension must be present in ``breakdown``.
    """
    scores = breakdown.scored()
    missing = [dim for dim in weights if dim not in scores]
    if missing:
        raise ValueError(f"breakdown is missing weighted dimensions: {', '.join(missing)}")
    names = list(weights)
    values = np.array([scores[n] for n in names], dtype=float)
    w = np.array([weights[n] for n in names], dtype=float)
    overall = float(np.dot(values, w))
    return round(min(1.0, max(0.0, overall)), SCORE_PRECISION)


def round_breakdown(breakdown: ScoreBreakdown) -> ScoreBreakdown:
    return ScoreBreakdown(**{
        dim: round(value, SCORE_PRECISION) for dim, value in breakdown.scored().items()
    })


class BaseMatcherService(ABC):
    """Base class for context scorers.

    Subclasses must implement:
        - context: the MatchContext this scorer serves
        - weights: flattened dimension -> weight mapping summing to 1.0
        - compute_breakdown(subject, intent): sub-scores and group scores
    """

    context: MatchContext
    weights: Mapping[str, float] = {}
    _loaded: bool = False

    def __init__(self, taxonomy: Taxonomy | None = None):
        self._taxonomy = taxonomy

    def load(self) -> None:
        """Validate the weight table and load the taxonomy unless one was given."""
        check_weights(self.weights, self.context.value)
        if self._taxonomy is None:
            self._taxonomy = load_taxonomy()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def ensure_loaded(self) -> None:
        if not self._loaded:
            logger.info("Loading scorer: %s", self.context.value)
            self.load()
            self._loaded = True

    @property
    def taxonomy(self) -> Taxonomy:
        self.ensure_loaded()
        return self._taxonomy

    @abstractmethod
    def compute_breakdown(self, subject: Subject, intent: Intent) -> tuple[ScoreBreakdown, dict[str, float]]:
        """Return the sub-scores and any group scores for one pair."""

    def score(self, subject: Subject, intent: Intent) -> MatchResult:
        """Score one (subject, intent) pair. Deterministic; no I/O."""
        if not isinstance(subject, Subject):
            raise MalformedSubjectError(f"Expected a normalized Subject, got {type(subject).__name__}")
        if not isinstance(intent, Intent):
            raise InvalidIntentError(f"Expected a resolved Intent, got {type(intent).__name__}")
        self.ensure_loaded()

        breakdown, group_scores = self.compute_breakdown(subject, intent)
        breakdown = round_breakdown(breakdown)
        overall = combine(breakdown, self.weights)

        return MatchResult(
            subject_id=subject.id,
            context=self.context,
            overall_score=overall,
            breakdown=breakdown,
            group_scores={k: round(v, SCORE_PRECISION) for k, v in group_scores.items()},
            insights=build_insights(breakdown, overall, self.context),
            recommendation_level=recommendation_level(overall),
            categories=sorted(subject.categories),
        )

    def score_many(self, subjects: list[Subject], intent: Intent) -> list[MatchResult]:
        """Score a pool, preserving input order."""
        return [self.score(subject, intent) for subject in subjects]
