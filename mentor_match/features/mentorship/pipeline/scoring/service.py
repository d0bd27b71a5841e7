"""
Mentor scoring engine - composite mentee/mentor compatibility score.

The score is a weighted sum of four sub-scores, each in [0, 1]:
semantic similarity of embeddings, meeting-format compatibility,
monthly-hours compatibility and mentor load. With the default weights the
total is bounded by 1.0.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from mentor_match.config import settings
from mentor_match.features.mentorship.domain import (
    EmbeddingSet,
    MeetingFormat,
    Mentee,
    Mentor,
)
from mentor_match.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ScoringWeights:
    """Tunable constants of the scoring formula."""

    semantic: float = 0.5
    meeting_format: float = 0.15
    hours: float = 0.15
    load: float = 0.2
    # Blend inside the semantic component
    profile_term: float = 0.5
    interest_term: float = 0.3
    cross_term: float = 0.2
    # Whole-component value used when any required vector is missing
    semantic_fallback: float = 0.3

    @classmethod
    def from_settings(cls) -> ScoringWeights:
        return cls(
            semantic=settings.SCORING_SEMANTIC_WEIGHT,
            meeting_format=settings.SCORING_FORMAT_WEIGHT,
            hours=settings.SCORING_HOURS_WEIGHT,
            load=settings.SCORING_LOAD_WEIGHT,
            profile_term=settings.SCORING_PROFILE_TERM,
            interest_term=settings.SCORING_INTEREST_TERM,
            cross_term=settings.SCORING_CROSS_TERM,
            semantic_fallback=settings.SCORING_SEMANTIC_FALLBACK,
        )

    def component_weights(self) -> dict[str, float]:
        return {
            "semantic": self.semantic,
            "meeting_format": self.meeting_format,
            "hours": self.hours,
            "load": self.load,
        }


@dataclass(slots=True)
class ScoreBreakdown:
    total: float
    component_scores: dict[str, float]
    semantic_fallback_used: bool


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float | None:
    """
    1 - cosine distance, clamped to [0, 1].

    Returns None when the similarity is undefined (zero-norm or non-finite
    vectors, mismatched dimensions).
    """
    if a.shape != b.shape:
        return None
    norm = float(np.linalg.norm(a) * np.linalg.norm(b))
    if norm == 0.0 or not np.isfinite(norm):
        return None
    similarity = float(np.dot(a, b) / norm)
    if not np.isfinite(similarity):
        return None
    return min(max(similarity, 0.0), 1.0)


class ScoringEngine:
    def __init__(self, weights: ScoringWeights | None = None):
        self.weights = weights or ScoringWeights()

    def score(
        self,
        mentee: Mentee,
        mentor: Mentor,
        mentor_active_load: int,
        mentee_embeddings: EmbeddingSet | None = None,
        mentor_embeddings: EmbeddingSet | None = None,
    ) -> float:
        return self.breakdown(
            mentee, mentor, mentor_active_load, mentee_embeddings, mentor_embeddings
        ).total

    def breakdown(
        self,
        mentee: Mentee,
        mentor: Mentor,
        mentor_active_load: int,
        mentee_embeddings: EmbeddingSet | None = None,
        mentor_embeddings: EmbeddingSet | None = None,
    ) -> ScoreBreakdown:
        semantic = self._semantic(mentee_embeddings, mentor_embeddings)
        scores = {
            "semantic": semantic if semantic is not None else self.weights.semantic_fallback,
            "meeting_format": self._meeting_format(
                mentor.preferred_meeting_format, mentee.preferred_meeting_format
            ),
            "hours": self._hours(mentor.hours_per_month, mentee.hours_per_month),
            "load": self._load(mentor_active_load),
        }
        return ScoreBreakdown(
            total=self._weighted_sum(scores),
            component_scores=scores,
            semantic_fallback_used=semantic is None,
        )

    def _weighted_sum(self, scores: dict[str, float]) -> float:
        weights = self.weights.component_weights()
        return sum(weights[key] * scores[key] for key in weights)

    def _semantic(
        self, mentee: EmbeddingSet | None, mentor: EmbeddingSet | None
    ) -> float | None:
        if mentee is None or mentor is None:
            return None

        pairs = (
            (self.weights.profile_term, mentor.profile, mentee.profile),
            (self.weights.interest_term, mentor.why_interested, mentee.hope_to_gain),
            (self.weights.cross_term, mentor.profile, mentee.why_interested),
        )

        total = 0.0
        for weight, mentor_vec, mentee_vec in pairs:
            if mentor_vec is None or mentee_vec is None:
                return None
            similarity = cosine_similarity(mentor_vec, mentee_vec)
            if similarity is None:
                return None
            total += weight * similarity
        return total

    def _meeting_format(
        self, mentor_format: MeetingFormat | None, mentee_format: MeetingFormat | None
    ) -> float:
        if mentor_format is not None and mentor_format == mentee_format:
            return 1.0
        if MeetingFormat.NO_PREFERENCE in (mentor_format, mentee_format):
            return 0.9
        if mentor_format is None or mentee_format is None:
            return 0.8
        if MeetingFormat.HYBRID in (mentor_format, mentee_format):
            return 0.7
        return 0.3

    def _hours(self, mentor_hours: int | None, mentee_hours: int | None) -> float:
        if mentor_hours is None and mentee_hours is None:
            return 0.7
        if mentor_hours is None or mentee_hours is None:
            return 0.6

        gap = abs(mentor_hours - mentee_hours)
        if gap <= 2:
            return 1.0
        if gap <= 5:
            return 0.8
        if mentor_hours > mentee_hours:
            return 0.6
        deficit = mentee_hours - mentor_hours
        return max(0.2, 1.0 - deficit / 10)

    def _load(self, accepted_count: int) -> float:
        if accepted_count <= 0:
            return 1.0
        if accepted_count == 1:
            return 0.85
        if accepted_count == 2:
            return 0.7
        if accepted_count == 3:
            return 0.5
        return max(0.2, 1.0 - accepted_count / 10)


scoring_engine = ScoringEngine(ScoringWeights.from_settings())
