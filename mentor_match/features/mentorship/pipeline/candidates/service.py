"""
Candidate set builder - eligible mentor pool plus per-mentor scores.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from mentor_match.features.mentorship.domain import (
    REQUESTED_STATUSES,
    MatchRecord,
    Mentee,
    Mentor,
    UserRole,
)
from mentor_match.features.mentorship.pipeline.scoring import ScoringEngine, scoring_engine
from mentor_match.features.mentorship.repository import (
    EmbeddingRepository,
    MatchStateRepository,
    MentorDirectoryRepository,
)
from mentor_match.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class ScoredCandidate:
    mentor: Mentor
    score: float
    component_scores: dict[str, float]
    active_load: int

    @property
    def mentor_id(self) -> str:
        return self.mentor.user_id


def requested_mentor_ids(match_records: Iterable[MatchRecord]) -> list[str]:
    """Mentor ids with a pending or accepted record, first occurrence order."""
    seen: dict[str, None] = {}
    for record in match_records:
        if record.status in REQUESTED_STATUSES:
            seen.setdefault(record.mentor_user_id, None)
    return list(seen)


def eligible_pool(
    mentee_id: str, active_mentors: Sequence[Mentor], excluded_ids: Iterable[str]
) -> list[Mentor]:
    """Active mentors minus the mentee itself and any excluded id, order preserved."""
    excluded = set(excluded_ids)
    excluded.add(mentee_id)
    return [
        mentor
        for mentor in active_mentors
        if mentor.is_active and mentor.user_id not in excluded
    ]


def rank_candidates(candidates: Iterable[ScoredCandidate]) -> list[ScoredCandidate]:
    """Score descending; equal scores keep enumeration order."""
    return sorted(candidates, key=lambda candidate: candidate.score, reverse=True)


class CandidateSetBuilder:
    def __init__(
        self,
        engine: ScoringEngine | None = None,
        mentors=MentorDirectoryRepository,
        matches=MatchStateRepository,
        embeddings=EmbeddingRepository,
    ):
        self.engine = engine or scoring_engine
        self.mentors = mentors
        self.matches = matches
        self.embeddings = embeddings

    async def build(
        self,
        mentee: Mentee,
        *,
        active_mentors: Sequence[Mentor] | None = None,
        match_records: Sequence[MatchRecord] | None = None,
        excluded_ids: Iterable[str] = (),
    ) -> list[ScoredCandidate]:
        """
        Score every eligible mentor for ``mentee``.

        Args:
            mentee: Mentee being matched
            active_mentors: Pre-fetched active mentors (fetched when None)
            match_records: Pre-fetched match records for the mentee (fetched when None)
            excluded_ids: Extra mentor ids to leave out, e.g. ones already placed

        Returns:
            Scored candidates in mentor enumeration order (unsorted)
        """
        if active_mentors is None:
            active_mentors = await self.mentors.active_mentors()
        if match_records is None:
            match_records = await self.matches.matches_for(mentee.user_id)

        excluded = set(requested_mentor_ids(match_records))
        excluded.update(excluded_ids)
        pool = eligible_pool(mentee.user_id, active_mentors, excluded)
        if not pool:
            logger.info("No eligible mentors to score", mentee_id=mentee.user_id)
            return []

        # One aggregate for load, one batch for embeddings
        accepted_counts = await self.matches.accepted_counts_by_mentor()
        mentee_embeddings = await self.embeddings.get(mentee.user_id, UserRole.MENTEE)
        mentor_embeddings = await self.embeddings.get_many(
            [mentor.user_id for mentor in pool], UserRole.MENTOR
        )

        candidates = []
        for mentor in pool:
            load = accepted_counts.get(mentor.user_id, 0)
            breakdown = self.engine.breakdown(
                mentee,
                mentor,
                load,
                mentee_embeddings=mentee_embeddings,
                mentor_embeddings=mentor_embeddings.get(mentor.user_id),
            )
            candidates.append(
                ScoredCandidate(
                    mentor=mentor,
                    score=breakdown.total,
                    component_scores=breakdown.component_scores,
                    active_load=load,
                )
            )

        logger.debug(
            "Scored candidate mentors",
            mentee_id=mentee.user_id,
            pool_size=len(pool),
            mentee_has_embeddings=mentee_embeddings is not None,
            mentors_with_embeddings=len(mentor_embeddings),
        )
        return candidates
