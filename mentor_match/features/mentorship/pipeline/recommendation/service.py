"""
Recommendation service - builds, orders and caches a mentee's mentor list.

Two shapes depending on the cache:

* valid cache:  cached mentors (tier A) topped up with fresh scores (tier B)
* no cache:     already-requested mentors (tier C) topped up with fresh scores (tier D)

The merged list is always written back with a fresh expiry.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime, timedelta

from mentor_match.config import settings
from mentor_match.features.mentorship.domain import (
    Mentor,
    MenteeNotFoundError,
    Recommendation,
    RecommendationInputError,
)
from mentor_match.features.mentorship.pipeline.candidates import (
    CandidateSetBuilder,
    ScoredCandidate,
    rank_candidates,
    requested_mentor_ids,
)
from mentor_match.features.mentorship.repository import (
    MatchStateRepository,
    MentorDirectoryRepository,
    RecommendationCacheRepository,
)
from mentor_match.infrastructure.observability.logging import get_logger
from mentor_match.services.redis_client import fast_redis

logger = get_logger(__name__)

PRIORITY_REQUESTED = 1
PRIORITY_SUGGESTED = 2

LOCK_KEY_TEMPLATE = "mentor_recommendations:lock:{mentee_id}"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def tier_from_cache(
    cached_ids: Sequence[str],
    active_by_id: dict[str, Mentor],
    requested_ids: Iterable[str],
) -> list[Recommendation]:
    """Tier A: cached mentors that are still active, in cached order."""
    requested = set(requested_ids)
    entries = []
    seen = set()
    for mentor_id in cached_ids:
        if mentor_id in seen or mentor_id not in active_by_id:
            continue
        seen.add(mentor_id)
        is_requested = mentor_id in requested
        entries.append(
            Recommendation(
                mentor_id=mentor_id,
                score=None,
                priority=PRIORITY_REQUESTED if is_requested else PRIORITY_SUGGESTED,
                from_existing=True,
                has_requested=is_requested,
            )
        )
    return entries


def tier_from_requests(
    requested_ids: Sequence[str], active_by_id: dict[str, Mentor]
) -> list[Recommendation]:
    """Tier C: mentors the mentee already asked for, if still active."""
    return [
        Recommendation(
            mentor_id=mentor_id,
            score=None,
            priority=PRIORITY_REQUESTED,
            from_existing=False,
            has_requested=True,
        )
        for mentor_id in requested_ids
        if mentor_id in active_by_id
    ]


def tier_fresh_fill(candidates: Iterable[ScoredCandidate], slots: int) -> list[Recommendation]:
    """Tiers B and D: best ``slots`` freshly scored mentors."""
    if slots <= 0:
        return []
    return [
        Recommendation(
            mentor_id=candidate.mentor_id,
            score=candidate.score,
            priority=PRIORITY_SUGGESTED,
            from_existing=False,
            has_requested=False,
        )
        for candidate in rank_candidates(candidates)[:slots]
    ]


def _merge_key(entry: Recommendation) -> tuple[int, int, float]:
    # Unscored entries lead their priority group, like NULLs under ORDER BY score DESC
    if entry.score is None:
        return (entry.priority, 0, 0.0)
    return (entry.priority, 1, -entry.score)


def merge_tiers(entries: Iterable[Recommendation], limit: int) -> list[Recommendation]:
    """Stable sort by (priority asc, score desc), drop repeated mentors, cut to ``limit``."""
    merged = []
    seen = set()
    for entry in sorted(entries, key=_merge_key):
        if entry.mentor_id in seen:
            continue
        seen.add(entry.mentor_id)
        merged.append(entry)
        if len(merged) == limit:
            break
    return merged


class RecommendationService:
    def __init__(
        self,
        candidate_builder: CandidateSetBuilder | None = None,
        mentors=MentorDirectoryRepository,
        matches=MatchStateRepository,
        cache=RecommendationCacheRepository,
        lock_client=fast_redis,
        ttl: timedelta | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.mentors = mentors
        self.matches = matches
        self.cache = cache
        self.candidate_builder = candidate_builder or CandidateSetBuilder(
            mentors=mentors, matches=matches
        )
        self.lock_client = lock_client
        self.ttl = ttl or timedelta(days=settings.RECOMMENDATION_TTL_DAYS)
        self.clock = clock

    async def generate_recommendations(
        self, mentee_id: str, limit: int | None = None
    ) -> list[Recommendation]:
        """
        Produce up to ``limit`` ordered mentor recommendations for a mentee.

        Args:
            mentee_id: Mentee user ID
            limit: Number of recommendations (defaults to RECOMMENDATION_LIMIT)

        Returns:
            Recommendations ordered by priority, then score

        Raises:
            RecommendationInputError: Blank mentee id or out-of-range limit
            MenteeNotFoundError: No mentee profile for ``mentee_id``
        """
        mentee_id, limit = self._validate(mentee_id, limit)

        lock = await self._acquire_lock(mentee_id)
        try:
            return await self._generate(mentee_id, limit)
        finally:
            if lock is not None:
                await self.lock_client.release_lock(lock)

    def _validate(self, mentee_id: str, limit: int | None) -> tuple[str, int]:
        if not isinstance(mentee_id, str) or not mentee_id.strip():
            raise RecommendationInputError("mentee_id must be a non-empty string")

        if limit is None:
            limit = settings.RECOMMENDATION_LIMIT
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise RecommendationInputError("limit must be an integer")
        if limit < 1 or limit > settings.RECOMMENDATION_MAX_LIMIT:
            raise RecommendationInputError(
                f"limit must be between 1 and {settings.RECOMMENDATION_MAX_LIMIT}"
            )
        return mentee_id.strip(), limit

    async def _acquire_lock(self, mentee_id: str):
        if self.lock_client is None:
            return None
        lock = await self.lock_client.acquire_lock(
            LOCK_KEY_TEMPLATE.format(mentee_id=mentee_id),
            timeout_s=settings.RECOMMENDATION_LOCK_TIMEOUT_S,
            wait_s=settings.RECOMMENDATION_LOCK_WAIT_S,
        )
        if lock is None:
            logger.warning("Generating recommendations without lock", mentee_id=mentee_id)
        return lock

    async def _generate(self, mentee_id: str, limit: int) -> list[Recommendation]:
        start = time.perf_counter()
        now = self.clock()

        mentee = await self.mentors.get_mentee(mentee_id)
        if mentee is None:
            raise MenteeNotFoundError(mentee_id)

        cached_ids, cache_valid = await self.cache.read(mentee_id, now=now)
        match_records = await self.matches.matches_for(mentee_id)
        requested_ids = requested_mentor_ids(match_records)
        active_mentors = await self.mentors.active_mentors()
        active_by_id = {mentor.user_id: mentor for mentor in active_mentors if mentor.is_active}

        if cache_valid:
            primary = tier_from_cache(cached_ids, active_by_id, requested_ids)
        else:
            primary = tier_from_requests(requested_ids, active_by_id)

        fresh: list[Recommendation] = []
        if len(primary) < limit:
            candidates = await self.candidate_builder.build(
                mentee,
                active_mentors=active_mentors,
                match_records=match_records,
                excluded_ids=[entry.mentor_id for entry in primary],
            )
            fresh = tier_fresh_fill(candidates, limit - len(primary))

        recommendations = merge_tiers(primary + fresh, limit)
        await self._persist(mentee_id, recommendations, now)

        logger.info(
            "Recommendations generated",
            mentee_id=mentee_id,
            limit=limit,
            cache_valid=cache_valid,
            primary_count=len(primary),
            fresh_count=len(fresh),
            returned=len(recommendations),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return recommendations

    async def _persist(
        self, mentee_id: str, recommendations: Sequence[Recommendation], now: datetime
    ) -> None:
        expires_at = now + self.ttl
        try:
            await self.cache.upsert(
                mentee_id, [entry.mentor_id for entry in recommendations], expires_at
            )
        except Exception as e:
            # The computed list is still returned; the next call regenerates
            logger.error(
                "recommendation_cache_write_failed",
                mentee_id=mentee_id,
                error=str(e),
                error_type=type(e).__name__,
                degraded=True,
            )


recommendation_service = RecommendationService()
