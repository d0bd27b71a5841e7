"""
Persistence for cached mentor recommendations.

One row per mentee (unique user_id). Writes are a single
INSERT ... ON CONFLICT statement so concurrent regenerations for the same
mentee resolve to last-writer-wins without duplicate or partial rows.
"""

from collections.abc import Sequence
from datetime import UTC, datetime

from mentor_match.db.helpers import execute_query, fetch_one
from mentor_match.features.mentorship.domain import RecommendationCacheEntry
from mentor_match.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class RecommendationCacheRepository:

    @classmethod
    async def get_entry(cls, mentee_id: str) -> RecommendationCacheEntry | None:
        query = """
            SELECT user_id, recommended_mentor_ids, expires_at
            FROM mentor_recommendations
            WHERE user_id = %s
            LIMIT 1
        """
        row = await fetch_one(query, (mentee_id,))
        if not row:
            return None
        return RecommendationCacheEntry(
            user_id=row["user_id"],
            mentor_ids=list(row.get("recommended_mentor_ids") or []),
            expires_at=row.get("expires_at"),
        )

    @classmethod
    async def read(cls, mentee_id: str, now: datetime | None = None) -> tuple[list[str], bool]:
        """
        Return (mentor_ids, is_valid).

        Missing and expired entries both come back as ([], False).
        """
        entry = await cls.get_entry(mentee_id)
        if entry is None:
            return [], False

        if not entry.is_valid(now or datetime.now(UTC)):
            logger.debug("Cached recommendations expired", mentee_id=mentee_id)
            return [], False

        return entry.mentor_ids, True

    @classmethod
    async def upsert(
        cls, mentee_id: str, mentor_ids: Sequence[str], expires_at: datetime | None
    ) -> None:
        query = """
            INSERT INTO mentor_recommendations (user_id, recommended_mentor_ids, expires_at)
            VALUES (%s, %s, %s)
            ON CONFLICT (user_id)
            DO UPDATE SET
                recommended_mentor_ids = EXCLUDED.recommended_mentor_ids,
                expires_at = EXCLUDED.expires_at
        """
        await execute_query(query, (mentee_id, list(mentor_ids), expires_at))

        logger.debug(
            "Recommendation cache upserted",
            mentee_id=mentee_id,
            mentor_count=len(mentor_ids),
            expires_at=expires_at.isoformat() if expires_at else None,
        )
