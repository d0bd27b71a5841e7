"""
Repository helpers for mentorship match records.
"""

from mentor_match.db.helpers import execute_query, fetch_all, fetch_one
from mentor_match.features.mentorship.domain import MatchRecord, MatchStatus
from mentor_match.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


def _row_to_match(row: dict) -> MatchRecord:
    return MatchRecord(
        match_id=row["match_id"],
        requestor_user_id=row["requestor_user_id"],
        mentor_user_id=row["mentor_user_id"],
        status=MatchStatus(row["status"]),
        matched_at=row.get("matched_at"),
        message=row.get("message"),
    )


class MatchStateRepository:
    """Raw SQL helpers for the mentorship_matches table."""

    @classmethod
    async def matches_for(cls, mentee_id: str) -> list[MatchRecord]:
        """Every match the mentee requested, regardless of status."""
        query = """
            SELECT match_id, requestor_user_id, mentor_user_id, status, matched_at, message
            FROM mentorship_matches
            WHERE requestor_user_id = %s
              AND mentor_user_id IS NOT NULL
            ORDER BY match_id ASC
        """
        rows = await fetch_all(query, (mentee_id,))
        return [_row_to_match(row) for row in rows]

    @classmethod
    async def pending_for_mentor(cls, mentor_id: str) -> list[MatchRecord]:
        """Requests waiting on ``mentor_id``, oldest first."""
        return await cls._for_mentor(mentor_id, MatchStatus.PENDING)

    @classmethod
    async def accepted_for_mentor(cls, mentor_id: str) -> list[MatchRecord]:
        return await cls._for_mentor(mentor_id, MatchStatus.ACCEPTED)

    @classmethod
    async def _for_mentor(cls, mentor_id: str, status: MatchStatus) -> list[MatchRecord]:
        query = """
            SELECT match_id, requestor_user_id, mentor_user_id, status, matched_at, message
            FROM mentorship_matches
            WHERE mentor_user_id = %s
              AND status = %s
            ORDER BY match_id ASC
        """
        rows = await fetch_all(query, (mentor_id, status.value))
        return [_row_to_match(row) for row in rows]

    @classmethod
    async def accepted_counts_by_mentor(cls) -> dict[str, int]:
        """Accepted mentee count per mentor, computed in one aggregate query."""
        query = """
            SELECT mentor_user_id, COUNT(*) AS accepted_count
            FROM mentorship_matches
            WHERE status = 'accepted'
              AND mentor_user_id IS NOT NULL
            GROUP BY mentor_user_id
        """
        rows = await fetch_all(query)
        return {row["mentor_user_id"]: int(row["accepted_count"]) for row in rows}

    @classmethod
    async def create_request(
        cls, mentee_id: str, mentor_id: str, message: str | None = None
    ) -> int | None:
        """
        Insert a pending match.

        Returns the new match id, or None when a record for the pair
        already exists (unique index on requestor/mentor).
        """
        query = """
            INSERT INTO mentorship_matches (requestor_user_id, mentor_user_id, status, message)
            VALUES (%s, %s, 'pending', %s)
            ON CONFLICT (requestor_user_id, mentor_user_id) DO NOTHING
            RETURNING match_id
        """
        row = await fetch_one(query, (mentee_id, mentor_id, message))
        if not row:
            return None

        logger.info("Mentorship request created", mentee_id=mentee_id, mentor_id=mentor_id)
        return row["match_id"]

    @classmethod
    async def resolve_pending(cls, match_id: int, mentor_id: str, status: MatchStatus) -> bool:
        """
        Move a pending match owned by ``mentor_id`` to ``status``.

        Returns False when no pending match with that id belongs to the mentor.
        """
        if status == MatchStatus.ACCEPTED:
            query = """
                UPDATE mentorship_matches
                SET status = 'accepted', matched_at = NOW()
                WHERE match_id = %s
                  AND mentor_user_id = %s
                  AND status = 'pending'
            """
        else:
            query = """
                UPDATE mentorship_matches
                SET status = %s
                WHERE match_id = %s
                  AND mentor_user_id = %s
                  AND status = 'pending'
            """
        params = (
            (match_id, mentor_id)
            if status == MatchStatus.ACCEPTED
            else (status.value, match_id, mentor_id)
        )
        affected = await execute_query(query, params)
        return affected > 0
