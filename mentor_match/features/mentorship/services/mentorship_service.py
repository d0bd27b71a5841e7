"""
Mentorship request lifecycle: mentee requests, mentor accepts or declines.

Also builds the read-only overview of a user's mentorships from match
records and the cached recommendation list, without regenerating it.
"""

from datetime import UTC, datetime

from mentor_match.features.mentorship.domain import (
    MatchNotFoundError,
    MatchStatus,
    MenteeOverview,
    MentorOverview,
    MentorshipOverview,
    MentorshipRequestError,
)
from mentor_match.features.mentorship.repository import (
    MatchStateRepository,
    MentorDirectoryRepository,
    RecommendationCacheRepository,
)
from mentor_match.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class MentorshipService:
    def __init__(
        self,
        mentors=MentorDirectoryRepository,
        matches=MatchStateRepository,
        cache=RecommendationCacheRepository,
    ):
        self.mentors = mentors
        self.matches = matches
        self.cache = cache

    async def request_mentorship(
        self, mentee_id: str, mentor_id: str, message: str | None = None
    ) -> int:
        """
        Create a pending match from ``mentee_id`` to ``mentor_id``.

        Returns:
            The new match id

        Raises:
            MentorshipRequestError: Self request, unknown mentor or duplicate pair
        """
        if mentee_id == mentor_id:
            raise MentorshipRequestError(
                "Cannot request mentorship from yourself",
                reason=MentorshipRequestError.SELF_REQUEST,
            )

        mentor = await self.mentors.get_mentor(mentor_id)
        if mentor is None:
            raise MentorshipRequestError(
                f"Mentor not found: {mentor_id}",
                reason=MentorshipRequestError.MENTOR_NOT_FOUND,
            )

        match_id = await self.matches.create_request(mentee_id, mentor_id, message)
        if match_id is None:
            logger.info(
                "Duplicate mentorship request rejected", mentee_id=mentee_id, mentor_id=mentor_id
            )
            raise MentorshipRequestError(
                "Mentorship request already exists",
                reason=MentorshipRequestError.DUPLICATE,
            )
        return match_id

    async def accept_request(self, match_id: int, mentor_id: str) -> None:
        await self._resolve(match_id, mentor_id, MatchStatus.ACCEPTED)

    async def decline_request(self, match_id: int, mentor_id: str) -> None:
        await self._resolve(match_id, mentor_id, MatchStatus.DECLINED)

    async def _resolve(self, match_id: int, mentor_id: str, status: MatchStatus) -> None:
        # Only the owning mentor may move a pending match
        updated = await self.matches.resolve_pending(match_id, mentor_id, status)
        if not updated:
            raise MatchNotFoundError(match_id, mentor_id)

        logger.info(
            "Mentorship request resolved",
            match_id=match_id,
            mentor_id=mentor_id,
            status=status.value,
        )

    async def overview(self, user_id: str, now: datetime | None = None) -> MentorshipOverview:
        """
        Mentor and mentee sides of ``user_id``'s mentorships.

        A side is None when the user has no profile for that role. The
        suggested list comes from a valid cache entry only; an expired or
        missing entry yields no suggestions.
        """
        result = MentorshipOverview()

        mentor = await self.mentors.get_mentor(user_id)
        if mentor is not None:
            result.mentor = await self._mentor_side(user_id)

        mentee = await self.mentors.get_mentee(user_id)
        if mentee is not None:
            result.mentee = await self._mentee_side(user_id, now or datetime.now(UTC))

        return result

    async def _mentor_side(self, mentor_id: str) -> MentorOverview:
        accepted = await self.matches.accepted_for_mentor(mentor_id)
        pending = await self.matches.pending_for_mentor(mentor_id)
        return MentorOverview(
            user_id=mentor_id,
            active_mentee_ids=[record.requestor_user_id for record in accepted],
            pending_requests=pending,
        )

    async def _mentee_side(self, mentee_id: str, now: datetime) -> MenteeOverview:
        records = await self.matches.matches_for(mentee_id)
        cached_ids, valid = await self.cache.read(mentee_id, now=now)

        suggested = []
        if valid and cached_ids:
            # Any request, declined included, removes a mentor from suggestions
            requested = {record.mentor_user_id for record in records}
            active_ids = {mentor.user_id for mentor in await self.mentors.active_mentors()}
            suggested = [
                mentor_id
                for mentor_id in dict.fromkeys(cached_ids)
                if mentor_id in active_ids
                and mentor_id not in requested
                and mentor_id != mentee_id
            ]

        return MenteeOverview(
            user_id=mentee_id,
            active_mentor_ids=[
                r.mentor_user_id for r in records if r.status == MatchStatus.ACCEPTED
            ],
            pending_mentor_ids=[
                r.mentor_user_id for r in records if r.status == MatchStatus.PENDING
            ],
            suggested_mentor_ids=suggested,
        )


mentorship_request_service = MentorshipService()
