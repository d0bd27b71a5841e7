"""
Repository helpers for mentor and mentee profiles.

Profiles are written by the application flows; this feature only reads them.
"""

from mentor_match.db.helpers import fetch_all, fetch_one
from mentor_match.features.mentorship.domain import (
    MeetingFormat,
    Mentee,
    MenteeStatus,
    Mentor,
    MentorStatus,
)
from mentor_match.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

_MENTOR_COLUMNS = """
    user_id,
    status,
    preferred_meeting_format,
    hours_per_month_commitment,
    strengths,
    personal_interests,
    why_interested_responses,
    career_advice
"""

_MENTEE_COLUMNS = """
    user_id,
    status,
    preferred_meeting_format,
    hours_per_month_commitment,
    learning_goals,
    personal_interests,
    role_model_inspiration,
    hope_to_gain_responses,
    mentor_qualities
"""


def _meeting_format(value: str | None) -> MeetingFormat | None:
    if not value:
        return None
    try:
        return MeetingFormat(value)
    except ValueError:
        logger.warning("Unknown meeting format, treating as unset", value=value)
        return None


def row_to_mentor(row: dict) -> Mentor:
    return Mentor(
        user_id=row["user_id"],
        status=MentorStatus(row["status"]),
        preferred_meeting_format=_meeting_format(row.get("preferred_meeting_format")),
        hours_per_month=row.get("hours_per_month_commitment"),
        strengths=row.get("strengths") or [],
        personal_interests=row.get("personal_interests"),
        why_interested_responses=row.get("why_interested_responses") or [],
        career_advice=row.get("career_advice"),
    )


def row_to_mentee(row: dict) -> Mentee:
    return Mentee(
        user_id=row["user_id"],
        status=MenteeStatus(row.get("status") or MenteeStatus.ACTIVE.value),
        preferred_meeting_format=_meeting_format(row.get("preferred_meeting_format")),
        hours_per_month=row.get("hours_per_month_commitment"),
        learning_goals=row.get("learning_goals"),
        personal_interests=row.get("personal_interests"),
        role_model_inspiration=row.get("role_model_inspiration"),
        hope_to_gain_responses=row.get("hope_to_gain_responses") or [],
        mentor_qualities=row.get("mentor_qualities") or [],
    )


class MentorDirectoryRepository:
    """Read access to mentor and mentee profile rows."""

    @classmethod
    async def active_mentors(cls) -> list[Mentor]:
        """All active mentors in a stable order (mentor_id ascending)."""
        query = f"""
            SELECT {_MENTOR_COLUMNS}
            FROM mentors
            WHERE status = 'active'
            ORDER BY mentor_id ASC
        """
        rows = await fetch_all(query)
        return [row_to_mentor(row) for row in rows]

    @classmethod
    async def get_mentor(cls, user_id: str) -> Mentor | None:
        query = f"""
            SELECT {_MENTOR_COLUMNS}
            FROM mentors
            WHERE user_id = %s
            LIMIT 1
        """
        row = await fetch_one(query, (user_id,))
        return row_to_mentor(row) if row else None

    @classmethod
    async def get_mentee(cls, user_id: str) -> Mentee | None:
        query = f"""
            SELECT {_MENTEE_COLUMNS}
            FROM mentees
            WHERE user_id = %s
            LIMIT 1
        """
        row = await fetch_one(query, (user_id,))
        return row_to_mentee(row) if row else None
