"""
Domain models for the mentorship feature.

Plain dataclasses shared by repositories, the recommendation pipeline and
the API layer. Vectors are numpy arrays; everything else is primitive.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

import numpy as np


class MeetingFormat(str, Enum):
    IN_PERSON = "in-person"
    VIRTUAL = "virtual"
    HYBRID = "hybrid"
    NO_PREFERENCE = "no-preference"


class MentorStatus(str, Enum):
    REQUESTED = "requested"
    APPROVED = "approved"
    ACTIVE = "active"


class MenteeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MATCHED = "matched"


class MatchStatus(str, Enum):
    PENDING = "pending"  # Mentee requested, waiting for mentor
    ACCEPTED = "accepted"
    DECLINED = "declined"


class UserRole(str, Enum):
    MENTOR = "mentor"
    MENTEE = "mentee"


# Statuses that tie a mentor to a mentee and remove it from fresh scoring
REQUESTED_STATUSES = (MatchStatus.PENDING, MatchStatus.ACCEPTED)


@dataclass(slots=True)
class Mentor:
    user_id: str
    status: MentorStatus
    preferred_meeting_format: MeetingFormat | None = None
    hours_per_month: int | None = None
    strengths: list[str] = field(default_factory=list)
    personal_interests: str | None = None
    why_interested_responses: list[str] = field(default_factory=list)
    career_advice: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == MentorStatus.ACTIVE


@dataclass(slots=True)
class Mentee:
    user_id: str
    status: MenteeStatus = MenteeStatus.ACTIVE
    preferred_meeting_format: MeetingFormat | None = None
    hours_per_month: int | None = None
    learning_goals: str | None = None
    personal_interests: str | None = None
    role_model_inspiration: str | None = None
    hope_to_gain_responses: list[str] = field(default_factory=list)
    mentor_qualities: list[str] = field(default_factory=list)


@dataclass(slots=True)
class EmbeddingSet:
    """Semantic vectors for one (user, role); any field may be missing."""

    user_id: str
    role: UserRole
    profile: np.ndarray | None = None
    why_interested: np.ndarray | None = None
    hope_to_gain: np.ndarray | None = None


@dataclass(slots=True)
class MatchRecord:
    match_id: int
    requestor_user_id: str
    mentor_user_id: str
    status: MatchStatus
    matched_at: datetime | None = None
    message: str | None = None


@dataclass(slots=True)
class RecommendationCacheEntry:
    user_id: str
    mentor_ids: list[str]
    expires_at: datetime | None

    def is_valid(self, now: datetime) -> bool:
        # Expiry exactly at `now` counts as expired
        return self.expires_at is None or self.expires_at > now


@dataclass(slots=True)
class Recommendation:
    """One entry of a generated recommendation list."""

    mentor_id: str
    score: float | None
    priority: int
    from_existing: bool
    has_requested: bool


@dataclass(slots=True)
class MentorOverview:
    user_id: str
    active_mentee_ids: list[str] = field(default_factory=list)
    pending_requests: list[MatchRecord] = field(default_factory=list)


@dataclass(slots=True)
class MenteeOverview:
    user_id: str
    active_mentor_ids: list[str] = field(default_factory=list)
    pending_mentor_ids: list[str] = field(default_factory=list)
    suggested_mentor_ids: list[str] = field(default_factory=list)


@dataclass(slots=True)
class MentorshipOverview:
    """Read-only view of a user's mentorships; either side may be absent."""

    mentor: MentorOverview | None = None
    mentee: MenteeOverview | None = None
