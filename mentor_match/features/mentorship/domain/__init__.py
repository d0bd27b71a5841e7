"""
Domain subpackage for the mentorship feature.
"""

from .errors import (
    EmbeddingProviderError,
    MatchNotFoundError,
    MenteeNotFoundError,
    MentorshipRequestError,
    RecommendationInputError,
)
from .models import (
    REQUESTED_STATUSES,
    EmbeddingSet,
    MatchRecord,
    MatchStatus,
    MeetingFormat,
    Mentee,
    MenteeOverview,
    MenteeStatus,
    Mentor,
    MentorOverview,
    MentorshipOverview,
    MentorStatus,
    Recommendation,
    RecommendationCacheEntry,
    UserRole,
)

__all__ = [
    "REQUESTED_STATUSES",
    "EmbeddingProviderError",
    "EmbeddingSet",
    "MatchNotFoundError",
    "MatchRecord",
    "MatchStatus",
    "MeetingFormat",
    "Mentee",
    "MenteeNotFoundError",
    "MenteeOverview",
    "MenteeStatus",
    "Mentor",
    "MentorOverview",
    "MentorStatus",
    "MentorshipOverview",
    "MentorshipRequestError",
    "Recommendation",
    "RecommendationCacheEntry",
    "RecommendationInputError",
    "UserRole",
]
