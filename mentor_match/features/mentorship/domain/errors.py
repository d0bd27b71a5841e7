"""
Exceptions raised by the mentorship feature.
"""


class RecommendationInputError(ValueError):
    """Invalid recommendation request (bad mentee id or limit)."""


class MenteeNotFoundError(RecommendationInputError):
    """No mentee profile exists for the requested user id."""

    def __init__(self, mentee_id: str):
        super().__init__(f"Mentee not found: {mentee_id}")
        self.mentee_id = mentee_id


class MentorshipRequestError(Exception):
    """A mentorship request could not be created."""

    DUPLICATE = "duplicate"
    SELF_REQUEST = "self_request"
    MENTOR_NOT_FOUND = "mentor_not_found"

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason


class MatchNotFoundError(Exception):
    """Pending match missing or not owned by the acting mentor."""

    def __init__(self, match_id: int, mentor_user_id: str):
        super().__init__(f"Pending match {match_id} not found for mentor {mentor_user_id}")
        self.match_id = match_id
        self.mentor_user_id = mentor_user_id


class EmbeddingProviderError(Exception):
    """Raised when the embedding provider fails."""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(message)
        self.recoverable = recoverable
