# mentor_match/models/api/mentorship_response.py
"""
Mentorship API response models.
Used by routes for output formatting.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class RecommendationResponse(BaseModel):
    """One recommended mentor."""

    mentor_id: str = Field(..., description="Mentor user ID")
    score: float | None = Field(
        None, description="Compatibility score; null for cached or requested entries"
    )
    priority: int = Field(..., description="1 = already requested, 2 = suggested")
    from_existing: bool = Field(..., description="Entry came from the recommendation cache")
    has_requested: bool = Field(..., description="Mentee has a pending or accepted request")


class RecommendationsListResponse(BaseModel):
    """Response for the recommendation list."""

    mentee_id: str = Field(..., description="Mentee user ID")
    recommendations: list[RecommendationResponse] = Field(..., description="Ordered mentors")
    total_count: int = Field(..., description="Number of recommendations returned")
    generated_at: datetime = Field(..., description="When the list was generated")


class MentorshipRequestResponse(BaseModel):
    """Response after creating a mentorship request."""

    match_id: int = Field(..., description="Created match ID")
    mentor_user_id: str = Field(..., description="Requested mentor")
    status: str = Field(default="pending", description="Match status")


class MatchActionResponse(BaseModel):
    """Response after a mentor accepts or declines."""

    match_id: int = Field(..., description="Match ID")
    status: str = Field(..., description="New match status")


class EmbeddingUpdateResponse(BaseModel):
    """Response after (re)building a user's embeddings."""

    user_id: str = Field(..., description="User ID")
    role: str = Field(..., description="mentor or mentee")
    fields_embedded: list[str] = Field(..., description="Embedding fields written")
    recommendations_generated: int | None = Field(
        None, description="Recommendations generated afterwards (mentees only)"
    )


class PendingRequestResponse(BaseModel):
    """A request waiting on the mentor."""

    match_id: int = Field(..., description="Match ID to accept or decline")
    mentee_user_id: str = Field(..., description="Requesting mentee")
    message: str | None = Field(None, description="Message sent with the request")


class MentorOverviewResponse(BaseModel):
    active_mentee_ids: list[str] = Field(default_factory=list)
    pending_requests: list[PendingRequestResponse] = Field(default_factory=list)


class MenteeOverviewResponse(BaseModel):
    active_mentor_ids: list[str] = Field(default_factory=list)
    pending_mentor_ids: list[str] = Field(default_factory=list)
    suggested_mentor_ids: list[str] = Field(
        default_factory=list, description="From the cached recommendation list, if still valid"
    )


class MentorshipOverviewResponse(BaseModel):
    """Both sides of the signed-in user's mentorships; null when no profile for that role."""

    user_id: str = Field(..., description="User ID")
    mentor: MentorOverviewResponse | None = None
    mentee: MenteeOverviewResponse | None = None
