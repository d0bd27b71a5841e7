# mentor_match/models/api/mentorship_request.py
"""
Mentorship API request models.
Used by routes for input validation.
"""

from pydantic import BaseModel, Field


class MentorshipRequestCreate(BaseModel):
    """Request body for asking a mentor for mentorship."""

    mentor_user_id: str = Field(..., min_length=1, description="Mentor user ID")
    message: str | None = Field(
        default=None, max_length=2000, description="Optional note to the mentor"
    )
