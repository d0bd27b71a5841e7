"""
Mentorship feature package.

Domain models, repositories, the recommendation pipeline, services and the
HTTP router for mentor matching live together in this slice.
"""

# Re-export the primary building blocks for easy access.
from .api.router import router as mentorship_router  # noqa: F401
from .pipeline.recommendation import RecommendationService, recommendation_service  # noqa: F401
from .domain.models import Mentee, Mentor, Recommendation  # noqa: F401
