"""
Recommendation orchestration package.
"""

from .service import (
    PRIORITY_REQUESTED,
    PRIORITY_SUGGESTED,
    RecommendationService,
    merge_tiers,
    recommendation_service,
    tier_fresh_fill,
    tier_from_cache,
    tier_from_requests,
)

__all__ = [
    "PRIORITY_REQUESTED",
    "PRIORITY_SUGGESTED",
    "RecommendationService",
    "merge_tiers",
    "recommendation_service",
    "tier_fresh_fill",
    "tier_from_cache",
    "tier_from_requests",
]
