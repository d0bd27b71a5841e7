"""
Repositories for the mentorship feature.
"""

from .embedding_repository import EmbeddingRepository
from .match_repository import MatchStateRepository
from .mentor_repository import MentorDirectoryRepository
from .recommendation_repository import RecommendationCacheRepository

__all__ = [
    "EmbeddingRepository",
    "MatchStateRepository",
    "MentorDirectoryRepository",
    "RecommendationCacheRepository",
]
