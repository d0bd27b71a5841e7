"""
Service layer for the mentorship feature.
"""

from .embedding_service import (
    EmbeddingProvider,
    EmbeddingService,
    OpenAIEmbeddingProvider,
    build_text,
    profile_embedding_service,
)
from .mentorship_service import MentorshipService, mentorship_request_service

__all__ = [
    "EmbeddingProvider",
    "EmbeddingService",
    "OpenAIEmbeddingProvider",
    "build_text",
    "profile_embedding_service",
    "MentorshipService",
    "mentorship_request_service",
]
