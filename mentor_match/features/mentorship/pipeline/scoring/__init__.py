"""
Mentor scoring package.

Provides the pure scoring engine that rates a mentee/mentor pair.
"""

from .service import (
    ScoreBreakdown,
    ScoringEngine,
    ScoringWeights,
    cosine_similarity,
    scoring_engine,
)

__all__ = [
    "ScoreBreakdown",
    "ScoringEngine",
    "ScoringWeights",
    "cosine_similarity",
    "scoring_engine",
]
