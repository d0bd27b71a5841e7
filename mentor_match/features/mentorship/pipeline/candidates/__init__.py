"""
Candidate selection package.
"""

from .service import (
    CandidateSetBuilder,
    ScoredCandidate,
    eligible_pool,
    rank_candidates,
    requested_mentor_ids,
)

__all__ = [
    "CandidateSetBuilder",
    "ScoredCandidate",
    "eligible_pool",
    "rank_candidates",
    "requested_mentor_ids",
]
