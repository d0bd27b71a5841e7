"""
Pipeline components for mentor recommendations.

Scoring rates one mentee/mentor pair, candidates builds the scored pool and
recommendation merges cached, requested and fresh mentors into the final list.
"""

__all__ = ["candidates", "recommendation", "scoring"]
