"""
Repository helpers for mentorship embeddings (pgvector columns).

Vectors travel to Postgres as '[x,y,...]' literals cast to ``vector`` and
come back as the same text form, which is parsed into numpy arrays here.
"""

import json
from collections.abc import Iterable, Sequence

import numpy as np

from mentor_match.db.helpers import execute_query, fetch_all, fetch_one
from mentor_match.features.mentorship.domain import EmbeddingSet, UserRole
from mentor_match.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


def parse_vector(value) -> np.ndarray | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = json.loads(value)
    array = np.asarray(value, dtype=np.float64)
    return array if array.size else None


def format_vector(vector: Sequence[float] | np.ndarray | None) -> str | None:
    if vector is None:
        return None
    return "[" + ",".join(str(float(v)) for v in vector) + "]"


def _row_to_embedding_set(row: dict) -> EmbeddingSet:
    return EmbeddingSet(
        user_id=row["user_id"],
        role=UserRole(row["user_type"]),
        profile=parse_vector(row.get("profile_embedding")),
        why_interested=parse_vector(row.get("why_interested_embedding")),
        hope_to_gain=parse_vector(row.get("hope_to_gain_embedding")),
    )


class EmbeddingRepository:
    """Persistence helpers for per-user embedding sets."""

    _SELECT = """
        SELECT
            user_id,
            user_type,
            profile_embedding::text AS profile_embedding,
            why_interested_embedding::text AS why_interested_embedding,
            hope_to_gain_embedding::text AS hope_to_gain_embedding
        FROM mentorship_embeddings
    """

    @classmethod
    async def get(cls, user_id: str, role: UserRole) -> EmbeddingSet | None:
        query = cls._SELECT + " WHERE user_id = %s AND user_type = %s LIMIT 1"
        row = await fetch_one(query, (user_id, role.value))
        return _row_to_embedding_set(row) if row else None

    @classmethod
    async def get_many(cls, user_ids: Iterable[str], role: UserRole) -> dict[str, EmbeddingSet]:
        ids = list(user_ids)
        if not ids:
            return {}

        query = cls._SELECT + " WHERE user_id = ANY(%s) AND user_type = %s"
        rows = await fetch_all(query, (ids, role.value))
        return {row["user_id"]: _row_to_embedding_set(row) for row in rows}

    @classmethod
    async def upsert(cls, embeddings: EmbeddingSet) -> None:
        """Create or update the set; a missing vector keeps the stored one."""
        query = """
            INSERT INTO mentorship_embeddings (
                user_id, user_type, profile_embedding,
                why_interested_embedding, hope_to_gain_embedding
            )
            VALUES (%s, %s, %s::vector, %s::vector, %s::vector)
            ON CONFLICT (user_id, user_type)
            DO UPDATE SET
                profile_embedding = COALESCE(
                    EXCLUDED.profile_embedding, mentorship_embeddings.profile_embedding
                ),
                why_interested_embedding = COALESCE(
                    EXCLUDED.why_interested_embedding,
                    mentorship_embeddings.why_interested_embedding
                ),
                hope_to_gain_embedding = COALESCE(
                    EXCLUDED.hope_to_gain_embedding, mentorship_embeddings.hope_to_gain_embedding
                ),
                updated_at = NOW()
        """
        await execute_query(
            query,
            (
                embeddings.user_id,
                embeddings.role.value,
                format_vector(embeddings.profile),
                format_vector(embeddings.why_interested),
                format_vector(embeddings.hope_to_gain),
            ),
        )
        logger.info(
            "Embeddings upserted",
            user_id=embeddings.user_id,
            role=embeddings.role.value,
        )
